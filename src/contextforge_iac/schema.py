# ABOUTME: Declared attribute schemas and local validation for managed resources
# ABOUTME: Checks required fields, closed vocabularies and JSON documents before any network call

"""
Declared schema for each managed resource kind.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

Every resource kind declares its shape twice, each half doing what it is
good at:

1. A pydantic model (ToolModel, GatewayModel, ...) holds the attribute
   TYPES: closed vocabularies as Literal, JSON text checked by a
   field_validator, descriptions in Field(). Every field is optional, so
   the same class serves as plan, state and import stub.

2. A Schema made of Attribute entries holds what pydantic does not model:
   how the attribute may be supplied (Mode), whether the API ever returns
   it (write_only), whether changing it forces replacement, and create-time
   defaults.

The reconciler asks the schema four questions:

1. IS THIS PLAN VALID?          Schema.validate(plan)
2. WHAT DO UNSET FIELDS MEAN?   Schema.apply_defaults(plan)
3. CAN THIS CHANGE BE IN PLACE? Schema.requires_replace(state, plan)
4. WHAT NEVER COMES BACK?       Schema.write_only

Validation happens BEFORE any HTTP request. A plan that fails it has not
touched the remote service. pydantic's ValidationError never escapes: it
is turned into SchemaValidationError naming the first bad attribute.

=============================================================================
ATTRIBUTE MODES
=============================================================================

    required            Must be set in configuration          (name)
    optional            May be set; never filled in by the API (root name)
    computed            Only ever set by the API              (id, created_at)
    optional+computed   May be set; the API fills it if not   (description)

=============================================================================
JSON DOCUMENTS
=============================================================================

Gateway capabilities, tool input schema and prompt arguments are declared as
JSON-encoded TEXT so operators can write any nested structure:

    input_schema = '{"type": "object", "properties": {"q": {"type": "string"}}}'

json_document() is the field-validator body that checks that text.
decode_document() parses it for the request body. encode_document() turns
the API's structure back into text, canonically (sorted keys, no
whitespace), so that two reads of the same document always compare equal.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, TypeVar, get_args

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic_core import PydanticCustomError

from contextforge_iac.errors import SchemaValidationError, SerializationError
from contextforge_iac.utils.models import JSONValue

Visibility = Literal["public", "private", "team"]
Transport = Literal["STREAMABLEHTTP", "SSE", "STDIO"]

VISIBILITIES: tuple[str, ...] = get_args(Visibility)
TRANSPORTS: tuple[str, ...] = get_args(Transport)

M = TypeVar("M", bound=BaseModel)


class Mode(str, Enum):
    """How an attribute may be supplied."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    COMPUTED = "computed"
    OPTIONAL_COMPUTED = "optional+computed"


class DeclaredModel(BaseModel):
    """
    Base for the declared shape of a resource kind.

    Every field defaults to None, meaning "not set". Unknown attributes are
    rejected rather than silently dropped.
    """

    model_config = ConfigDict(extra="forbid")


@dataclass(frozen=True)
class Attribute:
    """
    Reconciler metadata for one declared attribute.

    FIELDS:
    -------
    - name: Field name on the declared model
    - mode: See Mode
    - default: Create-time value when the plan leaves it unset
    - write_only: Never returned by the API; carried forward locally
    - requires_replace: A change forces destroy-and-recreate
    """

    name: str
    mode: Mode
    default: Any = None
    write_only: bool = False
    requires_replace: bool = False

    @property
    def configurable(self) -> bool:
        return self.mode is not Mode.COMPUTED


def _title(name: str) -> str:
    """Human name: "input_schema" -> "Input Schema"."""
    return name.replace("_", " ").title()


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


def validation_error(err: ValidationError) -> SchemaValidationError:
    """
    Translate the first pydantic error into a SchemaValidationError.

        visibility: Input should be 'public', 'private' or 'team', got: "secret"
    """
    first = err.errors(include_url=False)[0]
    attribute = ".".join(str(part) for part in first["loc"]) or "value"
    if first["type"] == "json_document":
        return SchemaValidationError(attribute, first["msg"], summary=f"Invalid {_title(attribute)}")
    detail = first["msg"]
    if first["type"] == "literal_error":
        detail = f'{detail}, got: "{first["input"]}"'
    return SchemaValidationError(attribute, detail)


def parse_model(model: type[M], values: Mapping[str, Any]) -> M:
    """
    Build a declared model from raw configuration values.

    Raises:
        SchemaValidationError: If any value has the wrong type or shape
    """
    try:
        return model.model_validate(dict(values))
    except ValidationError as err:
        raise validation_error(err) from err


# =============================================================================
# JSON DOCUMENT HELPERS
# =============================================================================


def json_document(
    text: str | None,
    kind: str,
    name: str,
    check: Callable[[JSONValue], str | None] | None = None,
) -> str | None:
    """
    Check JSON-encoded attribute text; used inside field validators.

    Unset and empty text both mean "not declared" and pass. The text itself
    is returned unchanged, since the declared value is the text.

    Raises:
        PydanticCustomError: type "json_document", if the text is not JSON,
            not the declared kind ("object" or "array"), or fails `check`
    """
    if not text:
        return text
    try:
        value = json.loads(text)
    except ValueError as err:
        raise PydanticCustomError(
            "json_document",
            "Unable to parse {name} JSON: {error}",
            {"name": name, "error": str(err)},
        ) from err

    expected = {"object": dict, "array": list}[kind]
    if not isinstance(value, expected):
        raise PydanticCustomError(
            "json_document",
            "expected a JSON {kind}, got {actual}",
            {"kind": kind, "actual": type(value).__name__},
        )
    if check is not None:
        problem = check(value)
        if problem:
            raise PydanticCustomError("json_document", "{problem}", {"problem": problem})
    return text


def decode_document(name: str, text: str | None) -> JSONValue:
    """
    Parse validated JSON text for a request body.

    Unset and empty text both decode to None.

    Raises:
        SchemaValidationError: If the text is not JSON (a model built
            without validation can still reach here)
    """
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError as err:
        raise SchemaValidationError(
            name,
            f"Unable to parse {name} JSON: {err}",
            summary=f"Invalid {_title(name)}",
        ) from err


def encode_document(name: str, value: JSONValue) -> str:
    """
    Canonical JSON text for a document returned by the API.

        {"b": 1, "a": [1, 2]}  ->  '{"a":[1,2],"b":1}'

    Raises:
        SerializationError: If the value cannot be represented as JSON
    """
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as err:
        raise SerializationError(
            "Serialization Error",
            f"Unable to serialize {name} to JSON: {err}",
        ) from err


# =============================================================================
# SCHEMA
# =============================================================================


@dataclass(frozen=True)
class Schema:
    """Reconciler metadata for every attribute of one resource kind."""

    description: str
    attributes: tuple[Attribute, ...]

    def __getitem__(self, name: str) -> Attribute:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        raise KeyError(name)

    @property
    def write_only(self) -> tuple[str, ...]:
        return tuple(a.name for a in self.attributes if a.write_only)

    def validate(self, model: BaseModel) -> None:
        """
        Check a planned model.

        CHECKS (first failure wins):
        ----------------------------
        - required attributes are set
        - every value passes the model's own field validation again, so a
          model built with model_construct() or mutated after construction
          is caught too

        Raises:
            SchemaValidationError: Describing the first invalid attribute
        """
        for attribute in self.attributes:
            if attribute.mode is Mode.REQUIRED and getattr(model, attribute.name, None) is None:
                raise SchemaValidationError(
                    attribute.name,
                    "attribute is required",
                    summary="Missing Required Attribute",
                )
        try:
            type(model).model_validate(dict(model))
        except ValidationError as err:
            raise validation_error(err) from err

    def apply_defaults(self, model: M) -> M:
        """
        Return a copy of the model with create-time defaults filled in.

        Only attributes left unset (None) are touched.
        """
        changes = {
            a.name: a.default
            for a in self.attributes
            if a.default is not None and getattr(model, a.name, None) is None
        }
        return model.model_copy(update=changes) if changes else model

    def requires_replace(self, state: Any, plan: Any) -> list[str]:
        """
        Names of replacement-forcing attributes whose value changes.

        An optional+computed attribute left unset in the plan keeps its
        current value, so it is not a change. A plain optional attribute
        going from set to unset is.
        """
        if state is None:
            return []
        changed = []
        for attribute in self.attributes:
            if not attribute.requires_replace:
                continue
            planned = getattr(plan, attribute.name, None)
            current = getattr(state, attribute.name, None)
            if planned is None and attribute.mode is Mode.OPTIONAL_COMPUTED:
                continue
            if planned != current:
                changed.append(attribute.name)
        return changed


def common_attributes() -> tuple[Attribute, ...]:
    """Computed attributes every server-identified kind carries."""
    return (
        Attribute("is_active", Mode.COMPUTED),
        Attribute("created_at", Mode.COMPUTED),
        Attribute("updated_at", Mode.COMPUTED),
    )
