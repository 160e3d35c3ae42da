# ABOUTME: Wire-level entities and request payloads for the ContextForge admin API
# ABOUTME: Dataclasses that decode API responses and encode create/update bodies

"""
Entities returned by the ContextForge API and the bodies sent to it.

=============================================================================
TWO FAMILIES OF DATACLASSES
=============================================================================

1. ENTITIES (Gateway, Server, Tool, Resource, Prompt, Root, Health)
   What the API returns. Each has a from_api_response() factory that pulls
   fields out of the decoded JSON with safe defaults, so an API that leaves
   out an empty field never causes a KeyError:

       {"id": "gw-1", "name": "a"}  ->  Gateway(id="gw-1", name="a", tags=[], ...)

2. PAYLOADS (GatewayCreate, ToolUpdate, ...)
   What we send. Every payload serializes through Payload.to_payload(),
   which drops fields left as None. None means "not declared"; a declared
   empty string or empty list is sent as-is.

=============================================================================
OPAQUE DOCUMENTS
=============================================================================

Some fields (gateway capabilities, tool input schema, prompt arguments) have
a structure defined by the remote service, not by us. They are carried as
JSONValue, the union of everything json.loads can produce, and passed
through untouched in both directions.

=============================================================================
WIRE NAMES
=============================================================================

The API is snake_case except for two MCP-derived fields: Tool "inputSchema"
and Resource "mimeType". Payload fields declare their wire name through
dataclass field metadata: field(default=None, metadata={"wire": "inputSchema"}).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Union

# Anything json.loads can return.
JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]


def _str(data: dict[str, Any], key: str) -> str:
    """String field, treating absent and null alike as ""."""
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise TypeError(f"{key}: expected a string, got {type(value).__name__}")
    return str(value)


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    """List-of-strings field; absent or null is an empty list."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"{key}: expected a list, got {type(value).__name__}")
    return [str(item) for item in value]


def _int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as err:
        raise ValueError(f"{key}: expected an integer, got {value!r}") from err


def _object(data: dict[str, Any], key: str) -> dict[str, JSONValue] | None:
    """JSON object field kept as-is; absent or null is None."""
    value = data.get(key)
    if value is not None and not isinstance(value, dict):
        raise TypeError(f"{key}: expected a JSON object, got {type(value).__name__}")
    return value


def _array(data: dict[str, Any], key: str) -> list[JSONValue]:
    """JSON array field; absent or null is an empty list."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"{key}: expected a JSON array, got {type(value).__name__}")
    return list(value)


# =============================================================================
# PAYLOAD BASE
# =============================================================================


@dataclass
class Payload:
    """
    Base for request bodies.

    to_payload() walks the dataclass fields:
    - None values are skipped, unless the field is marked {"always": True}
    - nested payloads are serialized recursively
    - the key is the field's "wire" metadata, or its Python name
    """

    def to_payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and not f.metadata.get("always"):
                continue
            if isinstance(value, Payload):
                value = value.to_payload()
            body[f.metadata.get("wire", f.name)] = value
        return body


# =============================================================================
# HEALTH
# =============================================================================


@dataclass
class Health:
    """Response of GET /health."""

    status: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Health:
        return cls(status=_str(data, "status"))


# =============================================================================
# GATEWAY
# =============================================================================


@dataclass
class HealthCheck(Payload):
    """
    Health-check settings of a gateway.

    Used in both directions: nested inside create/update bodies and decoded
    from responses. Interval, timeout and retries are whole seconds/counts.
    """

    url: str | None = None
    interval: int | None = None
    timeout: int | None = None
    retries: int | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> HealthCheck:
        return cls(
            url=_str(data, "url"),
            interval=_int(data, "interval"),
            timeout=_int(data, "timeout"),
            retries=_int(data, "retries"),
        )


@dataclass
class Gateway:
    """
    A federated upstream gateway registered with ContextForge.

    auth_value is listed for completeness, but the API does not echo
    credentials back, so it is normally "".
    """

    id: str
    name: str
    url: str
    description: str = ""
    transport: str = ""
    capabilities: dict[str, JSONValue] | None = None
    health_check: HealthCheck | None = None
    is_active: bool = False
    tags: list[str] = field(default_factory=list)
    passthrough_headers: list[str] = field(default_factory=list)
    auth_type: str = ""
    auth_value: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Gateway:
        health_check = data.get("health_check")
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            url=_str(data, "url"),
            description=_str(data, "description"),
            transport=_str(data, "transport"),
            capabilities=_object(data, "capabilities"),
            health_check=(
                HealthCheck.from_api_response(health_check)
                if isinstance(health_check, dict)
                else None
            ),
            is_active=bool(data.get("is_active", False)),
            tags=_str_list(data, "tags"),
            passthrough_headers=_str_list(data, "passthrough_headers"),
            auth_type=_str(data, "auth_type"),
            auth_value=_str(data, "auth_value"),
            created_at=_str(data, "created_at"),
            updated_at=_str(data, "updated_at"),
        )


@dataclass
class GatewayCreate(Payload):
    """Body of POST /gateways. Flat, no envelope; is_active is always sent."""

    name: str
    url: str
    description: str | None = None
    transport: str | None = None
    capabilities: dict[str, JSONValue] | None = None
    health_check: HealthCheck | None = None
    is_active: bool = field(default=True, metadata={"always": True})
    tags: list[str] | None = None
    passthrough_headers: list[str] | None = None
    auth_type: str | None = None
    auth_value: str | None = None


@dataclass
class GatewayUpdate(Payload):
    """Body of PUT /gateways/{id}. Every field is optional."""

    name: str | None = None
    url: str | None = None
    description: str | None = None
    transport: str | None = None
    capabilities: dict[str, JSONValue] | None = None
    health_check: HealthCheck | None = None
    is_active: bool | None = None
    tags: list[str] | None = None
    passthrough_headers: list[str] | None = None
    auth_type: str | None = None
    auth_value: str | None = None


# =============================================================================
# SERVER
# =============================================================================


@dataclass
class Server:
    """A virtual server grouping tools, resources and prompts."""

    id: str
    name: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    tool_ids: list[str] = field(default_factory=list)
    visibility: str = ""
    team_id: str = ""
    status: str = ""
    is_active: bool = False
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Server:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            tags=_str_list(data, "tags"),
            tool_ids=_str_list(data, "tool_ids"),
            visibility=_str(data, "visibility"),
            team_id=_str(data, "team_id"),
            status=_str(data, "status"),
            is_active=bool(data.get("is_active", False)),
            created_at=_str(data, "created_at"),
            updated_at=_str(data, "updated_at"),
        )


@dataclass
class ServerCreate(Payload):
    """Fields of POST /servers. visibility and team_id travel beside the envelope."""

    name: str
    description: str | None = None
    tags: list[str] | None = None
    tool_ids: list[str] | None = None
    visibility: str | None = None
    team_id: str | None = None


@dataclass
class ServerUpdate(Payload):
    name: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    tool_ids: list[str] | None = None
    visibility: str | None = None


# =============================================================================
# TOOL
# =============================================================================


@dataclass
class Tool:
    """An invocable tool definition with a JSON-schema input description."""

    id: str
    name: str
    description: str = ""
    input_schema: dict[str, JSONValue] | None = None
    tags: list[str] = field(default_factory=list)
    is_active: bool = False
    gateway_id: str = ""
    visibility: str = ""
    team_id: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Tool:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            input_schema=_object(data, "inputSchema"),
            tags=_str_list(data, "tags"),
            is_active=bool(data.get("is_active", False)),
            gateway_id=_str(data, "gateway_id"),
            visibility=_str(data, "visibility"),
            team_id=_str(data, "team_id"),
            created_at=_str(data, "created_at"),
            updated_at=_str(data, "updated_at"),
        )


@dataclass
class ToolCreate(Payload):
    name: str
    description: str | None = None
    input_schema: dict[str, JSONValue] | None = field(default=None, metadata={"wire": "inputSchema"})
    tags: list[str] | None = None
    visibility: str | None = None
    team_id: str | None = None


@dataclass
class ToolUpdate(Payload):
    name: str | None = None
    description: str | None = None
    input_schema: dict[str, JSONValue] | None = field(default=None, metadata={"wire": "inputSchema"})
    tags: list[str] | None = None
    visibility: str | None = None


# =============================================================================
# RESOURCE
# =============================================================================


@dataclass
class Resource:
    """An MCP resource: addressable content identified by URI."""

    id: str
    uri: str
    name: str
    description: str = ""
    mime_type: str = ""
    tags: list[str] = field(default_factory=list)
    is_active: bool = False
    visibility: str = ""
    team_id: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Resource:
        return cls(
            id=_str(data, "id"),
            uri=_str(data, "uri"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            mime_type=_str(data, "mimeType"),
            tags=_str_list(data, "tags"),
            is_active=bool(data.get("is_active", False)),
            visibility=_str(data, "visibility"),
            team_id=_str(data, "team_id"),
            created_at=_str(data, "created_at"),
            updated_at=_str(data, "updated_at"),
        )


@dataclass
class ResourceCreate(Payload):
    uri: str
    name: str
    description: str | None = None
    mime_type: str | None = field(default=None, metadata={"wire": "mimeType"})
    tags: list[str] | None = None
    visibility: str | None = None
    team_id: str | None = None


@dataclass
class ResourceUpdate(Payload):
    uri: str | None = None
    name: str | None = None
    description: str | None = None
    mime_type: str | None = field(default=None, metadata={"wire": "mimeType"})
    tags: list[str] | None = None
    visibility: str | None = None


# =============================================================================
# PROMPT
# =============================================================================


@dataclass
class Prompt:
    """
    A prompt template.

    arguments is kept as the raw list of argument objects, each normally
    {"name": ..., "description": ..., "required": ...}. Keys the service
    adds later are preserved rather than dropped.
    """

    id: str
    name: str
    description: str = ""
    arguments: list[JSONValue] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    is_active: bool = False
    visibility: str = ""
    team_id: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Prompt:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            arguments=_array(data, "arguments"),
            tags=_str_list(data, "tags"),
            is_active=bool(data.get("is_active", False)),
            visibility=_str(data, "visibility"),
            team_id=_str(data, "team_id"),
            created_at=_str(data, "created_at"),
            updated_at=_str(data, "updated_at"),
        )


@dataclass
class PromptCreate(Payload):
    name: str
    description: str | None = None
    arguments: list[JSONValue] | None = None
    tags: list[str] | None = None
    visibility: str | None = None
    team_id: str | None = None


@dataclass
class PromptUpdate(Payload):
    name: str | None = None
    description: str | None = None
    arguments: list[JSONValue] | None = None
    tags: list[str] | None = None
    visibility: str | None = None


# =============================================================================
# ROOT
# =============================================================================


@dataclass
class Root:
    """A filesystem/URI boundary. The URI is the identity; there is no server ID."""

    uri: str
    name: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Root:
        return cls(uri=_str(data, "uri"), name=_str(data, "name"))


@dataclass
class RootCreate(Payload):
    """Body of POST /roots. Roots have no update body."""

    uri: str
    name: str | None = None
