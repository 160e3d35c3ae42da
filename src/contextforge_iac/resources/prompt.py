# ABOUTME: Managed prompt resource: declared shape, schema and API mapping
# ABOUTME: Prompt arguments are declared as a JSON array of {name, description, required} objects

"""
contextforge_prompt: a parameterized prompt template.

    arguments = '[{"name": "topic", "description": "What to summarize", "required": true}]'

Every argument must be an object with a string "name"; anything else is
rejected before the request is sent. Argument order is preserved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator

from contextforge_iac.resources.base import ResourceKind
from contextforge_iac.schema import (
    Attribute,
    DeclaredModel,
    Mode,
    Schema,
    Visibility,
    common_attributes,
    decode_document,
    encode_document,
    json_document,
)
from contextforge_iac.utils.models import JSONValue, Prompt, PromptCreate, PromptUpdate

if TYPE_CHECKING:
    from contextforge_iac.utils.client import ContextForgeClient


def check_arguments(value: JSONValue) -> str | None:
    """Every argument must be an object carrying a string name."""
    for index, argument in enumerate(value or []):  # type: ignore[arg-type]
        if not isinstance(argument, dict):
            return f"argument {index} must be a JSON object"
        if not isinstance(argument.get("name"), str):
            return f'argument {index} must have a string "name"'
    return None


class PromptModel(DeclaredModel):
    id: str | None = Field(default=None, description="Prompt identifier, assigned by the API.")
    name: str | None = Field(default=None, description="Name of the prompt.")
    description: str | None = Field(default=None, description="Description of the prompt.")
    arguments: str | None = Field(
        default=None, description="JSON-encoded arguments array for the prompt."
    )
    tags: list[str] | None = Field(default=None, description="Tags associated with the prompt.")
    visibility: Visibility | None = Field(
        default=None, description="Visibility of the prompt: public, private or team."
    )
    team_id: str | None = Field(default=None, description="Team that owns the prompt.")
    is_active: bool | None = Field(default=None, description="Whether the prompt is active.")
    created_at: str | None = Field(
        default=None, description="Timestamp when the prompt was created."
    )
    updated_at: str | None = Field(
        default=None, description="Timestamp when the prompt was last updated."
    )

    @field_validator("arguments")
    @classmethod
    def validate_arguments(cls, v: str | None) -> str | None:
        return json_document(v, "array", "arguments", check=check_arguments)


PROMPT_SCHEMA = Schema(
    description="Manages a prompt on the ContextForge MCP Gateway.",
    attributes=(
        Attribute("id", Mode.COMPUTED),
        Attribute("name", Mode.REQUIRED),
        Attribute("description", Mode.OPTIONAL_COMPUTED),
        Attribute("arguments", Mode.OPTIONAL_COMPUTED),
        Attribute("tags", Mode.OPTIONAL_COMPUTED),
        Attribute("visibility", Mode.OPTIONAL_COMPUTED),
        Attribute("team_id", Mode.OPTIONAL_COMPUTED),
        *common_attributes(),
    ),
)


def _arguments(plan: PromptModel) -> list | None:
    return decode_document("arguments", plan.arguments)  # type: ignore[return-value]


async def _create(client: ContextForgeClient, plan: PromptModel) -> Prompt:
    return await client.create_prompt(
        PromptCreate(
            name=plan.name or "",
            description=plan.description,
            arguments=_arguments(plan),
            tags=plan.tags,
            visibility=plan.visibility,
            team_id=plan.team_id,
        )
    )


async def _fetch(client: ContextForgeClient, identity: str) -> Prompt | None:
    return await client.get_prompt(identity)


async def _update(client: ContextForgeClient, identity: str, plan: PromptModel) -> Prompt:
    return await client.update_prompt(
        identity,
        PromptUpdate(
            name=plan.name,
            description=plan.description,
            arguments=_arguments(plan),
            tags=plan.tags,
            visibility=plan.visibility,
        ),
    )


async def _delete(client: ContextForgeClient, identity: str) -> None:
    await client.delete_prompt(identity)


def prompt_to_model(prompt: Prompt) -> PromptModel:
    return PromptModel.model_construct(
        id=prompt.id,
        name=prompt.name,
        description=prompt.description,
        # No arguments reads back as "[]", not as unset.
        arguments=encode_document("arguments", prompt.arguments),
        tags=list(prompt.tags),
        visibility=prompt.visibility or None,
        team_id=prompt.team_id,
        is_active=prompt.is_active,
        created_at=prompt.created_at,
        updated_at=prompt.updated_at,
    )


PROMPT: ResourceKind[PromptModel, Prompt] = ResourceKind(
    name="prompt",
    type_name="contextforge_prompt",
    model=PromptModel,
    schema=PROMPT_SCHEMA,
    identity="id",
    create=_create,
    fetch=_fetch,
    update=_update,
    delete=_delete,
    to_model=prompt_to_model,
)
