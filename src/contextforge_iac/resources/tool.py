# ABOUTME: Managed tool resource: declared shape, schema and API mapping
# ABOUTME: The input schema travels as JSON text in configuration and as an object on the wire

"""
contextforge_tool: an invocable tool definition.

input_schema is declared as JSON text and sent as the API's "inputSchema"
object. On the way back it is re-encoded canonically, so key order in the
declared text does not matter.
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
from contextforge_iac.utils.models import Tool, ToolCreate, ToolUpdate

if TYPE_CHECKING:
    from contextforge_iac.utils.client import ContextForgeClient


class ToolModel(DeclaredModel):
    id: str | None = Field(default=None, description="Tool identifier, assigned by the API.")
    name: str | None = Field(default=None, description="Name of the tool.")
    description: str | None = Field(default=None, description="Description of the tool.")
    input_schema: str | None = Field(
        default=None, description="JSON-encoded input schema for the tool."
    )
    tags: list[str] | None = Field(default=None, description="Tags associated with the tool.")
    visibility: Visibility | None = Field(
        default=None, description="Visibility of the tool: public, private or team."
    )
    team_id: str | None = Field(default=None, description="Team that owns the tool.")
    gateway_id: str | None = Field(
        default=None, description="Gateway the tool was federated from, if any."
    )
    is_active: bool | None = Field(default=None, description="Whether the tool is active.")
    created_at: str | None = Field(default=None, description="Timestamp when the tool was created.")
    updated_at: str | None = Field(
        default=None, description="Timestamp when the tool was last updated."
    )

    @field_validator("input_schema")
    @classmethod
    def validate_input_schema(cls, v: str | None) -> str | None:
        return json_document(v, "object", "input_schema")


TOOL_SCHEMA = Schema(
    description="Manages a tool on the ContextForge MCP Gateway.",
    attributes=(
        Attribute("id", Mode.COMPUTED),
        Attribute("name", Mode.REQUIRED),
        Attribute("description", Mode.OPTIONAL_COMPUTED),
        Attribute("input_schema", Mode.OPTIONAL_COMPUTED),
        Attribute("tags", Mode.OPTIONAL_COMPUTED),
        Attribute("visibility", Mode.OPTIONAL_COMPUTED),
        Attribute("team_id", Mode.OPTIONAL_COMPUTED),
        Attribute("gateway_id", Mode.COMPUTED),
        *common_attributes(),
    ),
)


def _input_schema(plan: ToolModel) -> dict | None:
    return decode_document("input_schema", plan.input_schema)  # type: ignore[return-value]


async def _create(client: ContextForgeClient, plan: ToolModel) -> Tool:
    return await client.create_tool(
        ToolCreate(
            name=plan.name or "",
            description=plan.description,
            input_schema=_input_schema(plan),
            tags=plan.tags,
            visibility=plan.visibility,
            team_id=plan.team_id,
        )
    )


async def _fetch(client: ContextForgeClient, identity: str) -> Tool | None:
    return await client.get_tool(identity)


async def _update(client: ContextForgeClient, identity: str, plan: ToolModel) -> Tool:
    return await client.update_tool(
        identity,
        ToolUpdate(
            name=plan.name,
            description=plan.description,
            input_schema=_input_schema(plan),
            tags=plan.tags,
            visibility=plan.visibility,
        ),
    )


async def _delete(client: ContextForgeClient, identity: str) -> None:
    await client.delete_tool(identity)


def tool_to_model(tool: Tool) -> ToolModel:
    return ToolModel.model_construct(
        id=tool.id,
        name=tool.name,
        description=tool.description,
        input_schema=(
            encode_document("input_schema", tool.input_schema)
            if tool.input_schema is not None
            else None
        ),
        tags=list(tool.tags),
        visibility=tool.visibility or None,
        team_id=tool.team_id,
        gateway_id=tool.gateway_id,
        is_active=tool.is_active,
        created_at=tool.created_at,
        updated_at=tool.updated_at,
    )


TOOL: ResourceKind[ToolModel, Tool] = ResourceKind(
    name="tool",
    type_name="contextforge_tool",
    model=ToolModel,
    schema=TOOL_SCHEMA,
    identity="id",
    create=_create,
    fetch=_fetch,
    update=_update,
    delete=_delete,
    to_model=tool_to_model,
)
