# ABOUTME: Managed virtual server resource: declared shape, schema and API mapping
# ABOUTME: Servers group tools by ID and are created inside a "server" envelope

"""contextforge_server: a virtual server exposing a set of tools as one unit."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from contextforge_iac.resources.base import ResourceKind
from contextforge_iac.schema import Attribute, DeclaredModel, Mode, Schema, Visibility, common_attributes
from contextforge_iac.utils.models import Server, ServerCreate, ServerUpdate

if TYPE_CHECKING:
    from contextforge_iac.utils.client import ContextForgeClient


class ServerModel(DeclaredModel):
    id: str | None = Field(default=None, description="Server identifier, assigned by the API.")
    name: str | None = Field(default=None, description="Name of the server.")
    description: str | None = Field(default=None, description="Description of the server.")
    tags: list[str] | None = Field(default=None, description="Tags associated with the server.")
    tool_ids: list[str] | None = Field(default=None, description="IDs of the tools the server exposes.")
    visibility: Visibility | None = Field(
        default=None, description="Visibility of the server: public, private or team."
    )
    team_id: str | None = Field(default=None, description="Team that owns the server.")
    status: str | None = Field(default=None, description="Status reported by the API.")
    is_active: bool | None = Field(default=None, description="Whether the server is active.")
    created_at: str | None = Field(default=None, description="Timestamp when the server was created.")
    updated_at: str | None = Field(default=None, description="Timestamp when the server was last updated.")


SERVER_SCHEMA = Schema(
    description="Manages a virtual server on the ContextForge MCP Gateway.",
    attributes=(
        Attribute("id", Mode.COMPUTED),
        Attribute("name", Mode.REQUIRED),
        Attribute("description", Mode.OPTIONAL_COMPUTED),
        Attribute("tags", Mode.OPTIONAL_COMPUTED),
        Attribute("tool_ids", Mode.OPTIONAL_COMPUTED),
        Attribute("visibility", Mode.OPTIONAL_COMPUTED),
        Attribute("team_id", Mode.OPTIONAL_COMPUTED),
        Attribute("status", Mode.COMPUTED),
        *common_attributes(),
    ),
)


async def _create(client: ContextForgeClient, plan: ServerModel) -> Server:
    return await client.create_server(
        ServerCreate(
            name=plan.name or "",
            description=plan.description,
            tags=plan.tags,
            tool_ids=plan.tool_ids,
            visibility=plan.visibility,
            team_id=plan.team_id,
        )
    )


async def _fetch(client: ContextForgeClient, identity: str) -> Server | None:
    return await client.get_server(identity)


async def _update(client: ContextForgeClient, identity: str, plan: ServerModel) -> Server:
    return await client.update_server(
        identity,
        ServerUpdate(
            name=plan.name,
            description=plan.description,
            tags=plan.tags,
            tool_ids=plan.tool_ids,
            visibility=plan.visibility,
        ),
    )


async def _delete(client: ContextForgeClient, identity: str) -> None:
    await client.delete_server(identity)


def server_to_model(server: Server) -> ServerModel:
    return ServerModel.model_construct(
        id=server.id,
        name=server.name,
        description=server.description,
        tags=list(server.tags),
        tool_ids=list(server.tool_ids),
        visibility=server.visibility or None,
        team_id=server.team_id,
        status=server.status,
        is_active=server.is_active,
        created_at=server.created_at,
        updated_at=server.updated_at,
    )


SERVER: ResourceKind[ServerModel, Server] = ResourceKind(
    name="server",
    type_name="contextforge_server",
    model=ServerModel,
    schema=SERVER_SCHEMA,
    identity="id",
    create=_create,
    fetch=_fetch,
    update=_update,
    delete=_delete,
    to_model=server_to_model,
)
