# ABOUTME: Managed MCP resource: declared shape, schema and API mapping
# ABOUTME: Named mcp_resource so it is not confused with the generic "managed resource"

"""contextforge_resource: addressable MCP content identified by URI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from contextforge_iac.resources.base import ResourceKind
from contextforge_iac.schema import (
    Attribute,
    DeclaredModel,
    Mode,
    Schema,
    Visibility,
    common_attributes,
)
from contextforge_iac.utils.models import Resource, ResourceCreate, ResourceUpdate

if TYPE_CHECKING:
    from contextforge_iac.utils.client import ContextForgeClient


class ResourceModel(DeclaredModel):
    id: str | None = Field(default=None, description="Resource identifier, assigned by the API.")
    uri: str | None = Field(default=None, description="URI of the resource.")
    name: str | None = Field(default=None, description="Name of the resource.")
    description: str | None = Field(default=None, description="Description of the resource.")
    mime_type: str | None = Field(default=None, description="MIME type of the resource content.")
    tags: list[str] | None = Field(default=None, description="Tags associated with the resource.")
    visibility: Visibility | None = Field(
        default=None, description="Visibility of the resource: public, private or team."
    )
    team_id: str | None = Field(default=None, description="Team that owns the resource.")
    is_active: bool | None = Field(default=None, description="Whether the resource is active.")
    created_at: str | None = Field(
        default=None, description="Timestamp when the resource was created."
    )
    updated_at: str | None = Field(
        default=None, description="Timestamp when the resource was last updated."
    )


RESOURCE_SCHEMA = Schema(
    description="Manages an MCP resource on the ContextForge MCP Gateway.",
    attributes=(
        Attribute("id", Mode.COMPUTED),
        Attribute("uri", Mode.REQUIRED),
        Attribute("name", Mode.REQUIRED),
        Attribute("description", Mode.OPTIONAL_COMPUTED),
        Attribute("mime_type", Mode.OPTIONAL_COMPUTED),
        Attribute("tags", Mode.OPTIONAL_COMPUTED),
        Attribute("visibility", Mode.OPTIONAL_COMPUTED),
        Attribute("team_id", Mode.OPTIONAL_COMPUTED),
        *common_attributes(),
    ),
)


async def _create(client: ContextForgeClient, plan: ResourceModel) -> Resource:
    return await client.create_resource(
        ResourceCreate(
            uri=plan.uri or "",
            name=plan.name or "",
            description=plan.description,
            mime_type=plan.mime_type,
            tags=plan.tags,
            visibility=plan.visibility,
            team_id=plan.team_id,
        )
    )


async def _fetch(client: ContextForgeClient, identity: str) -> Resource | None:
    return await client.get_resource(identity)


async def _update(client: ContextForgeClient, identity: str, plan: ResourceModel) -> Resource:
    return await client.update_resource(
        identity,
        ResourceUpdate(
            uri=plan.uri,
            name=plan.name,
            description=plan.description,
            mime_type=plan.mime_type,
            tags=plan.tags,
            visibility=plan.visibility,
        ),
    )


async def _delete(client: ContextForgeClient, identity: str) -> None:
    await client.delete_resource(identity)


def resource_to_model(resource: Resource) -> ResourceModel:
    return ResourceModel.model_construct(
        id=resource.id,
        uri=resource.uri,
        name=resource.name,
        description=resource.description,
        mime_type=resource.mime_type,
        tags=list(resource.tags),
        visibility=resource.visibility or None,
        team_id=resource.team_id,
        is_active=resource.is_active,
        created_at=resource.created_at,
        updated_at=resource.updated_at,
    )


RESOURCE: ResourceKind[ResourceModel, Resource] = ResourceKind(
    name="resource",
    type_name="contextforge_resource",
    model=ResourceModel,
    schema=RESOURCE_SCHEMA,
    identity="id",
    create=_create,
    fetch=_fetch,
    update=_update,
    delete=_delete,
    to_model=resource_to_model,
)
