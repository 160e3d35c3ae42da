# ABOUTME: Managed root resource: URI-identified, create and delete only
# ABOUTME: Reads list every root and scan for the URI since the API has no item GET

"""
contextforge_root: a filesystem/URI boundary.

The URI IS the identity, and both attributes force replacement when they
change. There is no update: ManagedResource.update() raises
UnsupportedOperationError because this kind declares update=None.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from contextforge_iac.resources.base import ResourceKind
from contextforge_iac.schema import Attribute, DeclaredModel, Mode, Schema
from contextforge_iac.utils.models import Root, RootCreate

if TYPE_CHECKING:
    from contextforge_iac.utils.client import ContextForgeClient


class RootModel(DeclaredModel):
    uri: str | None = Field(
        default=None, description="URI of the root. Serves as the unique identifier."
    )
    name: str | None = Field(default=None, description="Name of the root.")


ROOT_SCHEMA = Schema(
    description="Manages a root on the ContextForge MCP Gateway.",
    attributes=(
        Attribute("uri", Mode.REQUIRED, requires_replace=True),
        Attribute("name", Mode.OPTIONAL, requires_replace=True),
    ),
)


async def _create(client: ContextForgeClient, plan: RootModel) -> Root:
    return await client.create_root(RootCreate(uri=plan.uri or "", name=plan.name))


async def find_root(client: ContextForgeClient, uri: str) -> Root | None:
    """List roots and return the one with this URI, if any."""
    for root in await client.list_roots():
        if root.uri == uri:
            return root
    return None


async def _delete(client: ContextForgeClient, identity: str) -> None:
    await client.delete_root(identity)


def root_to_model(root: Root) -> RootModel:
    return RootModel.model_construct(uri=root.uri, name=root.name or None)


ROOT: ResourceKind[RootModel, Root] = ResourceKind(
    name="root",
    type_name="contextforge_root",
    model=RootModel,
    schema=ROOT_SCHEMA,
    identity="uri",
    create=_create,
    fetch=find_root,
    update=None,
    delete=_delete,
    to_model=root_to_model,
)
