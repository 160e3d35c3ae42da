# ABOUTME: Managed gateway resource: declared shape, schema and API mapping
# ABOUTME: Carries the write-only auth_value forward because the API never returns it

"""
contextforge_gateway: a federated upstream gateway.

Declared shape flattens the API's nested health_check object into four
health_check_* attributes and carries capabilities as JSON text.

MAPPING QUIRKS:
---------------
- is_active defaults to True at create time, matching the API's own
  default, so the next read does not show drift.
- auth_type / auth_value come back as "" when unset; they map to None.
- auth_value is write-only: restored from plan or prior state.
- No health_check in the response nulls all four health_check_* attributes.
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
    Transport,
    decode_document,
    encode_document,
    json_document,
)
from contextforge_iac.utils.models import Gateway, GatewayCreate, GatewayUpdate, HealthCheck

if TYPE_CHECKING:
    from contextforge_iac.utils.client import ContextForgeClient


class GatewayModel(DeclaredModel):
    """Declared shape of contextforge_gateway. auth_value is kept out of repr."""

    id: str | None = Field(default=None, description="Gateway identifier, assigned by the API.")
    name: str | None = Field(default=None, description="Name of the gateway.")
    url: str | None = Field(default=None, description="The gateway URL.")
    description: str | None = Field(default=None, description="Description of the gateway.")
    transport: Transport | None = Field(
        default=None, description="Transport protocol for the gateway (e.g. STREAMABLEHTTP)."
    )
    capabilities: str | None = Field(
        default=None, description="Gateway capabilities as a JSON-encoded string."
    )
    health_check_url: str | None = Field(default=None, description="Health check URL for the gateway.")
    health_check_interval: int | None = Field(
        default=None, ge=0, description="Health check interval in seconds."
    )
    health_check_timeout: int | None = Field(
        default=None, ge=0, description="Health check timeout in seconds."
    )
    health_check_retries: int | None = Field(
        default=None, ge=0, description="Number of health check retries."
    )
    is_active: bool | None = Field(default=None, description="Whether the gateway is active.")
    tags: list[str] | None = Field(default=None, description="Tags associated with the gateway.")
    passthrough_headers: list[str] | None = Field(
        default=None, description="Headers to pass through to the gateway."
    )
    auth_type: str | None = Field(default=None, description="Authentication type for the gateway.")
    auth_value: str | None = Field(
        default=None, repr=False, description="Authentication value for the gateway."
    )
    created_at: str | None = Field(default=None, description="Timestamp when the gateway was created.")
    updated_at: str | None = Field(
        default=None, description="Timestamp when the gateway was last updated."
    )

    @field_validator("capabilities")
    @classmethod
    def validate_capabilities(cls, v: str | None) -> str | None:
        return json_document(v, "object", "capabilities")


GATEWAY_SCHEMA = Schema(
    description="Manages a gateway on the ContextForge MCP Gateway.",
    attributes=(
        Attribute("id", Mode.COMPUTED),
        Attribute("name", Mode.REQUIRED),
        Attribute("url", Mode.REQUIRED),
        Attribute("description", Mode.OPTIONAL_COMPUTED),
        Attribute("transport", Mode.OPTIONAL_COMPUTED),
        Attribute("capabilities", Mode.OPTIONAL_COMPUTED),
        Attribute("health_check_url", Mode.OPTIONAL_COMPUTED),
        Attribute("health_check_interval", Mode.OPTIONAL_COMPUTED),
        Attribute("health_check_timeout", Mode.OPTIONAL_COMPUTED),
        Attribute("health_check_retries", Mode.OPTIONAL_COMPUTED),
        Attribute("is_active", Mode.OPTIONAL_COMPUTED, default=True),
        Attribute("tags", Mode.OPTIONAL_COMPUTED),
        Attribute("passthrough_headers", Mode.OPTIONAL_COMPUTED),
        Attribute("auth_type", Mode.OPTIONAL_COMPUTED),
        Attribute("auth_value", Mode.OPTIONAL, write_only=True),
        Attribute("created_at", Mode.COMPUTED),
        Attribute("updated_at", Mode.COMPUTED),
    ),
)


def _health_check(plan: GatewayModel) -> HealthCheck | None:
    # The URL switches the whole block on; the other three are optional.
    if plan.health_check_url is None:
        return None
    return HealthCheck(
        url=plan.health_check_url,
        interval=plan.health_check_interval,
        timeout=plan.health_check_timeout,
        retries=plan.health_check_retries,
    )


def _capabilities(plan: GatewayModel) -> dict | None:
    return decode_document("capabilities", plan.capabilities)  # type: ignore[return-value]


async def _create(client: ContextForgeClient, plan: GatewayModel) -> Gateway:
    return await client.create_gateway(
        GatewayCreate(
            name=plan.name or "",
            url=plan.url or "",
            description=plan.description,
            transport=plan.transport,
            capabilities=_capabilities(plan),
            health_check=_health_check(plan),
            is_active=True if plan.is_active is None else plan.is_active,
            tags=plan.tags,
            passthrough_headers=plan.passthrough_headers,
            auth_type=plan.auth_type,
            auth_value=plan.auth_value,
        )
    )


async def _fetch(client: ContextForgeClient, identity: str) -> Gateway | None:
    return await client.get_gateway(identity)


async def _update(client: ContextForgeClient, identity: str, plan: GatewayModel) -> Gateway:
    return await client.update_gateway(
        identity,
        GatewayUpdate(
            name=plan.name,
            url=plan.url,
            description=plan.description,
            transport=plan.transport,
            capabilities=_capabilities(plan),
            health_check=_health_check(plan),
            is_active=plan.is_active,
            tags=plan.tags,
            passthrough_headers=plan.passthrough_headers,
            auth_type=plan.auth_type,
            auth_value=plan.auth_value,
        ),
    )


async def _delete(client: ContextForgeClient, identity: str) -> None:
    await client.delete_gateway(identity)


def gateway_to_model(gateway: Gateway) -> GatewayModel:
    """
    Map an API gateway onto the declared shape.

    Observed values are recorded as reported, skipping the checks applied
    to declared values. An unreported transport ("") maps to None.
    """
    health_check = gateway.health_check
    return GatewayModel.model_construct(
        id=gateway.id,
        name=gateway.name,
        url=gateway.url,
        description=gateway.description,
        transport=gateway.transport or None,
        capabilities=(
            encode_document("capabilities", gateway.capabilities)
            if gateway.capabilities is not None
            else None
        ),
        health_check_url=health_check.url if health_check else None,
        health_check_interval=health_check.interval if health_check else None,
        health_check_timeout=health_check.timeout if health_check else None,
        health_check_retries=health_check.retries if health_check else None,
        is_active=gateway.is_active,
        tags=list(gateway.tags),
        passthrough_headers=list(gateway.passthrough_headers),
        auth_type=gateway.auth_type or None,
        auth_value=gateway.auth_value or None,
        created_at=gateway.created_at,
        updated_at=gateway.updated_at,
    )


GATEWAY: ResourceKind[GatewayModel, Gateway] = ResourceKind(
    name="gateway",
    type_name="contextforge_gateway",
    model=GatewayModel,
    schema=GATEWAY_SCHEMA,
    identity="id",
    create=_create,
    fetch=_fetch,
    update=_update,
    delete=_delete,
    to_model=gateway_to_model,
)
