# ABOUTME: Provider surface handed to the orchestration engine
# ABOUTME: Loads settings, configures logging, opens one client and registers resources and lookups

"""
The provider: one configured client plus everything built on it.

LIFECYCLE:
----------
    async with ContextForgeProvider.from_config(endpoint="http://gw:4444") as provider:
        tools = provider.resource("contextforge_tool")
        state = await tools.create(ToolModel(name="my-tool"))

        health = await provider.data_source("contextforge_health").read()

On entry: logging is configured from the settings, the HTTP client is
opened, and every managed resource and data lookup is built against it.
On exit: the client's connection pool is closed.

There is no module-level state. Two providers with different settings can
exist side by side, and each reconciler only sees the client it was built
with.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from contextforge_iac.config import load_settings
from contextforge_iac.data_sources import build_data_sources
from contextforge_iac.resources import KINDS, ManagedResource
from contextforge_iac.utils.client import ContextForgeClient
from contextforge_iac.utils.logging import configure_logging

if TYPE_CHECKING:
    from contextforge_iac.config import ProviderSettings

logger = structlog.get_logger(__name__)


class ContextForgeProvider:
    """Registry of managed resources and data lookups for one gateway."""

    type_name = "contextforge"

    def __init__(self, settings: ProviderSettings) -> None:
        self.settings = settings
        self._client: ContextForgeClient | None = None
        self._resources: dict[str, ManagedResource] = {}
        self._data_sources: dict[str, Any] = {}

    @classmethod
    def from_config(
        cls,
        endpoint: str | None = None,
        token: str | None = None,
    ) -> ContextForgeProvider:
        """
        Build a provider from provider-block values.

        Values left as None fall back to CONTEXTFORGE_ENDPOINT and
        CONTEXTFORGE_TOKEN, then to the defaults.
        """
        return cls(load_settings(endpoint=endpoint, token=token))

    async def __aenter__(self) -> ContextForgeProvider:
        configure_logging(level=self.settings.log_level, json_output=self.settings.json_logs)

        client = ContextForgeClient(self.settings.connection)
        await client.__aenter__()
        self._client = client

        self._resources = {kind.type_name: ManagedResource(kind, client) for kind in KINDS}
        self._data_sources = build_data_sources(client)

        logger.info(
            "Connected to ContextForge",
            endpoint=self.settings.endpoint,
            authenticated=self.settings.connection.authenticated,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.__aexit__(*args)
            self._client = None
            logger.info("Disconnected from ContextForge", endpoint=self.settings.endpoint)
        self._resources.clear()
        self._data_sources.clear()

    @property
    def client(self) -> ContextForgeClient:
        if not self._client:
            raise RuntimeError("Provider not initialized. Use 'async with' context manager.")
        return self._client

    def resources(self) -> dict[str, ManagedResource]:
        """Managed resources keyed by type name ("contextforge_gateway", ...)."""
        return dict(self._resources)

    def data_sources(self) -> dict[str, Any]:
        """Data lookups keyed by type name ("contextforge_tools", ...)."""
        return dict(self._data_sources)

    def resource(self, type_name: str) -> ManagedResource:
        """Get a managed resource by type name."""
        if type_name not in self._resources:
            available = sorted(self._resources)
            raise KeyError(f"Unknown resource '{type_name}'. Available: {available}")
        return self._resources[type_name]

    def data_source(self, type_name: str) -> Any:
        """Get a data lookup by type name."""
        if type_name not in self._data_sources:
            available = sorted(self._data_sources)
            raise KeyError(f"Unknown data source '{type_name}'. Available: {available}")
        return self._data_sources[type_name]
