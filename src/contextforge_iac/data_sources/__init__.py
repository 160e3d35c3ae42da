# ABOUTME: Data lookups package for the ContextForge declarative client
# ABOUTME: Builds every single, list and health lookup against one shared client

"""
ContextForge Data Lookups Package

    - base.py: LookupDataSource, ListDataSource, HealthDataSource
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from contextforge_iac.data_sources.base import (
    HealthDataSource,
    HealthModel,
    ListDataSource,
    ListResult,
    LookupDataSource,
)
from contextforge_iac.resources import GATEWAY, PROMPT, RESOURCE, ROOT, SERVER, TOOL

if TYPE_CHECKING:
    from contextforge_iac.utils.client import ContextForgeClient


def build_data_sources(client: ContextForgeClient) -> dict[str, Any]:
    """All data lookups, keyed by type name."""
    sources: list[Any] = [
        LookupDataSource(GATEWAY, client),
        ListDataSource(GATEWAY, "gateways", lambda c, inactive: c.list_gateways(inactive), client),
        LookupDataSource(SERVER, client),
        ListDataSource(SERVER, "servers", lambda c, inactive: c.list_servers(inactive), client),
        LookupDataSource(TOOL, client),
        ListDataSource(TOOL, "tools", lambda c, inactive: c.list_tools(inactive), client),
        LookupDataSource(RESOURCE, client),
        ListDataSource(RESOURCE, "resources", lambda c, inactive: c.list_resources(inactive), client),
        LookupDataSource(PROMPT, client),
        ListDataSource(PROMPT, "prompts", lambda c, inactive: c.list_prompts(inactive), client),
        ListDataSource(ROOT, "roots", lambda c, _: c.list_roots(), client, filterable=False),
        HealthDataSource(client),
    ]
    return {source.type_name: source for source in sources}


__all__ = [
    "HealthDataSource",
    "HealthModel",
    "ListDataSource",
    "ListResult",
    "LookupDataSource",
    "build_data_sources",
]
