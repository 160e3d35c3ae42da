# ABOUTME: Read-only data lookups: one entity by ID, a whole collection, or gateway health
# ABOUTME: Reuse the managed-resource descriptors so lookups map fields exactly like reads

"""
Data lookups let configuration REFER to objects it does not manage:

    contextforge_tool      one tool, by ID          -> ToolModel
    contextforge_tools     every tool               -> ListResult[ToolModel]
    contextforge_health    gateway health           -> HealthModel

Single lookups differ from ManagedResource.read() in one way: an unknown ID
is an ERROR (NotFoundError), because configuration that names a missing
object cannot be satisfied. A managed read returns None instead.

List results carry a placeholder id equal to the plural kind name
("tools"), so the engine has a stable identity for them.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog

from contextforge_iac.errors import NotFoundError, ReconcileError
from contextforge_iac.utils.client import ContextForgeError
from contextforge_iac.utils.logging import redact, set_correlation_id

if TYPE_CHECKING:
    from collections.abc import Iterator

    from contextforge_iac.resources.base import ResourceKind
    from contextforge_iac.utils.client import ContextForgeClient

logger = structlog.get_logger(__name__)

M = TypeVar("M")
E = TypeVar("E")


@dataclass
class ListResult(Generic[M]):
    """Result of a list lookup."""

    id: str
    items: list[M] = field(default_factory=list)
    include_inactive: bool | None = None


@dataclass
class HealthModel:
    id: str = "health"
    status: str | None = None


@contextmanager
def _client_errors(action: str, log: Any) -> Iterator[None]:
    try:
        yield
    except ContextForgeError as err:
        log.error("ContextForge request failed", error=redact(str(err)))
        raise ReconcileError("Client Error", f"Unable to {action}, got error: {err}") from err


def _without_write_only(kind: ResourceKind, model: Any) -> Any:
    # Lookups never expose credentials, even if the API were to return them.
    hidden = {name: None for name in kind.schema.write_only}
    return model.model_copy(update=hidden) if hidden else model


class LookupDataSource(Generic[M, E]):
    """Look up a single entity by its identity."""

    def __init__(self, kind: ResourceKind[M, E], client: ContextForgeClient) -> None:
        self.kind = kind
        self._client = client

    @property
    def type_name(self) -> str:
        return self.kind.type_name

    async def read(self, identity: str) -> M:
        """
        Raises:
            NotFoundError: Nothing has this identity
            ReconcileError: The API call failed
        """
        set_correlation_id("")
        log = logger.bind(operation="lookup", kind=self.kind.name, identity=identity)

        with _client_errors(f"read {self.kind.name}", log):
            entity = await self.kind.fetch(self._client, identity)

        if entity is None:
            log.warning(f"{self.kind.name} not found")
            raise NotFoundError(
                "Not Found",
                f"{self.kind.name.capitalize()} with ID {identity} not found",
            )

        log.debug(f"read {self.kind.name} data source")
        return _without_write_only(self.kind, self.kind.to_model(entity))


class ListDataSource(Generic[M, E]):
    """
    List every entity of a kind.

    include_inactive is forwarded to the API verbatim; filtering is the
    server's job. Kinds without the filter (roots) ignore it.
    """

    def __init__(
        self,
        kind: ResourceKind[M, E],
        plural: str,
        lister: Callable[[ContextForgeClient, bool], Awaitable[list[E]]],
        client: ContextForgeClient,
        filterable: bool = True,
    ) -> None:
        self.kind = kind
        self.plural = plural
        self._lister = lister
        self._client = client
        self.filterable = filterable

    @property
    def type_name(self) -> str:
        return f"contextforge_{self.plural}"

    async def read(self, include_inactive: bool = False) -> ListResult[M]:
        set_correlation_id("")
        log = logger.bind(operation="list", kind=self.kind.name, include_inactive=include_inactive)

        with _client_errors(f"list {self.plural}", log):
            entities = await self._lister(self._client, include_inactive)

        items = [_without_write_only(self.kind, self.kind.to_model(e)) for e in entities]
        log.debug(f"read {self.plural} data source", count=len(items))
        return ListResult(
            id=self.plural,
            items=items,
            include_inactive=include_inactive if self.filterable else None,
        )


class HealthDataSource:
    """Gateway health. Works without a token."""

    type_name = "contextforge_health"

    def __init__(self, client: ContextForgeClient) -> None:
        self._client = client

    async def read(self) -> HealthModel:
        set_correlation_id("")
        log = logger.bind(operation="health")

        with _client_errors("read health", log):
            health = await self._client.get_health()

        log.debug("read health data source", status=health.status)
        return HealthModel(status=health.status)
