# ABOUTME: Generic create/read/update/delete reconciler shared by every managed resource kind
# ABOUTME: Per-kind modules supply a ResourceKind descriptor; this module supplies the algorithm

"""
One reconciliation algorithm, parameterized per kind.

=============================================================================
WHAT IS A RECONCILER?
=============================================================================

The orchestration engine keeps two pictures of every managed object:

    plan   what the operator declared (after the engine's own diffing)
    state  what was recorded after the last successful operation

It calls the reconciler to converge the remote service toward the plan:

    create(plan)          -> new state
    read(state)           -> refreshed state, or None if it vanished
    update(plan, state)   -> new state
    delete(state)         -> nothing

Each of these issues exactly one HTTP round trip (Root reads are one list
call) and either returns a complete result or raises ReconcileError.

=============================================================================
WHY A DESCRIPTOR?
=============================================================================

Gateways, servers, tools, resources, prompts and roots differ only in
WHAT is sent and HOW the answer maps back. ResourceKind captures exactly
those differences:

    ResourceKind(
        name="tool",
        model=ToolModel,          # declared shape
        schema=TOOL_SCHEMA,       # validation + defaults
        create=_create,           # plan -> API call
        to_model=_to_model,       # API entity -> declared shape
        ...
    )

ManagedResource holds the algorithm once. Quirks (Root's URI identity,
Root having no update) are fields on the descriptor, not subclasses.

=============================================================================
VALUES THE API NEVER RETURNS
=============================================================================

A gateway's auth_value is accepted by the API but never echoed back. If
the mapped model simply copied the response, every read would erase the
credential from state and the next plan would try to "set" it again. So
after mapping, write-only attributes the response left empty are restored
from the plan (create/update) or from the prior state (read).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog
from pydantic import BaseModel

from contextforge_iac.errors import ReconcileError, UnsupportedOperationError
from contextforge_iac.schema import Mode, Schema
from contextforge_iac.utils.client import ContextForgeError
from contextforge_iac.utils.logging import redact, set_correlation_id

if TYPE_CHECKING:
    from contextforge_iac.utils.client import ContextForgeClient

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)
E = TypeVar("E")


@dataclass(frozen=True)
class ResourceKind(Generic[M, E]):
    """
    Everything the generic reconciler needs to know about one kind.

    FIELDS:
    -------
    - name: Singular kind name used in messages ("gateway")
    - type_name: Name the engine knows the resource by ("contextforge_gateway")
    - model: DeclaredModel subclass; every field defaults to None
    - schema: Declared attributes
    - identity: Model attribute holding the identity ("id", or "uri" for roots)
    - create: Build the create request from a plan and send it
    - fetch: Look up one entity by identity; None when absent
    - update: Build the update request and send it; None if the kind has no update
    - delete: Delete by identity; absent is success
    - to_model: Map an API entity back onto the declared shape
    """

    name: str
    type_name: str
    model: type[M]
    schema: Schema
    identity: str
    create: Callable[[ContextForgeClient, M], Awaitable[E]]
    fetch: Callable[[ContextForgeClient, str], Awaitable[E | None]]
    update: Callable[[ContextForgeClient, str, M], Awaitable[E]] | None
    delete: Callable[[ContextForgeClient, str], Awaitable[None]]
    to_model: Callable[[E], M]


class ManagedResource(Generic[M, E]):
    """
    Create/read/update/delete for one resource kind.

    USAGE:
    ------
        async with ContextForgeClient(connection) as client:
            tools = ManagedResource(TOOL, client)
            state = await tools.create(ToolModel(name="my-tool", visibility="private"))
            state = await tools.read(state)

    Every public operation starts a fresh correlation ID, so the log lines of
    concurrent reconciliations can be told apart.
    """

    def __init__(self, kind: ResourceKind[M, E], client: ContextForgeClient) -> None:
        self.kind = kind
        self._client = client

    def __repr__(self) -> str:
        return f"ManagedResource({self.kind.type_name})"

    @property
    def type_name(self) -> str:
        return self.kind.type_name

    @property
    def schema(self) -> Schema:
        return self.kind.schema

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _identity(self, *models: M | None) -> str:
        """First non-empty identity among the given models."""
        for model in models:
            value = getattr(model, self.kind.identity, None) if model is not None else None
            if value:
                return str(value)
        raise ReconcileError(
            "Missing Identity",
            f"{self.kind.name} has no {self.kind.identity}; it must be created or imported first",
        )

    @contextmanager
    def _client_errors(self, action: str, log: Any) -> Iterator[None]:
        """Translate client-layer failures into ReconcileError, keeping the cause."""
        try:
            yield
        except ContextForgeError as err:
            log.error("ContextForge request failed", error=redact(str(err)))
            raise ReconcileError(
                "Client Error",
                f"Unable to {action} {self.kind.name}, got error: {err}",
            ) from err

    def _restore(self, model: M, plan: M, state: M | None = None) -> M:
        """
        Fill attributes the API left empty after a create or update.

        Write-only attributes come from the plan, then from the prior state.
        Plain optional attributes (not computed) must come back exactly as
        planned, so an empty response value is replaced by the plan's.
        """
        changes: dict[str, Any] = {}
        for attribute in self.kind.schema.attributes:
            if getattr(model, attribute.name, None) is not None:
                continue
            if attribute.write_only:
                sources = (plan, state)
            elif attribute.mode is Mode.OPTIONAL:
                sources = (plan,)
            else:
                continue
            for source in sources:
                value = getattr(source, attribute.name, None) if source is not None else None
                if value is not None:
                    changes[attribute.name] = value
                    break
        return model.model_copy(update=changes) if changes else model

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def validate(self, plan: M) -> None:
        """Validate a plan locally. Raises SchemaValidationError."""
        self.kind.schema.validate(plan)

    def requires_replace(self, state: M | None, plan: M) -> list[str]:
        """Attributes whose planned change forces destroy-and-recreate."""
        return self.kind.schema.requires_replace(state, plan)

    def import_state(self, identity: str) -> M:
        """
        Start managing an existing remote object.

        Only the identity is known; the engine calls read() next to fill in
        the rest.
        """
        return self.kind.model(**{self.kind.identity: identity})

    async def create(self, plan: M) -> M:
        """
        Create the remote object described by the plan.

        Steps: validate, apply create-time defaults, send, map the response
        back, restore values the API does not echo.

        Raises:
            SchemaValidationError: Plan is invalid (nothing was sent)
            ReconcileError: The API call failed
        """
        set_correlation_id("")
        log = logger.bind(operation="create", kind=self.kind.name)

        self.validate(plan)
        plan = self.kind.schema.apply_defaults(plan)

        with self._client_errors("create", log):
            entity = await self.kind.create(self._client, plan)

        model = self._restore(self.kind.to_model(entity), plan)
        log.info(f"created a {self.kind.name} resource", identity=getattr(model, self.kind.identity))
        return model

    async def read(self, state: M) -> M | None:
        """
        Refresh state from the remote service.

        Returns:
            The refreshed model, or None when the object no longer exists.
            None tells the engine to drop it from managed state; it is not
            an error.
        """
        set_correlation_id("")
        identity = self._identity(state)
        log = logger.bind(operation="read", kind=self.kind.name, identity=identity)

        with self._client_errors("read", log):
            entity = await self.kind.fetch(self._client, identity)

        if entity is None:
            log.info(f"{self.kind.name} not found, removing from state")
            return None

        model = self.kind.to_model(entity)
        # Only write-only values come from state; everything else is observed.
        restored = {
            name: getattr(state, name)
            for name in self.kind.schema.write_only
            if getattr(model, name, None) is None and getattr(state, name, None) is not None
        }
        if restored:
            model = model.model_copy(update=restored)
        log.debug(f"read a {self.kind.name} resource")
        return model

    async def update(self, plan: M, state: M | None = None) -> M:
        """
        Apply the plan's declared fields in place.

        Fields left unset in the plan are omitted from the request body, so
        the remote service keeps their current values.

        Raises:
            UnsupportedOperationError: The kind cannot be updated (roots)
            SchemaValidationError: Plan is invalid (nothing was sent)
            ReconcileError: The API call failed
        """
        set_correlation_id("")
        log = logger.bind(operation="update", kind=self.kind.name)

        if self.kind.update is None:
            log.error(f"{self.kind.name} update requested")
            raise UnsupportedOperationError(
                "Unexpected Update",
                f"{self.kind.name.capitalize()} resources do not support in-place updates. "
                "All attribute changes require resource replacement.",
            )

        self.validate(plan)
        identity = self._identity(plan, state)
        log = log.bind(identity=identity)

        with self._client_errors("update", log):
            entity = await self.kind.update(self._client, identity, plan)

        model = self._restore(self.kind.to_model(entity), plan, state)
        log.info(f"updated a {self.kind.name} resource")
        return model

    async def delete(self, state: M) -> None:
        """
        Delete the remote object.

        An object that is already gone counts as deleted, so calling this
        twice succeeds both times.
        """
        set_correlation_id("")
        identity = self._identity(state)
        log = logger.bind(operation="delete", kind=self.kind.name, identity=identity)

        with self._client_errors("delete", log):
            await self.kind.delete(self._client, identity)

        log.info(f"deleted a {self.kind.name} resource")
