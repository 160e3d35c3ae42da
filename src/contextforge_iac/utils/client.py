# ABOUTME: ContextForge admin API client with staged transport errors
# ABOUTME: Provides async list/create/get/update/delete for every ContextForge entity kind

"""
ContextForge API client with structured error handling.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

This module provides the HTTP client for the ContextForge MCP gateway's
admin REST API. It handles:

1. HTTP COMMUNICATION: One request/response exchange per call
2. AUTHENTICATION: Attaching the Bearer token to requests
3. STATUS INTERPRETATION: Which status codes count as success for each call
4. DECODING: Turning JSON bodies into the dataclasses in utils.models

=============================================================================
CONTEXTFORGE REST API OVERVIEW
=============================================================================

Every entity kind lives under its own collection path:

    GET    /gateways?include_inactive=false   - List gateways
    POST   /gateways                          - Create a gateway
    GET    /gateways/{id}                     - Get one gateway
    PUT    /gateways/{id}                     - Update a gateway
    DELETE /gateways/{id}                     - Delete a gateway

The same shape repeats for /servers, /tools, /resources and /prompts, with
two quirks:
    - a single resource is read from /resources/{id}/info
    - /roots only supports list, create and DELETE /roots/{uri}

Create bodies for servers, tools, resources and prompts are wrapped in an
envelope named after the kind, with visibility and team_id beside it:

    {"tool": {"name": "my-tool", ...}, "visibility": "public"}

Gateway and root create bodies are flat.

=============================================================================
WHAT COUNTS AS SUCCESS
=============================================================================

    list    200
    create  200 or 201
    get     200; 404 means "absent" and returns None
    update  200
    delete  200, 204 or 404 (already gone is fine)

Anything else raises UnexpectedStatusError carrying the status and raw body.

=============================================================================
NO RETRIES
=============================================================================

Every call is exactly one HTTP round trip. The orchestration engine owns
retry policy; a failure here is reported straight back to it.
"""

# =============================================================================
# IMPORTS
# =============================================================================

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar
from urllib.parse import quote

import httpx
import structlog

from contextforge_iac.utils.logging import redact
from contextforge_iac.utils.models import (
    Gateway,
    Health,
    Prompt,
    Resource,
    Root,
    Server,
    Tool,
)

if TYPE_CHECKING:
    from contextforge_iac.config import Connection
    from contextforge_iac.utils.models import (
        GatewayCreate,
        GatewayUpdate,
        Payload,
        PromptCreate,
        PromptUpdate,
        ResourceCreate,
        ResourceUpdate,
        RootCreate,
        ServerCreate,
        ServerUpdate,
        ToolCreate,
        ToolUpdate,
    )

logger = structlog.get_logger(__name__)

E = TypeVar("E")

# Create-body fields that sit beside the envelope instead of inside it.
ENVELOPE_SIBLINGS = ("visibility", "team_id")


# =============================================================================
# ERRORS
# =============================================================================


class ContextForgeError(Exception):
    """Base class for every error raised by the client."""


class TransportError(ContextForgeError):
    """
    The request never produced a usable response.

    The stage says how far it got:
        "marshaling request body"  - the payload is not JSON-serializable
        "building request URL"     - the endpoint + path is not a valid URL
        "executing request"        - connection refused, DNS, TLS, timeout
        "reading response body"    - the connection dropped mid-body

    The underlying exception is chained as __cause__.
    """

    def __init__(self, method: str, path: str, stage: str, cause: BaseException) -> None:
        self.method = method
        self.path = path
        self.stage = stage
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self.method} {self.path}: {self.stage}: {self.cause}"


class UnexpectedStatusError(ContextForgeError):
    """
    The API answered with a status the call does not accept.

    USAGE:
    ------
    try:
        await client.create_tool(ToolCreate(name="dup"))
    except UnexpectedStatusError as e:
        print(e.code)     # 409
        print(e.details)  # raw response body
    """

    def __init__(self, code: int, message: str, details: str | None = None) -> None:
        """
        Args:
            code: HTTP status code (e.g., 409, 500)
            message: Error message, from the API's "detail"/"message" when present
            details: Raw response body
        """
        self.code = code
        self.message = message
        self.details = details
        super().__init__(str(self))

    def __str__(self) -> str:
        """
        Example:
            "ContextForge API error (409): Tool already exists - {"detail": "Tool already exists"}"
        """
        base = f"ContextForge API error ({self.code}): {self.message}"
        if self.details:
            base += f" - {self.details}"
        return base


class ResponseDecodeError(ContextForgeError):
    """A success response whose body is not the expected JSON shape."""

    def __init__(self, kind: str, reason: str) -> None:
        self.kind = kind
        self.reason = reason
        super().__init__(f"decoding {kind} response: {reason}")


# =============================================================================
# ENDPOINT DESCRIPTORS
# =============================================================================


@dataclass(frozen=True)
class Endpoint(Generic[E]):
    """
    Everything that differs between entity kinds at the HTTP level.

    FIELDS:
    -------
    - kind: Singular name used in logs and errors ("gateway")
    - collection: Collection path ("/gateways")
    - entity: Dataclass with a from_api_response() factory
    - envelope: Create-body wrapper key, or None for a flat body
    - read_suffix: Appended to the item path on GET ("/info" for resources)
    - supports_inactive: Whether list takes the include_inactive query
    - identity: Entity attribute that holds the server-assigned identity
    """

    kind: str
    collection: str
    entity: type[E]
    envelope: str | None = None
    read_suffix: str = ""
    supports_inactive: bool = True
    identity: str = "id"

    def item_path(self, identity: str) -> str:
        """Item path with the identity percent-escaped, "/" included."""
        return f"{self.collection}/{quote(identity, safe='')}"


GATEWAYS: Endpoint[Gateway] = Endpoint("gateway", "/gateways", Gateway)
SERVERS: Endpoint[Server] = Endpoint("server", "/servers", Server, envelope="server")
TOOLS: Endpoint[Tool] = Endpoint("tool", "/tools", Tool, envelope="tool")
RESOURCES: Endpoint[Resource] = Endpoint(
    "resource", "/resources", Resource, envelope="resource", read_suffix="/info"
)
PROMPTS: Endpoint[Prompt] = Endpoint("prompt", "/prompts", Prompt, envelope="prompt")
ROOTS: Endpoint[Root] = Endpoint("root", "/roots", Root, supports_inactive=False, identity="uri")


# =============================================================================
# CONTEXTFORGE CLIENT
# =============================================================================


class ContextForgeClient:
    """
    Async ContextForge API client.

    LIFECYCLE:
    ----------
    ALWAYS use the context manager pattern:

        async with ContextForgeClient(connection) as client:
            gateways = await client.list_gateways()

    One client may be shared by many concurrent reconciliations;
    httpx.AsyncClient is safe for concurrent use and the configuration
    it was built from is frozen.

    CANCELLATION:
    -------------
    If the awaiting task is cancelled, asyncio raises CancelledError inside
    the in-flight request and httpx abandons it. Nothing here catches it.
    """

    def __init__(self, connection: Connection) -> None:
        """
        Initialize ContextForge client.

        NOTE: This only creates the client object. The HTTP connection pool
        is created later in __aenter__ (when using 'async with').

        Args:
            connection: Endpoint, token, TLS and timeout settings
        """
        self._connection = connection
        self._client: httpx.AsyncClient | None = None

    @property
    def connection(self) -> Connection:
        return self._connection

    async def __aenter__(self) -> ContextForgeClient:
        """
        Enter async context and create HTTP client.

        The Authorization header is NOT set here. It is added per request in
        _request(), because the health endpoint is called without it.
        """
        self._client = httpx.AsyncClient(
            base_url=self._connection.endpoint,
            timeout=self._connection.timeout,
            verify=not self._connection.insecure,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        """Exit async context and close the connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: Any = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        """
        Make one HTTP request to the ContextForge API.

        This is the CORE REQUEST METHOD. All other methods use this.
        It does NOT judge the status code; the caller decides what
        counts as success.

        STAGES:
        -------
        1. Serialize json_data with json.dumps (NaN/Infinity rejected)
        2. Build the request: base URL + path, query params, headers
        3. Send it
        4. Read the whole body, then close the stream

        A failure at any stage raises TransportError naming that stage.

        Args:
            method: HTTP method ("GET", "POST", "PUT", "DELETE")
            path: API path relative to the endpoint (e.g., "/gateways")
            params: URL query parameters (optional)
            json_data: JSON-serializable request body (optional)
            authenticated: Attach the bearer token when one is configured

        Returns:
            The fully-read httpx.Response

        Raises:
            TransportError: If no response could be obtained
            RuntimeError: If client not initialized (forgot async with)
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        log = logger.bind(method=method, path=path)
        log.debug("Making ContextForge API request", params=params, body=redact(json_data))

        headers: dict[str, str] = {}
        if authenticated and self._connection.authenticated:
            headers["Authorization"] = f"Bearer {self._connection.token.get_secret_value()}"

        content: bytes | None = None
        if json_data is not None:
            try:
                content = json.dumps(json_data, allow_nan=False).encode()
            except (TypeError, ValueError) as err:
                raise TransportError(method, path, "marshaling request body", err) from err
            headers["Content-Type"] = "application/json"

        try:
            request = self._client.build_request(
                method, path, params=params, content=content, headers=headers
            )
        except httpx.InvalidURL as err:
            raise TransportError(method, path, "building request URL", err) from err

        try:
            response = await self._client.send(request, stream=True)
        except httpx.RequestError as err:
            log.warning("ContextForge API request failed", error=str(err))
            raise TransportError(method, path, "executing request", err) from err

        try:
            await response.aread()
        except httpx.HTTPError as err:
            raise TransportError(method, path, "reading response body", err) from err
        finally:
            await response.aclose()

        log.debug("ContextForge API response", status=response.status_code)
        return response

    # =========================================================================
    # RESPONSE HANDLING
    # =========================================================================

    @staticmethod
    def _check_status(response: httpx.Response, accepted: tuple[int, ...]) -> None:
        """
        Raise UnexpectedStatusError unless the status is one of `accepted`.

        FastAPI-style {"detail": "..."} and {"message": "..."} bodies supply
        the message; the raw body is always kept as details.
        """
        if response.status_code in accepted:
            return

        body = response.text
        logger.warning(
            "ContextForge API error",
            status=response.status_code,
            body=redact(body[:200]),
        )

        message = f"unexpected status code {response.status_code}"
        try:
            error_json = response.json()
        except ValueError:
            error_json = None
        if isinstance(error_json, dict):
            detail = error_json.get("detail") or error_json.get("message")
            if isinstance(detail, str) and detail:
                message = detail

        raise UnexpectedStatusError(
            code=response.status_code,
            message=message,
            details=body or None,
        )

    @staticmethod
    def _decode_object(response: httpx.Response, kind: str) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as err:
            raise ResponseDecodeError(kind, str(err)) from err
        if not isinstance(data, dict):
            raise ResponseDecodeError(kind, f"expected a JSON object, got {type(data).__name__}")
        return data

    @staticmethod
    def _decode_array(response: httpx.Response, kind: str) -> list[dict[str, Any]]:
        try:
            data = response.json()
        except ValueError as err:
            raise ResponseDecodeError(kind, str(err)) from err
        # A JSON null collection is an empty collection.
        if data is None:
            return []
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise ResponseDecodeError(kind, "expected a JSON array of objects")
        return data

    @staticmethod
    def _entity(entity: type[E], data: dict[str, Any], kind: str) -> E:
        # Fields of the wrong JSON type (e.g. a string interval) fail here.
        try:
            return entity.from_api_response(data)  # type: ignore[attr-defined,no-any-return]
        except (TypeError, ValueError) as err:
            raise ResponseDecodeError(kind, str(err)) from err

    # =========================================================================
    # GENERIC OPERATIONS
    # =========================================================================

    async def _list(self, endpoint: Endpoint[E], include_inactive: bool = False) -> list[E]:
        params = None
        if endpoint.supports_inactive:
            # Lowercase "true"/"false", as the API expects.
            params = {"include_inactive": str(include_inactive).lower()}
        response = await self._request("GET", endpoint.collection, params=params)
        self._check_status(response, (200,))
        items = self._decode_array(response, f"{endpoint.kind}s")
        return [self._entity(endpoint.entity, item, endpoint.kind) for item in items]

    async def _create(self, endpoint: Endpoint[E], payload: Payload) -> E:
        """
        POST a new entity.

        The response must carry the server-assigned identity; an entity
        without one could never be read, updated or deleted again.
        """
        body = payload.to_payload()
        if endpoint.envelope:
            siblings = {key: body.pop(key) for key in ENVELOPE_SIBLINGS if key in body}
            body = {endpoint.envelope: body, **siblings}

        response = await self._request("POST", endpoint.collection, json_data=body)
        self._check_status(response, (200, 201))
        entity = self._entity(
            endpoint.entity, self._decode_object(response, endpoint.kind), endpoint.kind
        )
        if not getattr(entity, endpoint.identity):
            raise ResponseDecodeError(
                endpoint.kind, f"created {endpoint.kind} has no {endpoint.identity}"
            )
        return entity

    async def _get(self, endpoint: Endpoint[E], identity: str) -> E | None:
        path = endpoint.item_path(identity) + endpoint.read_suffix
        response = await self._request("GET", path)
        if response.status_code == 404:
            return None
        self._check_status(response, (200,))
        return self._entity(
            endpoint.entity, self._decode_object(response, endpoint.kind), endpoint.kind
        )

    async def _update(self, endpoint: Endpoint[E], identity: str, payload: Payload) -> E:
        response = await self._request(
            "PUT", endpoint.item_path(identity), json_data=payload.to_payload()
        )
        self._check_status(response, (200,))
        return self._entity(
            endpoint.entity, self._decode_object(response, endpoint.kind), endpoint.kind
        )

    async def _delete(self, endpoint: Endpoint[E], identity: str) -> None:
        response = await self._request("DELETE", endpoint.item_path(identity))
        self._check_status(response, (200, 204, 404))

    # =========================================================================
    # HEALTH
    # =========================================================================

    async def get_health(self) -> Health:
        """
        Check gateway health.

        ContextForge API: GET /health (no authentication)

        Returns:
            Health with the reported status (e.g., "healthy")
        """
        response = await self._request("GET", "/health", authenticated=False)
        self._check_status(response, (200,))
        return self._entity(Health, self._decode_object(response, "health"), "health")

    # =========================================================================
    # GATEWAY OPERATIONS
    # =========================================================================

    async def list_gateways(self, include_inactive: bool = False) -> list[Gateway]:
        """
        List federated gateways.

        ContextForge API: GET /gateways?include_inactive=...

        Args:
            include_inactive: Also return deactivated gateways
        """
        return await self._list(GATEWAYS, include_inactive)

    async def create_gateway(self, request: GatewayCreate) -> Gateway:
        """
        Register a gateway.

        ContextForge API: POST /gateways (flat body)

        The response does not include auth_value; callers that need it
        must keep their own copy.
        """
        return await self._create(GATEWAYS, request)

    async def get_gateway(self, gateway_id: str) -> Gateway | None:
        """
        Get gateway by ID.

        ContextForge API: GET /gateways/{id}

        Returns:
            The gateway, or None if it does not exist (404)
        """
        return await self._get(GATEWAYS, gateway_id)

    async def update_gateway(self, gateway_id: str, request: GatewayUpdate) -> Gateway:
        """ContextForge API: PUT /gateways/{id}"""
        return await self._update(GATEWAYS, gateway_id, request)

    async def delete_gateway(self, gateway_id: str) -> None:
        """
        Delete gateway.

        ContextForge API: DELETE /gateways/{id}

        A gateway that is already gone (404) is treated as deleted.
        """
        await self._delete(GATEWAYS, gateway_id)

    # =========================================================================
    # SERVER OPERATIONS
    # =========================================================================

    async def list_servers(self, include_inactive: bool = False) -> list[Server]:
        """ContextForge API: GET /servers?include_inactive=..."""
        return await self._list(SERVERS, include_inactive)

    async def create_server(self, request: ServerCreate) -> Server:
        """
        Create a virtual server.

        ContextForge API: POST /servers

            {"server": {"name": ..., "tool_ids": [...]}, "visibility": ..., "team_id": ...}
        """
        return await self._create(SERVERS, request)

    async def get_server(self, server_id: str) -> Server | None:
        """ContextForge API: GET /servers/{id}"""
        return await self._get(SERVERS, server_id)

    async def update_server(self, server_id: str, request: ServerUpdate) -> Server:
        """ContextForge API: PUT /servers/{id}"""
        return await self._update(SERVERS, server_id, request)

    async def delete_server(self, server_id: str) -> None:
        """ContextForge API: DELETE /servers/{id}"""
        await self._delete(SERVERS, server_id)

    # =========================================================================
    # TOOL OPERATIONS
    # =========================================================================

    async def list_tools(self, include_inactive: bool = False) -> list[Tool]:
        """ContextForge API: GET /tools?include_inactive=..."""
        return await self._list(TOOLS, include_inactive)

    async def create_tool(self, request: ToolCreate) -> Tool:
        """
        Create a tool.

        ContextForge API: POST /tools

            {"tool": {"name": ..., "inputSchema": {...}}, "visibility": ...}
        """
        return await self._create(TOOLS, request)

    async def get_tool(self, tool_id: str) -> Tool | None:
        """ContextForge API: GET /tools/{id}"""
        return await self._get(TOOLS, tool_id)

    async def update_tool(self, tool_id: str, request: ToolUpdate) -> Tool:
        """ContextForge API: PUT /tools/{id}"""
        return await self._update(TOOLS, tool_id, request)

    async def delete_tool(self, tool_id: str) -> None:
        """ContextForge API: DELETE /tools/{id}"""
        await self._delete(TOOLS, tool_id)

    # =========================================================================
    # RESOURCE OPERATIONS
    # =========================================================================

    async def list_resources(self, include_inactive: bool = False) -> list[Resource]:
        """ContextForge API: GET /resources?include_inactive=..."""
        return await self._list(RESOURCES, include_inactive)

    async def create_resource(self, request: ResourceCreate) -> Resource:
        """ContextForge API: POST /resources ({"resource": {...}, ...})"""
        return await self._create(RESOURCES, request)

    async def get_resource(self, resource_id: str) -> Resource | None:
        """
        Get resource by ID.

        ContextForge API: GET /resources/{id}/info

        The plain /resources/{id} path returns the resource CONTENT, not its
        metadata, which is why reads go through /info.
        """
        return await self._get(RESOURCES, resource_id)

    async def update_resource(self, resource_id: str, request: ResourceUpdate) -> Resource:
        """ContextForge API: PUT /resources/{id}"""
        return await self._update(RESOURCES, resource_id, request)

    async def delete_resource(self, resource_id: str) -> None:
        """ContextForge API: DELETE /resources/{id}"""
        await self._delete(RESOURCES, resource_id)

    # =========================================================================
    # PROMPT OPERATIONS
    # =========================================================================

    async def list_prompts(self, include_inactive: bool = False) -> list[Prompt]:
        """ContextForge API: GET /prompts?include_inactive=..."""
        return await self._list(PROMPTS, include_inactive)

    async def create_prompt(self, request: PromptCreate) -> Prompt:
        """ContextForge API: POST /prompts ({"prompt": {...}, ...})"""
        return await self._create(PROMPTS, request)

    async def get_prompt(self, prompt_id: str) -> Prompt | None:
        """ContextForge API: GET /prompts/{id}"""
        return await self._get(PROMPTS, prompt_id)

    async def update_prompt(self, prompt_id: str, request: PromptUpdate) -> Prompt:
        """ContextForge API: PUT /prompts/{id}"""
        return await self._update(PROMPTS, prompt_id, request)

    async def delete_prompt(self, prompt_id: str) -> None:
        """ContextForge API: DELETE /prompts/{id}"""
        await self._delete(PROMPTS, prompt_id)

    # =========================================================================
    # ROOT OPERATIONS
    # =========================================================================

    async def list_roots(self) -> list[Root]:
        """
        List roots.

        ContextForge API: GET /roots (no include_inactive filter)

        There is no single-root GET; callers scan this list for a URI.
        """
        return await self._list(ROOTS)

    async def create_root(self, request: RootCreate) -> Root:
        """ContextForge API: POST /roots ({"uri": ..., "name": ...})"""
        return await self._create(ROOTS, request)

    async def delete_root(self, uri: str) -> None:
        """
        Delete root by URI.

        ContextForge API: DELETE /roots/{uri}

        The URI is percent-escaped whole, so "file:///data" travels as
        "file%3A%2F%2F%2Fdata".
        """
        await self._delete(ROOTS, uri)
