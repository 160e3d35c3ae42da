# ABOUTME: Unit tests for the ContextForge API client
# ABOUTME: Tests transport stages, status interpretation, envelopes and response decoding

import json

import httpx
import pytest
import respx
from pydantic import SecretStr

from contextforge_iac.config import Connection
from contextforge_iac.utils.client import (
    ContextForgeClient,
    ContextForgeError,
    ResponseDecodeError,
    TransportError,
    UnexpectedStatusError,
)
from contextforge_iac.utils.models import (
    Gateway,
    GatewayCreate,
    GatewayUpdate,
    HealthCheck,
    Prompt,
    Resource,
    RootCreate,
    ServerCreate,
    ToolCreate,
    ToolUpdate,
)

BASE_URL = "http://contextforge.test"


@pytest.mark.unit
class TestModels:
    """Tests for API entity and payload dataclasses."""

    def test_gateway_from_api_response(self):
        """Test creating Gateway from a full API response."""
        gateway = Gateway.from_api_response(
            {
                "id": "gw-1",
                "name": "upstream",
                "url": "http://upstream:9000/sse",
                "transport": "SSE",
                "capabilities": {"tools": {"listChanged": True}},
                "health_check": {"url": "http://upstream:9000/health", "interval": 30},
                "is_active": True,
                "tags": ["a"],
                "auth_type": "bearer",
            }
        )

        assert gateway.id == "gw-1"
        assert gateway.capabilities == {"tools": {"listChanged": True}}
        assert gateway.health_check == HealthCheck(
            url="http://upstream:9000/health", interval=30, timeout=0, retries=0
        )
        assert gateway.passthrough_headers == []
        assert gateway.auth_value == ""

    def test_from_api_response_empty_data(self):
        """Test entities decode from an empty object with defaults."""
        gateway = Gateway.from_api_response({})

        assert gateway.id == ""
        assert gateway.tags == []
        assert gateway.health_check is None
        assert gateway.is_active is False

    def test_null_collections_are_empty(self):
        """Test JSON null collections decode to empty lists."""
        prompt = Prompt.from_api_response({"id": "p", "name": "n", "arguments": None, "tags": None})

        assert prompt.arguments == []
        assert prompt.tags == []

    def test_prompt_arguments_must_be_array(self):
        """Test prompt arguments that are not a JSON array are rejected."""
        with pytest.raises(TypeError, match="arguments"):
            Prompt.from_api_response({"id": "p", "name": "n", "arguments": {"name": "topic"}})

    def test_camel_case_wire_names(self):
        """Test mimeType decodes into mime_type."""
        resource = Resource.from_api_response({"id": "r", "uri": "u", "name": "n", "mimeType": "text/plain"})

        assert resource.mime_type == "text/plain"

    def test_payload_omits_unset_fields(self):
        """Test to_payload drops None and maps wire names."""
        body = ToolUpdate(name="t", input_schema={"type": "object"}).to_payload()

        assert body == {"name": "t", "inputSchema": {"type": "object"}}

    def test_payload_keeps_declared_empty_values(self):
        """Test empty strings and lists are sent, not dropped."""
        body = ToolUpdate(description="", tags=[]).to_payload()

        assert body == {"description": "", "tags": []}

    def test_gateway_create_always_sends_is_active(self):
        """Test is_active is present even at its default."""
        body = GatewayCreate(name="gw", url="http://x").to_payload()

        assert body == {"name": "gw", "url": "http://x", "is_active": True}

    def test_nested_health_check(self):
        """Test nested payloads are serialized recursively."""
        body = GatewayUpdate(health_check=HealthCheck(url="http://h", retries=3)).to_payload()

        assert body == {"health_check": {"url": "http://h", "retries": 3}}


@pytest.mark.unit
class TestErrors:
    """Tests for client error classes."""

    def test_unexpected_status_str_includes_code_and_body(self):
        """Test string representation includes status and raw body."""
        error = UnexpectedStatusError(409, "Tool already exists", '{"detail": "Tool already exists"}')

        result = str(error)
        assert "409" in result
        assert "Tool already exists" in result
        assert '{"detail"' in result

    def test_unexpected_status_without_details(self):
        """Test string representation without details."""
        error = UnexpectedStatusError(500, "unexpected status code 500")

        assert str(error) == "ContextForge API error (500): unexpected status code 500"

    def test_transport_error_str(self):
        """Test transport error names method, path and stage."""
        error = TransportError("GET", "/tools", "executing request", OSError("refused"))

        assert str(error) == "GET /tools: executing request: refused"

    def test_hierarchy(self):
        """Test every client error is a ContextForgeError."""
        assert issubclass(TransportError, ContextForgeError)
        assert issubclass(UnexpectedStatusError, ContextForgeError)
        assert issubclass(ResponseDecodeError, ContextForgeError)


@pytest.mark.unit
class TestContextForgeClientContextManager:
    """Tests for ContextForgeClient async context manager."""

    async def test_context_manager_creates_and_closes_client(self, connection: Connection):
        """Test async with creates httpx client and closes it on exit."""
        client = ContextForgeClient(connection)
        assert client._client is None

        async with client:
            assert isinstance(client._client, httpx.AsyncClient)

        assert client._client is None

    async def test_context_manager_returns_self(self, connection: Connection):
        """Test async with returns the client instance."""
        client = ContextForgeClient(connection)

        async with client as c:
            assert c is client

    async def test_request_outside_context_manager(self, connection: Connection):
        """Test that client raises when not in context manager."""
        client = ContextForgeClient(connection)

        with pytest.raises(RuntimeError, match="not initialized"):
            await client._request("GET", "/tools")


@pytest.mark.unit
class TestContextForgeClientRequest:
    """Tests for ContextForgeClient._request."""

    @respx.mock
    async def test_bearer_token_sent(self, client: ContextForgeClient):
        """Test Authorization header is attached when a token is configured."""
        route = respx.get(f"{BASE_URL}/tools").mock(return_value=httpx.Response(200, json=[]))

        await client._request("GET", "/tools")

        assert route.calls[0].request.headers["Authorization"] == "Bearer test-token"

    @respx.mock
    async def test_no_token_no_header(self, anonymous_connection: Connection):
        """Test no Authorization header without a token."""
        route = respx.get(f"{BASE_URL}/tools").mock(return_value=httpx.Response(200, json=[]))

        async with ContextForgeClient(anonymous_connection) as client:
            await client._request("GET", "/tools")

        assert "Authorization" not in route.calls[0].request.headers

    @respx.mock
    async def test_unauthenticated_request_skips_token(self, client: ContextForgeClient):
        """Test authenticated=False suppresses the token."""
        route = respx.get(f"{BASE_URL}/health").mock(
            return_value=httpx.Response(200, json={"status": "healthy"})
        )

        await client._request("GET", "/health", authenticated=False)

        assert "Authorization" not in route.calls[0].request.headers

    @respx.mock
    async def test_json_body_sets_content_type(self, client: ContextForgeClient):
        """Test a JSON body is serialized with Content-Type set."""
        route = respx.post(f"{BASE_URL}/roots").mock(return_value=httpx.Response(200, json={}))

        await client._request("POST", "/roots", json_data={"uri": "file:///data"})

        request = route.calls[0].request
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"uri": "file:///data"}

    @respx.mock
    async def test_no_body_no_content_type(self, client: ContextForgeClient):
        """Test requests without a body carry no Content-Type."""
        route = respx.get(f"{BASE_URL}/tools").mock(return_value=httpx.Response(200, json=[]))

        await client._request("GET", "/tools")

        assert "Content-Type" not in route.calls[0].request.headers

    @respx.mock
    async def test_returns_response_for_any_status(self, client: ContextForgeClient):
        """Test _request leaves status interpretation to the caller."""
        respx.get(f"{BASE_URL}/tools/x").mock(return_value=httpx.Response(500, text="boom"))

        response = await client._request("GET", "/tools/x")

        assert response.status_code == 500
        assert response.text == "boom"

    async def test_marshaling_error(self, client: ContextForgeClient):
        """Test a non-serializable body fails before any request."""
        with pytest.raises(TransportError) as exc_info:
            await client._request("POST", "/tools", json_data={"bad": object()})

        assert exc_info.value.stage == "marshaling request body"
        assert isinstance(exc_info.value.__cause__, TypeError)

    async def test_nan_rejected(self, client: ContextForgeClient):
        """Test NaN cannot be sent as JSON."""
        with pytest.raises(TransportError, match="marshaling request body"):
            await client._request("POST", "/tools", json_data={"x": float("nan")})

    @respx.mock
    async def test_connection_error(self, client: ContextForgeClient):
        """Test connection failures surface as executing-request errors."""
        respx.get(f"{BASE_URL}/tools").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(TransportError) as exc_info:
            await client._request("GET", "/tools")

        assert exc_info.value.stage == "executing request"
        assert exc_info.value.method == "GET"
        assert exc_info.value.path == "/tools"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @respx.mock
    async def test_timeout_is_not_retried(self, client: ContextForgeClient):
        """Test a timeout fails after a single attempt."""
        route = respx.get(f"{BASE_URL}/tools").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(TransportError):
            await client._request("GET", "/tools")

        assert route.call_count == 1

    @respx.mock
    async def test_query_params(self, client: ContextForgeClient):
        """Test params are encoded onto the URL."""
        route = respx.get(f"{BASE_URL}/servers").mock(return_value=httpx.Response(200, json=[]))

        await client._request("GET", "/servers", params={"include_inactive": "false"})

        assert route.calls[0].request.url.params["include_inactive"] == "false"


@pytest.mark.unit
class TestStatusHandling:
    """Tests for per-operation accepted status codes."""

    @respx.mock
    async def test_get_404_is_none(self, client: ContextForgeClient):
        """Test a missing entity reads as None, not an error."""
        respx.get(f"{BASE_URL}/prompts/unknown").mock(
            return_value=httpx.Response(404, json={"detail": "Prompt not found"})
        )

        assert await client.get_prompt("unknown") is None

    @respx.mock
    async def test_get_500_raises(self, client: ContextForgeClient):
        """Test other error statuses raise with code and body."""
        respx.get(f"{BASE_URL}/tools/t1").mock(return_value=httpx.Response(500, text="Internal Error"))

        with pytest.raises(UnexpectedStatusError) as exc_info:
            await client.get_tool("t1")

        assert exc_info.value.code == 500
        assert "Internal Error" in str(exc_info.value)

    @respx.mock
    async def test_error_detail_becomes_message(self, client: ContextForgeClient):
        """Test FastAPI-style detail is used as the message."""
        respx.post(f"{BASE_URL}/tools").mock(
            return_value=httpx.Response(409, json={"detail": "Tool already exists"})
        )

        with pytest.raises(UnexpectedStatusError) as exc_info:
            await client.create_tool(ToolCreate(name="dup"))

        assert exc_info.value.message == "Tool already exists"

    @pytest.mark.parametrize("status", [200, 204, 404])
    @respx.mock
    async def test_delete_accepted_statuses(self, client: ContextForgeClient, status: int):
        """Test delete treats 200, 204 and 404 as success."""
        respx.delete(f"{BASE_URL}/gateways/gw-1").mock(return_value=httpx.Response(status))

        await client.delete_gateway("gw-1")

    @respx.mock
    async def test_delete_other_status_raises(self, client: ContextForgeClient):
        """Test delete raises on statuses outside its accepted set."""
        respx.delete(f"{BASE_URL}/gateways/gw-1").mock(return_value=httpx.Response(403, text="denied"))

        with pytest.raises(UnexpectedStatusError):
            await client.delete_gateway("gw-1")

    @pytest.mark.parametrize("status", [200, 201])
    @respx.mock
    async def test_create_accepted_statuses(self, client: ContextForgeClient, status: int):
        """Test create accepts 200 and 201."""
        respx.post(f"{BASE_URL}/gateways").mock(
            return_value=httpx.Response(status, json={"id": "gw-1", "name": "gw", "url": "http://x"})
        )

        gateway = await client.create_gateway(GatewayCreate(name="gw", url="http://x"))

        assert gateway.id == "gw-1"

    @respx.mock
    async def test_update_requires_200(self, client: ContextForgeClient):
        """Test update rejects 201."""
        respx.put(f"{BASE_URL}/tools/t1").mock(return_value=httpx.Response(201, json={"id": "t1"}))

        with pytest.raises(UnexpectedStatusError):
            await client.update_tool("t1", ToolUpdate(name="t"))


@pytest.mark.unit
class TestDecoding:
    """Tests for response body decoding."""

    @respx.mock
    async def test_list_null_is_empty(self, client: ContextForgeClient):
        """Test a null collection decodes to an empty list."""
        respx.get(f"{BASE_URL}/tools").mock(return_value=httpx.Response(200, text="null"))

        assert await client.list_tools() == []

    @respx.mock
    async def test_list_not_array(self, client: ContextForgeClient):
        """Test a list endpoint returning an object fails to decode."""
        respx.get(f"{BASE_URL}/tools").mock(return_value=httpx.Response(200, json={"items": []}))

        with pytest.raises(ResponseDecodeError):
            await client.list_tools()

    @respx.mock
    async def test_invalid_json(self, client: ContextForgeClient):
        """Test malformed JSON fails to decode."""
        respx.get(f"{BASE_URL}/gateways/gw-1").mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(ResponseDecodeError, match="gateway"):
            await client.get_gateway("gw-1")

    @respx.mock
    async def test_create_without_identity(self, client: ContextForgeClient):
        """Test a created entity without an ID is rejected."""
        respx.post(f"{BASE_URL}/tools").mock(return_value=httpx.Response(201, json={"name": "t"}))

        with pytest.raises(ResponseDecodeError, match="has no id"):
            await client.create_tool(ToolCreate(name="t"))

    @respx.mock
    async def test_get_malformed_field(self, client: ContextForgeClient):
        """Test a field of the wrong JSON type fails to decode instead of escaping raw."""
        respx.get(f"{BASE_URL}/gateways/gw-1").mock(
            return_value=httpx.Response(
                200,
                json={"id": "gw-1", "name": "gw", "health_check": {"url": "http://h", "interval": "30s"}},
            )
        )

        with pytest.raises(ResponseDecodeError, match="interval") as exc_info:
            await client.get_gateway("gw-1")

        assert exc_info.value.kind == "gateway"
        assert isinstance(exc_info.value.__cause__, ValueError)

    @respx.mock
    async def test_list_malformed_item(self, client: ContextForgeClient):
        """Test one malformed list item fails the whole list."""
        respx.get(f"{BASE_URL}/servers").mock(
            return_value=httpx.Response(200, json=[{"id": "s1", "name": "a"}, {"id": "s2", "tags": 5}])
        )

        with pytest.raises(ResponseDecodeError, match="tags"):
            await client.list_servers()

    @respx.mock
    async def test_create_malformed_field(self, client: ContextForgeClient):
        """Test a created entity with a malformed field fails to decode."""
        respx.post(f"{BASE_URL}/tools").mock(
            return_value=httpx.Response(201, json={"id": "t1", "name": "t", "inputSchema": "{}"})
        )

        with pytest.raises(ResponseDecodeError, match="inputSchema"):
            await client.create_tool(ToolCreate(name="t"))

    @respx.mock
    async def test_update_malformed_field(self, client: ContextForgeClient):
        """Test an updated entity with a malformed field fails to decode."""
        respx.put(f"{BASE_URL}/tools/t1").mock(
            return_value=httpx.Response(200, json={"id": "t1", "name": "t", "tags": "a,b"})
        )

        with pytest.raises(ResponseDecodeError, match="tags"):
            await client.update_tool("t1", ToolUpdate(name="t"))

    @respx.mock
    async def test_health_malformed_status(self, client: ContextForgeClient):
        """Test a structured health status fails to decode."""
        respx.get(f"{BASE_URL}/health").mock(
            return_value=httpx.Response(200, json={"status": {"db": "ok"}})
        )

        with pytest.raises(ResponseDecodeError, match="health"):
            await client.get_health()


@pytest.mark.unit
class TestPaths:
    """Tests for paths, envelopes and query parameters."""

    @respx.mock
    async def test_include_inactive_passed_verbatim(self, client: ContextForgeClient):
        """Test include_inactive=false is sent as lowercase text."""
        route = respx.get(f"{BASE_URL}/servers").mock(
            return_value=httpx.Response(200, json=[{"id": "s1", "name": "a"}, {"id": "s2", "name": "b"}])
        )

        servers = await client.list_servers(include_inactive=False)

        assert route.calls[0].request.url.params["include_inactive"] == "false"
        assert [s.id for s in servers] == ["s1", "s2"]

    @respx.mock
    async def test_roots_list_has_no_filter(self, client: ContextForgeClient):
        """Test roots are listed without include_inactive."""
        route = respx.get(f"{BASE_URL}/roots").mock(return_value=httpx.Response(200, json=[]))

        await client.list_roots()

        assert "include_inactive" not in route.calls[0].request.url.params

    @respx.mock
    async def test_resource_read_uses_info_path(self, client: ContextForgeClient):
        """Test single resources are read from /info."""
        route = respx.get(f"{BASE_URL}/resources/r1/info").mock(
            return_value=httpx.Response(200, json={"id": "r1", "uri": "u", "name": "n"})
        )

        resource = await client.get_resource("r1")

        assert route.called
        assert resource is not None and resource.id == "r1"

    @respx.mock
    async def test_identity_percent_escaped(self, client: ContextForgeClient):
        """Test identities are escaped whole, slashes included."""
        route = respx.delete(url__regex=r".*/roots/.*").mock(return_value=httpx.Response(204))

        await client.delete_root("file:///data/shared")

        raw_path = route.calls[0].request.url.raw_path
        assert raw_path == b"/roots/file%3A%2F%2F%2Fdata%2Fshared"

    @respx.mock
    async def test_enveloped_create_body(self, client: ContextForgeClient):
        """Test server create nests fields with visibility beside the envelope."""
        route = respx.post(f"{BASE_URL}/servers").mock(
            return_value=httpx.Response(201, json={"id": "s1", "name": "srv"})
        )

        await client.create_server(
            ServerCreate(name="srv", tool_ids=["t1"], visibility="team", team_id="team-1")
        )

        assert json.loads(route.calls[0].request.content) == {
            "server": {"name": "srv", "tool_ids": ["t1"]},
            "visibility": "team",
            "team_id": "team-1",
        }

    @respx.mock
    async def test_root_create_body_is_flat(self, client: ContextForgeClient):
        """Test root create sends uri and name unwrapped."""
        route = respx.post(f"{BASE_URL}/roots").mock(
            return_value=httpx.Response(200, json={"uri": "file:///data", "name": "data"})
        )

        root = await client.create_root(RootCreate(uri="file:///data", name="data"))

        assert json.loads(route.calls[0].request.content) == {"uri": "file:///data", "name": "data"}
        assert root.uri == "file:///data"

    @respx.mock
    async def test_health_is_unauthenticated(self):
        """Test health succeeds without sending the token."""
        route = respx.get(f"{BASE_URL}/health").mock(
            return_value=httpx.Response(200, json={"status": "healthy"})
        )
        connection = Connection(endpoint=BASE_URL, token=SecretStr("secret"))

        async with ContextForgeClient(connection) as client:
            health = await client.get_health()

        assert health.status == "healthy"
        assert "Authorization" not in route.calls[0].request.headers
