import httpx
import pytest

from conftest import make_settings, payload_of, run
from tool_router.models import ToolCallRequest
from tool_router.serverless import ServerlessRouter, scan_functions

BASE = "https://proj.supabase.test"


def call(router, tool_name, **arguments):
    return run(router.call_tool(ToolCallRequest(name=tool_name, arguments=arguments)))


def router_for(upstream, **settings):
    return ServerlessRouter(make_settings(**settings), http=upstream.client())


@pytest.fixture
def project(tmp_path):
    functions = tmp_path / "supabase" / "functions"
    for name in ["send-email", "_shared", "charge"]:
        (functions / name).mkdir(parents=True)
    (functions / "deno.json").write_text("{}")
    return tmp_path


def test_catalog(upstream):
    tools = {t.name: t for t in router_for(upstream).list_tools()}
    assert list(tools) == ["discover", "invoke"]
    assert tools["discover"].inputSchema["properties"] == {}
    assert tools["invoke"].inputSchema["required"] == ["name"]
    assert set(tools["invoke"].inputSchema["properties"]) == {"name", "payload", "endpoint"}


def test_discover_without_functions_directory(tmp_path, upstream):
    result = call(router_for(upstream, project_root=tmp_path / "missing"), "discover")
    assert result.isError is False
    assert payload_of(result) == {"functions": [], "count": 0}


def test_discover_lists_function_directories(project, upstream):
    result = call(router_for(upstream, project_root=project, supabase_url=BASE), "discover")
    assert payload_of(result) == {
        "functions": [
            {
                "name": "charge",
                "service": "supabase",
                "path": "supabase/functions/charge",
                "endpoint": f"{BASE}/functions/v1/charge",
            },
            {
                "name": "send-email",
                "service": "supabase",
                "path": "supabase/functions/send-email",
                "endpoint": f"{BASE}/functions/v1/send-email",
            },
        ],
        "count": 2,
    }


def test_discover_without_base_url_omits_endpoints(project):
    functions = scan_functions(project, None)
    assert [f.name for f in functions] == ["charge", "send-email"]
    assert all(f.endpoint is None for f in functions)


def test_discover_sees_new_functions_without_restart(project, upstream):
    router = router_for(upstream, project_root=project)
    assert payload_of(call(router, "discover"))["count"] == 2
    (project / "supabase" / "functions" / "refund").mkdir()
    assert payload_of(call(router, "discover"))["count"] == 3


def test_invoke_computes_endpoint_from_name(upstream):
    upstream.add(f"{BASE}/functions/v1/foo", json_body={"ok": True})
    router = router_for(upstream, supabase_url=BASE, supabase_key="service-role")
    result = call(router, "invoke", name="foo", payload={"x": 1})

    assert result.isError is False
    assert payload_of(result) == {"function": "foo", "service": "supabase", "result": {"ok": True}, "status": 200}
    request = upstream.requests[0]
    assert request.method == "POST"
    assert request.headers["authorization"] == "Bearer service-role"
    assert upstream.bodies(f"{BASE}/functions/v1/foo") == [{"x": 1}]


def test_invoke_with_override_endpoint(upstream):
    upstream.add("https://example.test/custom", json_body={"done": 1})
    router = router_for(upstream, supabase_url=BASE, supabase_key="service-role")
    result = call(router, "invoke", name="foo", payload={"x": 1}, endpoint="https://example.test/custom")

    assert result.isError is False
    assert [str(r.url) for r in upstream.requests] == ["https://example.test/custom"]


def test_invoke_sends_empty_object_by_default(upstream):
    upstream.add(f"{BASE}/functions/v1/foo", json_body={})
    call(router_for(upstream, supabase_url=BASE, supabase_key="k"), "invoke", name="foo")
    assert upstream.bodies(f"{BASE}/functions/v1/foo") == [{}]


def test_invoke_returns_text_for_non_json_replies(upstream):
    upstream.add(f"{BASE}/functions/v1/foo", status=500, text="boom")
    result = call(router_for(upstream, supabase_url=BASE, supabase_key="k"), "invoke", name="foo")

    assert result.isError is False
    assert payload_of(result) == {"function": "foo", "service": "supabase", "result": "boom", "status": 500}


def test_invoke_without_configuration(upstream):
    result = call(router_for(upstream), "invoke", name="foo")
    assert result.isError is True
    assert payload_of(result) == {
        "error": "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY) not set"
    }
    assert upstream.requests == []


def test_invoke_without_key(upstream):
    result = call(router_for(upstream, supabase_url=BASE), "invoke", name="foo")
    assert payload_of(result) == {"error": "SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY) not set"}


def test_invoke_network_failure(upstream):
    upstream.add(f"{BASE}/functions/v1/foo", error=httpx.ConnectError("connection refused"))
    result = call(router_for(upstream, supabase_url=BASE, supabase_key="k"), "invoke", name="foo")
    assert result.isError is True
    assert payload_of(result) == {"error": "Function foo request failed: connection refused"}


def test_invoke_requires_name(upstream):
    result = call(router_for(upstream, supabase_url=BASE, supabase_key="k"), "invoke")
    assert payload_of(result) == {"error": "Invalid arguments for invoke: name: Field required"}


def test_unknown_tool(upstream):
    result = call(router_for(upstream), "delete_everything")
    assert payload_of(result) == {"error": "Unknown tool: delete_everything"}
