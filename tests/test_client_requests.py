import math

import httpx
import pytest
import respx
from httpx import Response
from hal_client import HalClient, HalTransportError
from pydantic import BaseModel

HAL = {"Content-Type": "application/hal+json"}


@pytest.fixture
def client():
    with HalClient("http://localhost/api") as cl:
        yield cl


def _route(method: str = "GET", path: str = "/api/test"):
    return respx.route(method=method, host="localhost", path=path).mock(
        return_value=Response(200, headers=HAL, text='{"abc": true}')
    )


@pytest.mark.parametrize(
    "target",
    ["/api/test", "/test", "test", "/api//test", "///test"],
)
@respx.mock
def test_target_path_has_single_base_segment(client, target):
    route = _route()

    client.get(target)

    assert route.calls[0].request.url.path == "/api/test"


@respx.mock
def test_base_path_is_only_stripped_as_prefix(client):
    route = _route(path="/api/apiary")

    client.get("/apiary")

    assert route.called


@respx.mock
def test_endpoint_with_trailing_slash():
    route = _route()

    with HalClient("http://localhost/api/") as cl:
        cl.get("/test")

    assert route.called


@respx.mock
def test_endpoint_without_base_path():
    route = _route(path="/customer/1")

    with HalClient("http://localhost") as cl:
        cl.get("customer/1")

    assert route.called


@respx.mock
def test_query_from_mapping(client):
    route = _route()

    resource = client.get("/test", query={"key": "value"})

    assert resource.has_property("abc")
    assert route.calls[0].request.url.params["key"] == "value"


@respx.mock
def test_query_from_string(client):
    route = _route()

    client.get("/test", query="key=value&tag=a&tag=b")

    params = route.calls[0].request.url.params
    assert params["key"] == "value"
    assert params.get_list("tag") == ["a", "b"]


@respx.mock
def test_query_is_merged_with_existing_query(client):
    route = _route()

    client.get("/test?a=b&key=old", query={"key": "value"})

    params = route.calls[0].request.url.params
    assert params["a"] == "b"
    assert params["key"] == "value"


@respx.mock
def test_query_is_merged_with_endpoint_query():
    route = _route()

    with HalClient("http://localhost/api?token=abc") as cl:
        cl.get("/test", query={"page": 2, "draft": False, "skip": None})

    params = route.calls[0].request.url.params
    assert params["token"] == "abc"
    assert params["page"] == "2"
    assert params["draft"] == "false"
    assert "skip" not in params


@respx.mock
def test_headers_override_defaults(client):
    route = _route(method="DELETE")

    resource = client.delete(
        "/test", headers={"field": "value", "Accept": "application/hal+json"}
    )

    sent = route.calls[0].request.headers
    assert resource.has_property("abc")
    assert sent["field"] == "value"
    assert sent["Accept"] == "application/hal+json"


@respx.mock
def test_string_body_is_sent_verbatim(client):
    route = _route(method="PUT")

    client.put("/test", body="test")

    request = route.calls[0].request
    assert request.content == b"test"
    assert request.headers["Content-Type"] == "application/json"


@respx.mock
def test_mapping_body_is_json_encoded(client):
    route = _route(method="POST")

    client.post("/test", body={"field": "value"})

    request = route.calls[0].request
    assert request.content == b'{"field": "value"}'
    assert request.headers["Content-Type"] == "application/json"


@respx.mock
def test_pydantic_body_is_json_encoded(client):
    class Order(BaseModel):
        item: str
        quantity: int

    route = _route(method="POST")

    client.post("/test", body=Order(item="x", quantity=2))

    assert route.calls[0].request.content == b'{"item":"x","quantity":2}'


@respx.mock
def test_content_type_header_is_not_overridden(client):
    route = _route(method="PATCH")

    client.patch(
        "/test",
        body='{"op": "replace"}',
        headers={"Content-Type": "application/merge-patch+json"},
    )

    sent = route.calls[0].request.headers
    assert sent["Content-Type"] == "application/merge-patch+json"


@respx.mock
def test_no_content_type_without_body(client):
    route = _route()

    client.get("/test")

    assert "Content-Type" not in route.calls[0].request.headers


@respx.mock(assert_all_called=False)
def test_invalid_body_raises_transport_error(client):
    route = _route(method="POST")

    with pytest.raises(HalTransportError) as exc:
        client.post("/test", body={"abc": math.nan})

    assert not route.called
    assert exc.value.request.method == "POST"
    assert isinstance(exc.value.__cause__, ValueError)


@respx.mock
def test_unserializable_body_raises_transport_error(client):
    with pytest.raises(HalTransportError):
        client.post("/test", body={"abc": object()})


def test_protocol_version_is_recorded():
    sent = []

    def handler(request):
        sent.append(request)
        return httpx.Response(200, headers=HAL, json={"abc": True})

    http = httpx.Client(transport=httpx.MockTransport(handler))
    with HalClient("http://localhost/api", http=http) as cl:
        resource = cl.get("/test", version="1.0")
    http.close()

    assert resource.has_property("abc")
    assert sent[0].extensions["http_version"] == b"HTTP/1.0"


def test_unknown_protocol_version(client):
    with pytest.raises(ValueError):
        client.get("/test", version="9")


@respx.mock
def test_method_is_uppercased(client):
    route = _route(method="POST")

    client.request("post", "/test")

    assert route.called
