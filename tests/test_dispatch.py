from base64 import b64decode
import xml.etree.ElementTree as ET

import pytest

import osmrest
from conftest import OSM_XML, AsyncRecordingHTTP, RecordingHTTP


def test_dispatch_builds_url_and_headers(config, http):
    root = osmrest.dispatch(config, "node/1", http=http)

    assert root.tag == "osm"
    assert root.find("node").get("id") == "1"
    assert len(http.calls) == 1
    call = http.last
    assert call["method"] == "GET"
    assert call["url"] == "https://api.openstreetmap.org/api/0.6/node/1"
    assert call["headers"]["DNT"] == "1"
    assert call["headers"]["Authorization"].startswith("Basic ")
    assert b64decode(call["headers"]["Authorization"][6:]) == b"mapper:secret"
    assert call["payload"] is None
    assert call["timeout"] == 9
    assert call["proxy"] is None


def test_dispatch_passes_body_and_proxy(http):
    config = osmrest.Config(proxy="http://proxy.example:3128")
    osmrest.dispatch(config, "changeset/1/upload", "POST", "<osmChange/>", http=http)

    assert http.last["payload"] == "<osmChange/>"
    assert http.last["proxy"] == "http://proxy.example:3128"


def test_anonymous_call_has_no_authorization(http):
    osmrest.dispatch(osmrest.Config(), "capabilities", http=http)

    assert "Authorization" not in http.last["headers"]
    assert http.last["headers"]["DNT"] == "1"


def test_credentials_are_stripped():
    config = osmrest.Config(username=" mapper ", password="secret\n")

    assert config.username == "mapper"
    assert config.auth_header() == "Basic bWFwcGVyOnNlY3JldA=="


@pytest.mark.parametrize("length", [255, 256, 1000])
def test_payload_too_large_makes_no_request(config, http, length):
    with pytest.raises(osmrest.PayloadTooLarge) as excinfo:
        osmrest.dispatch(config, "user/preferences/key", "PUT", "x" * length, http=http)

    assert excinfo.value.length == length
    assert http.calls == []


def test_payload_just_below_limit_is_sent(config, http):
    osmrest.dispatch(config, "user/preferences/key", "PUT", "x" * 254, http=http)

    assert len(http.last["payload"]) == 254


@pytest.mark.parametrize("method", ["PATCH", "HEAD", "get", ""])
def test_invalid_method(config, http, method):
    with pytest.raises(osmrest.InvalidMethod):
        osmrest.dispatch(config, "node/1", method, http=http)

    assert http.calls == []


@pytest.mark.parametrize("endpoint", ["", "   ", "ab", None, 42])
def test_invalid_endpoint(config, http, endpoint):
    with pytest.raises(osmrest.InvalidEndpoint):
        osmrest.dispatch(config, endpoint, http=http)

    assert http.calls == []


def test_endpoint_is_trimmed(config, http):
    osmrest.dispatch(config, "  permissions \n", http=http)

    assert http.last["url"] == "https://api.openstreetmap.org/api/0.6/permissions"


def test_endpoint_is_not_escaped(config, http):
    osmrest.dispatch(config, "notes/search?q=a b", http=http)

    assert http.last["url"].endswith("notes/search?q=a b")


def test_sandbox_base_url(http):
    config = osmrest.Config(sandbox=True)
    osmrest.dispatch(config, "map?bbox=1,2,3,4", http=http)

    assert http.last["url"] == "https://master.apis.dev.openstreetmap.org/api/0.6/map?bbox=1,2,3,4"


@pytest.mark.parametrize("body", [
    b"<html><body><p>Bad Gateway<br></body></html>",
    b"12345",
    b"",
    b"<osm><node id='1'></osm>",
])
def test_malformed_response(config, body):
    http = RecordingHTTP(body=body, status=502, reason="Bad Gateway")

    with pytest.raises(osmrest.MalformedResponse) as excinfo:
        osmrest.dispatch(config, "node/1", http=http)

    assert excinfo.value.body == body
    assert excinfo.value.status == 502
    assert len(http.calls) == 1


def test_malformed_response_text():
    error = osmrest.MalformedResponse(b"1234\n", 200, "syntax error")

    assert error.text == "1234\n"


def test_error_status_is_parsed_by_default(config):
    http = RecordingHTTP(body=b"<osm><error>Conflict</error></osm>", status=409, reason="Conflict")

    root = osmrest.dispatch(config, "changeset/1/close", "PUT", http=http)

    assert root.find("error").text == "Conflict"


def test_check_status_raises_api_error():
    config = osmrest.Config(check_status=True)
    http = RecordingHTTP(body=b"The changeset 1 was closed at 2018-01-01.\n", status=409, reason="Conflict")

    with pytest.raises(osmrest.APIError) as excinfo:
        osmrest.dispatch(config, "changeset/1/close", "PUT", http=http)

    assert excinfo.value.http_status == 409
    assert excinfo.value.http_reason == "Conflict"
    assert excinfo.value.reason == "The changeset 1 was closed at 2018-01-01."
    assert str(excinfo.value) == "HTTP error 409 (Conflict). The changeset 1 was closed at 2018-01-01."


def test_check_status_passes_success():
    config = osmrest.Config(check_status=True)

    assert osmrest.dispatch(config, "node/1", http=RecordingHTTP()).tag == "osm"


def test_transport_failure_propagates(config):
    class FailingHTTP(object):
        calls = 0

        @classmethod
        def request(cls, method, url, **kwargs):
            cls.calls += 1
            raise osmrest.TransportFailure(url, "timed out")

    with pytest.raises(osmrest.TransportFailure):
        osmrest.dispatch(config, "node/1", http=FailingHTTP)

    assert FailingHTTP.calls == 1


def test_errors_share_base_class():
    for error in (osmrest.InvalidMethod, osmrest.PayloadTooLarge, osmrest.InvalidEndpoint,
                  osmrest.InvalidElementKind, osmrest.TransportFailure, osmrest.MalformedResponse,
                  osmrest.APIError):
        assert issubclass(error, osmrest.OSMError)
    assert not issubclass(osmrest.TransportFailure, osmrest.MalformedResponse)


@pytest.mark.asyncio
async def test_dispatch_async(config, async_http):
    root = await osmrest.dispatch_async(config, "node/1", http=async_http)

    assert root.tag == "osm"
    assert async_http.last["url"] == "https://api.openstreetmap.org/api/0.6/node/1"
    assert async_http.last["headers"]["DNT"] == "1"


@pytest.mark.asyncio
async def test_dispatch_async_payload_too_large(config, async_http):
    with pytest.raises(osmrest.PayloadTooLarge):
        await osmrest.dispatch_async(config, "node/create", "PUT", "x" * 300, http=async_http)

    assert async_http.calls == []


@pytest.mark.asyncio
async def test_dispatch_async_malformed(config):
    http = AsyncRecordingHTTP(body=b"<html><p>oops</html>", status=500, reason="Internal Server Error")

    with pytest.raises(osmrest.MalformedResponse):
        await osmrest.dispatch_async(config, "node/1", http=http)


@pytest.mark.asyncio
async def test_sync_and_async_produce_identical_documents(config):
    sync_http = RecordingHTTP(body=OSM_XML)
    async_http = AsyncRecordingHTTP(body=OSM_XML)

    sync_root = osmrest.dispatch(config, "map?bbox=1,2,3,4", http=sync_http)
    async_root = await osmrest.dispatch_async(config, "map?bbox=1,2,3,4", http=async_http)

    assert ET.tostring(sync_root) == ET.tostring(async_root)
    assert sync_http.last == async_http.last
