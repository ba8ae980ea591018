from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import threading

import pytest

import osmrest


OSM_XML = (b'<?xml version="1.0" encoding="UTF-8"?>\n'
           b'<osm version="0.6" generator="test">'
           b'<node id="1" lat="50.0" lon="14.0" version="3"><tag k="name" v="Praha"/></node>'
           b'</osm>')


class RecordingHTTP(object):
    """ Blocking transport stub returning a fixed Response and recording calls. """

    def __init__(self, body=OSM_XML, status=200, reason="OK"):
        self.response = osmrest.Response(status, reason, body)
        self.calls = []

    def request(self, method, url, headers={}, payload=None, timeout=None, proxy=None):
        self.calls.append({"method": method, "url": url, "headers": dict(headers),
                           "payload": payload, "timeout": timeout, "proxy": proxy})
        return self.response

    @property
    def last(self):
        return self.calls[-1]


class AsyncRecordingHTTP(RecordingHTTP):

    async def request(self, method, url, headers={}, payload=None, timeout=None, proxy=None):
        return RecordingHTTP.request(self, method, url, headers, payload, timeout, proxy)


@pytest.fixture
def http():
    return RecordingHTTP()


@pytest.fixture
def async_http():
    return AsyncRecordingHTTP()


@pytest.fixture
def config():
    return osmrest.Config(username="mapper", password="secret", timeout=9)


@pytest.fixture
def api(config, http):
    return osmrest.API(config, http=http)


class _Handler(BaseHTTPRequestHandler):
    routes = {
        "/api/0.6/capabilities": (200, "text/xml; charset=utf-8", OSM_XML),
        "/api/0.6/broken": (502, "text/html", b"<html><body><p>Bad Gateway<br></body></html>"),
        "/api/0.6/missing": (404, "text/plain", b"Not found"),
    }

    def _reply(self):
        length = int(self.headers.get("Content-Length") or 0)
        self.server.received.append({"method": self.command, "path": self.path,
                                     "headers": dict(self.headers),
                                     "body": self.rfile.read(length) if length else b""})
        status, content_type, body = self.routes.get(self.path.split("?")[0], (200, "text/xml", OSM_XML))
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    do_GET = do_POST = do_PUT = do_DELETE = _reply

    def log_message(self, format, *args):
        pass


@pytest.fixture
def server():
    """ Loopback HTTP server; yields its base URL ending with /api/0.6/. """
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    httpd.received = []
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield httpd, "http://127.0.0.1:{}/api/0.6/".format(httpd.server_address[1])
    finally:
        httpd.shutdown()
        httpd.server_close()
        thread.join()
