import socket
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from volt.fastclient import CompiledRequest, FastClient


class _Handler(BaseHTTPRequestHandler):
    def _reply(self, code, body, extra=()):
        self.send_response(code)
        self.send_header("Content-Length", str(len(body)))
        for name, value in extra:
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        if self.path == "/fail":
            self._reply(HTTPStatus.INTERNAL_SERVER_ERROR, b"fail\n")
        elif self.path == "/redirect":
            self._reply(HTTPStatus.FOUND, b"", [("Location", "/")])
        elif self.path == "/header":
            self._reply(HTTPStatus.OK, self.headers.get("X-Custom", "").encode())
        else:
            self._reply(HTTPStatus.OK, b"ok")

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        self._reply(HTTPStatus.OK, self.rfile.read(length))

    def log_message(self, *args):
        pass


@pytest.fixture
def server_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_get_returns_status_and_length(server_url):
    with FastClient(5.0, concurrency=4) as client:
        status, length = client.do(CompiledRequest("GET", server_url + "/"))
    assert status == HTTPStatus.OK
    assert length == len(b"ok")


def test_post_body_is_sent(server_url):
    body = b'{"key":"value"}'
    with FastClient(5.0) as client:
        status, length = client.do(CompiledRequest("POST", server_url, body=body))
    assert status == HTTPStatus.OK
    assert length == len(body)


def test_headers_are_sent(server_url):
    compiled = CompiledRequest("GET", server_url + "/header", headers=(("X-Custom", "hello"),))
    with FastClient(5.0) as client:
        status, length = client.do(compiled)
    assert status == HTTPStatus.OK
    assert length == len("hello")


def test_server_error_is_not_an_exception(server_url):
    with FastClient(5.0) as client:
        status, _ = client.do(CompiledRequest("GET", server_url + "/fail"))
    assert status == HTTPStatus.INTERNAL_SERVER_ERROR


def test_redirects_are_not_followed(server_url):
    with FastClient(5.0) as client:
        status, length = client.do(CompiledRequest("GET", server_url + "/redirect"))
    assert status == HTTPStatus.FOUND
    assert length == 0


def test_repeated_requests_reuse_client(server_url):
    compiled = CompiledRequest("GET", server_url + "/")
    with FastClient(5.0) as client:
        results = {client.do(compiled) for _ in range(5)}
    assert results == {(HTTPStatus.OK, len(b"ok"))}


def test_connection_refused_raises():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    with FastClient(1.0) as client:
        with pytest.raises(requests.ConnectionError):
            client.do(CompiledRequest("GET", f"http://127.0.0.1:{port}/"))