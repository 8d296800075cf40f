import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from volt.benchconfig import BenchConfig, ConfigError
from volt.cli import main, print_help, run_bench


class _OkHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def do_GET(self):
        body = b"ok"
        self.send_response(200)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


@pytest.fixture
def server_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _OkHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}"
    server.shutdown()
    server.server_close()


def test_print_help_lists_flags(capsys):
    print_help()
    out = capsys.readouterr().out
    assert "volt bench" in out
    assert "-url <string>" in out
    assert "-no-keepalive" in out


@pytest.mark.parametrize("flag", ["help", "-h", "--help"])
def test_main_help(flag, capsys):
    assert main([flag]) == 0
    assert "BENCH FLAGS:" in capsys.readouterr().out


def test_main_without_arguments_prints_usage(capsys):
    assert main([]) == 0
    assert "USAGE:" in capsys.readouterr().out


def test_main_reports_flag_errors(capsys):
    assert main(["bench", "-bogus"]) == 1
    assert "Error parsing flags" in capsys.readouterr().err


def test_main_reports_invalid_configuration(capsys):
    assert main(["-url", "ftp://example.com", "-n", "5"]) == 1
    err = capsys.readouterr().err
    assert "Error running benchmark: invalid configuration" in err
    assert "URL must start with http:// or https://" in err


def test_run_bench_rejects_missing_url():
    with pytest.raises(ConfigError, match="invalid configuration: --url is required"):
        run_bench(BenchConfig(url=""))


def test_run_bench_quiet_output(server_url, capsys):
    config = BenchConfig(
        url=server_url, total_requests=6, duration=0, concurrency=2, quiet=True
    )
    run_bench(config)
    out = capsys.readouterr().out
    assert out.startswith("Requests: 6 |")
    assert out.endswith("Failed: 0\n")


def test_run_bench_json_to_file(server_url, tmp_path):
    path = tmp_path / "results.json"
    config = BenchConfig(
        url=server_url,
        total_requests=4,
        duration=0,
        concurrency=2,
        json=True,
        output=str(path),
    )
    run_bench(config)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["summary"]["completedRequests"] == 4
    assert data["summary"]["totalRequests"] == 4
    assert data["summary"]["failedRequests"] == 0


def test_main_bench_json(server_url, capsys):
    assert main(["bench", "-url", server_url, "-n", "4", "-c", "2", "-json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["summary"]["completedRequests"] == 4