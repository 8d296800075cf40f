import base64
import re

import pytest

from volt.loadtest import LoadTestStats
from volt.response import Response
from volt.ui.responsepane import ResponsePane
from volt.utils import format_size

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


def plain(text):
    return _ANSI.sub("", text)


@pytest.fixture
def json_response():
    return Response(
        status_code=200,
        status="200 OK",
        headers={"Content-Type": ["application/json"]},
        body='{"name":"volt"}',
        duration=0.25,
    )


def lines_response(count=30):
    return Response(error="\n".join(f"line{i:02d}" for i in range(count)))


def finished_stats():
    return LoadTestStats(
        total_requests=10,
        completed_requests=10,
        failed_requests=0,
        start_time=100.0,
        end_time=102.0,
    )


def test_view_without_response():
    pane = ResponsePane()
    assert pane.view() == "Make a request to see the response here!"


def test_view_with_response(json_response):
    pane = ResponsePane()
    pane.set_response(json_response)
    text = plain(pane.view())
    assert "200 OK" in text
    assert "250 ms (direct)" in text
    assert format_size(len(json_response.body)) in text
    assert "[1] Body" in text
    assert "volt" in text


def test_view_with_error_response():
    pane = ResponsePane()
    pane.set_response(Response(error="connection refused"))
    text = plain(pane.view())
    assert "ERROR" in text
    assert "connection refused" in text


def test_render_headers_sorted():
    pane = ResponsePane()
    pane.set_response(
        Response(
            status_code=200,
            status="200 OK",
            headers={"X-B": ["2"], "A-Head": ["1"], "Set-Cookie": ["a", "b"]},
        )
    )
    text = plain(pane.render_headers())
    assert text.startswith("Response Headers:\n" + "-" * (len("Response Headers:") + 2))
    assert text.index("A-Head: 1") < text.index("Set-Cookie: a") < text.index("Set-Cookie: b")
    assert text.index("Set-Cookie: b") < text.index("X-B: 2")


def test_render_headers_without_response():
    assert ResponsePane().render_headers() == "No headers available"


def test_render_timing(json_response):
    pane = ResponsePane()
    pane.set_response(json_response)
    text = plain(pane.render_timing())
    assert "Total Duration: 250ms" in text
    assert "Milliseconds: 250 ms" in text
    assert "Direct (keep-alive)" in text


def test_render_timing_round_trip(json_response):
    json_response.round_trip = True
    pane = ResponsePane()
    pane.set_response(json_response)
    assert "Round Trip (new connection)" in plain(pane.render_timing())
    assert "(round trip)" in plain(pane.view())


def test_render_timing_without_response():
    assert ResponsePane().render_timing() == "No timing data available"


def test_direct_and_cycling_tabs(json_response):
    pane = ResponsePane()
    pane.set_response(json_response)
    pane.update("2")
    assert pane.active_tab == 1
    assert "Response Headers:" in plain(pane.view())
    pane.update("3")
    assert "Request Timing" in plain(pane.view())
    pane.update("l")
    assert pane.active_tab == 0
    pane.update("h")
    assert pane.active_tab == 2


def test_copy_writes_clipboard_sequence(json_response, capsys):
    pane = ResponsePane()
    pane.set_response(json_response)
    command = pane.update("y")
    command()
    out = capsys.readouterr().out
    assert base64.b64encode(json_response.body.encode()).decode() in out
    assert out.startswith("\x1b]52;")


def test_copy_ignored_in_load_test_mode(json_response):
    pane = ResponsePane()
    pane.set_response(json_response)
    pane.set_load_test_stats(finished_stats())
    assert pane.update("y") is None
    assert pane.is_load_test


def test_scrolling_and_height():
    pane = ResponsePane()
    pane.set_response(lines_response())
    text = plain(pane.view())
    assert "line00" in text
    assert "line10" not in text
    pane.update("j")
    text = plain(pane.view())
    assert "line00" not in text
    assert "line10" in text
    pane.update("k")
    assert "line00" in plain(pane.view())
    pane.height = 8
    text = plain(pane.view())
    assert "line02" in text
    assert "line03" not in text


def test_load_test_view_complete_and_in_progress():
    pane = ResponsePane()
    stats = finished_stats()
    pane.set_load_test_stats(stats)
    assert pane.active_tab == 0
    text = plain(pane.view())
    assert "Load Test Complete" in text
    assert "Load Test Results" in text
    stats.end_time = None
    assert "Load Test In Progress..." in plain(pane.view())


def test_load_test_overview():
    pane = ResponsePane()
    pane.set_load_test_stats(finished_stats())
    text = plain(pane.render_load_test_overview())
    assert "Requests: 10 / 10" in text
    assert "Duration: 2s" in text


def test_load_test_without_stats():
    pane = ResponsePane()
    pane.set_load_test_stats(None)
    assert pane.render_load_test_overview() == "No data"
    assert pane.render_load_test_errors() == "No error data"
    assert pane.view() == "No load test data"


def test_load_test_latency_order():
    stats = finished_stats()
    stats.min_duration = 0.005
    stats.max_duration = 0.2
    stats.percentiles.add(50.0, 1)
    pane = ResponsePane()
    pane.set_load_test_stats(stats)
    text = plain(pane.render_load_test_latency())
    positions = [text.index(label) for label in ("Min:", "p50:", "p90:", "p95:", "p99:", "Max:")]
    assert positions == sorted(positions)
    assert "Max:    200ms" in text


def test_load_test_errors():
    stats = finished_stats()
    pane = ResponsePane()
    pane.set_load_test_stats(stats)
    assert "No errors encountered!" in plain(pane.render_load_test_errors())
    stats.errors = {"500": 3}
    pane.update("3")
    assert pane.active_tab == 2
    assert "HTTP 500: 3 occurrences" in plain(pane.view())


def test_clear_load_test_stats(json_response):
    pane = ResponsePane()
    pane.set_response(json_response)
    pane.set_load_test_stats(finished_stats())
    pane.clear_load_test_stats()
    assert pane.load_test_stats is None
    assert not pane.is_load_test
    assert "200 OK" in plain(pane.view())