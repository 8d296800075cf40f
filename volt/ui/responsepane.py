"""The response pane: a single response or the results of a load test."""

from __future__ import annotations

import base64
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from volt.loadtest import LoadTestStats
from volt.response import Response
from volt.ui.formatting import format_content_by_type
from volt.ui.keybindings import KeyMap
from volt.ui.tabs import LOAD_TEST_TAB_LABELS, RESPONSE_TAB_LABELS, LoadTestTab, ResponseTab, render_tab_bar
from volt.utils import format_size, status_code_color

_RULE = "─" * 60
_MAX_NS = 2**63 - 1
_NS_PER_MS = 1_000_000

_KEY_COLOR = "212"
_VALUE_COLOR = "252"
_LABEL_COLOR = "93"

_DIRECT_TABS = {"1": ResponseTab.BODY, "2": ResponseTab.HEADERS, "3": ResponseTab.TIMING}
_TAB_COUNT = 3


def _style(
    text: str,
    *,
    fg: str | None = None,
    bg: str | None = None,
    bold: bool = False,
    faint: bool = False,
    pad: int = 0,
) -> str:
    codes = []
    if bold:
        codes.append("1")
    if faint:
        codes.append("2")
    if fg is not None:
        codes.append(f"38;5;{fg}")
    if bg is not None:
        codes.append(f"48;5;{bg}")
    text = " " * pad + text + " " * pad
    if not codes:
        return text
    return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


def _key(text: str) -> str:
    return _style(text, fg=_KEY_COLOR, bold=True)


def _value(text: str) -> str:
    return _style(text, fg=_VALUE_COLOR)


def _label(text: str) -> str:
    return _style(text, fg=_LABEL_COLOR, bold=True)


def _faint(text: str) -> str:
    return _style(text, faint=True)


def _to_ns(seconds: float) -> int:
    ns = round(seconds * 1e9)
    return max(-_MAX_NS, min(_MAX_NS, ns))


def _round_ms(ns: int) -> int:
    """Round to the nearest millisecond, halves away from zero, saturating."""
    magnitude = abs(ns)
    rounded = (magnitude + _NS_PER_MS // 2) // _NS_PER_MS * _NS_PER_MS
    if rounded > _MAX_NS:
        rounded = _MAX_NS
    return rounded if ns >= 0 else -rounded


def _fraction(value: int, precision: int) -> str:
    whole, frac = divmod(value, 10**precision)
    if not frac:
        return str(whole)
    return f"{whole}.{str(frac).zfill(precision).rstrip('0')}"


def _duration_string(ns: int) -> str:
    """Render nanoseconds the way durations are conventionally printed (``1m2.5s``)."""
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    magnitude = abs(ns)
    if magnitude < 1_000:
        return f"{sign}{magnitude}ns"
    if magnitude < _NS_PER_MS:
        return f"{sign}{_fraction(magnitude, 3)}µs"
    if magnitude < 1_000_000_000:
        return f"{sign}{_fraction(magnitude, 6)}ms"
    whole_seconds, frac = divmod(magnitude, 1_000_000_000)
    hours, rest = divmod(whole_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    secs = _fraction(seconds * 1_000_000_000 + frac, 9)
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"


def _rounded(seconds: float) -> str:
    return _duration_string(_round_ms(_to_ns(seconds)))


def _copy_to_clipboard(content: str) -> Callable[[], None]:
    """Command that places ``content`` on the terminal clipboard."""

    def command() -> None:
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        sys.stdout.write(f"\x1b]52;c;{encoded}\x07")
        sys.stdout.flush()

    return command


@dataclass
class _Viewport:
    """A scrollable window onto a block of text."""

    width: int = 20
    height: int = 10
    lines: list[str] = field(default_factory=lambda: [""])
    y_offset: int = 0

    def _max_offset(self) -> int:
        return max(0, len(self.lines) - max(self.height, 0))

    def set_content(self, text: str) -> None:
        self.lines = text.replace("\r\n", "\n").split("\n")
        self.y_offset = min(self.y_offset, self._max_offset())

    def scroll(self, amount: int) -> None:
        self.y_offset = min(max(self.y_offset + amount, 0), self._max_offset())

    def handle_key(self, key: str) -> None:
        page = max(self.height, 1)
        match key:
            case "up" | "k":
                self.scroll(-1)
            case "down" | "j":
                self.scroll(1)
            case "pgup" | "b":
                self.scroll(-page)
            case "pgdown" | "f" | " ":
                self.scroll(page)
            case "ctrl+u" | "u":
                self.scroll(-(page // 2))
            case "ctrl+d" | "d":
                self.scroll(page // 2)

    def view(self) -> str:
        if self.height <= 0:
            return ""
        return "\n".join(self.lines[self.y_offset:self.y_offset + self.height])


@dataclass
class ResponsePane:
    """Shows an HTTP response or load-test statistics in three tabs."""

    keys: KeyMap = field(default_factory=KeyMap.default)
    response: Response | None = None
    load_test_stats: LoadTestStats | None = None
    is_load_test: bool = False
    active_tab: int = ResponseTab.BODY
    _height: int = field(default=30, init=False, repr=False)
    _width: int = field(default=20, init=False, repr=False)
    _viewport: _Viewport = field(default_factory=_Viewport, init=False, repr=False)

    @property
    def height(self) -> int:
        return self._height

    @height.setter
    def height(self, height: int) -> None:
        self._height = height
        # Leave room for the status bar and tabs.
        self._viewport.height = height - 5
        self._viewport.scroll(0)

    @property
    def width(self) -> int:
        return self._width

    @width.setter
    def width(self, width: int) -> None:
        self._width = width
        self._viewport.width = width

    def set_response(self, response: Response | None) -> None:
        """Show a new response."""
        self.response = response
        self.is_load_test = False
        if response is None:
            return
        if response.error:
            self._viewport.set_content(response.error)
            return
        content = format_content_by_type(response.body, response.parse_content_type())
        self._viewport.set_content(content)

    def set_load_test_stats(self, stats: LoadTestStats | None) -> None:
        """Show load-test statistics, starting on the overview tab."""
        self.load_test_stats = stats
        self.is_load_test = True
        self.active_tab = LoadTestTab.OVERVIEW
        self._refresh_viewport()

    def clear_load_test_stats(self) -> None:
        """Drop load-test data and return to showing responses."""
        self.load_test_stats = None
        self.is_load_test = False

    def update(self, key: str) -> Callable[[], None] | None:
        """Handle a key press; returns a command to run, if any."""
        if self.keys.direct_tab.matches(key) and key in _DIRECT_TABS:
            self.active_tab = _DIRECT_TABS[key]
            self._refresh_viewport()

        if self.keys.tab_nav_prev.matches(key):
            self.active_tab = (self.active_tab - 1) % _TAB_COUNT
            self._refresh_viewport()
        if self.keys.tab_nav_next.matches(key):
            self.active_tab = (self.active_tab + 1) % _TAB_COUNT
            self._refresh_viewport()

        if self.keys.copy_response.matches(key):
            if self.response is not None and not self.is_load_test:
                return _copy_to_clipboard(self.response.body)

        self._viewport.handle_key(key)
        return None

    def _refresh_viewport(self) -> None:
        if self.is_load_test:
            self._refresh_load_test_viewport()
            return
        if self.response is None:
            return
        match self.active_tab:
            case ResponseTab.BODY:
                if self.response.error:
                    content = self.response.error
                else:
                    content = format_content_by_type(
                        self.response.body, self.response.parse_content_type()
                    )
            case ResponseTab.HEADERS:
                content = self.render_headers()
            case ResponseTab.TIMING:
                content = self.render_timing()
            case _:
                content = ""
        self._viewport.set_content(content)

    def _refresh_load_test_viewport(self) -> None:
        if self.load_test_stats is None:
            self._viewport.set_content("No data")
            return
        match self.active_tab:
            case LoadTestTab.OVERVIEW:
                content = self.render_load_test_overview()
            case LoadTestTab.LATENCY:
                content = self.render_load_test_latency()
            case LoadTestTab.ERRORS:
                content = self.render_load_test_errors()
            case _:
                content = ""
        self._viewport.set_content(content)

    def view(self) -> str:
        """Render the whole pane."""
        if self.is_load_test:
            return self._render_load_test_view()
        if self.response is None:
            return "Make a request to see the response here!"
        return self._render_normal_view()

    def _render_normal_view(self) -> str:
        if self.response.error:
            status_bar = _style("ERROR", fg="255", bg="196", bold=True, pad=1)
        else:
            status_bar = self._render_header_bar()
        tab_header = render_tab_bar(RESPONSE_TAB_LABELS, self.active_tab)
        return "\n".join([status_bar, "\n", tab_header, self._render_active_tab_content()])

    def _render_load_test_view(self) -> str:
        stats = self.load_test_stats
        if stats is None:
            return "No load test data"
        status = "Load Test " + ("In Progress..." if stats.end_time is None else "Complete")
        status_bar = _style(status, fg="230", bg="62", pad=1)
        tab_header = render_tab_bar(LOAD_TEST_TAB_LABELS, self.active_tab)
        return f"{status_bar}\n{tab_header}{self._viewport.view()}"

    def _render_header_bar(self) -> str:
        response = self.response
        status = _style(response.status, fg=status_code_color(response.status_code))
        millis = int(response.duration * 1000)
        duration = f" {millis} ms" + (" (round trip)" if response.round_trip else " (direct)")
        size = f" {format_size(len(response.body.encode('utf-8')))}"
        return "".join([" | ", status, " | ", duration, " | ", size])

    def _render_active_tab_content(self) -> str:
        match self.active_tab:
            case ResponseTab.BODY:
                return self._viewport.view()
            case ResponseTab.HEADERS:
                return self.render_headers()
            case ResponseTab.TIMING:
                return self.render_timing()
        return "Something went wrong."

    def render_headers(self) -> str:
        """Response headers, sorted by name."""
        if self.response is None or not self.response.headers:
            return "No headers available"
        title = "Response Headers:"
        parts = [f"{title}\n", "-" * (len(title) + 2) + "\n\n"]
        for name in sorted(self.response.headers):
            for value in self.response.headers[name]:
                parts.append(f"{_key(name)}: {_value(value)}\n")
        return "".join(parts)

    def render_timing(self) -> str:
        """Timing details of the response."""
        if self.response is None:
            return "No timing data available"
        response = self.response
        millis = int(response.duration * 1000)
        connection = "Round Trip (new connection)" if response.round_trip else "Direct (keep-alive)"
        return "".join(
            [
                "Request Timing\n",
                f"{_RULE}\n\n",
                f"{_label('Total Duration')}: {_value(_duration_string(_to_ns(response.duration)))}\n\n",
                f"{_label('Milliseconds')}: {_value(f'{millis} ms')}\n\n",
                f"{_label('Connection Type')}: {_value(connection)}\n\n",
                _faint(
                    "Note: Detailed timing breakdown (DNS, TLS, TTFB) coming in a future release!"
                ),
            ]
        )

    def render_load_test_overview(self) -> str:
        """Request counts, success rate, throughput and duration."""
        stats = self.load_test_stats
        if stats is None:
            return "No data"
        succeeded = stats.completed_requests - stats.failed_requests
        success_rate = (
            succeeded / stats.completed_requests * 100 if stats.completed_requests > 0 else 0.0
        )
        end = stats.end_time if stats.end_time is not None else time.time()
        elapsed = end - stats.start_time
        throughput = stats.completed_requests / elapsed if elapsed > 0 else 0.0
        requests_text = f"{stats.completed_requests} / {stats.total_requests}"
        return "".join(
            [
                "Load Test Results\n",
                f"{_RULE}\n\n",
                f"{_label('Requests')}: {_value(requests_text)}\n\n",
                f"{_label('Success')}: {_value(f'{succeeded} ({success_rate:.1f}%)')}\n\n",
                f"{_label('Failed')}: "
                f"{_value(f'{stats.failed_requests} ({100 - success_rate:.1f}%)')}\n\n",
                f"{_label('Throughput')}: {_value(f'{throughput:.1f} req/s')}\n\n",
                f"{_label('Duration')}: {_value(_rounded(elapsed))}\n",
            ]
        )

    def render_load_test_latency(self) -> str:
        """Minimum, percentiles and maximum of the sampled latency."""
        stats = self.load_test_stats
        if stats is None or stats.percentiles is None:
            return "No latency data"
        rows = [
            ("Min", stats.min_duration),
            ("p50", stats.percentiles.percentile(50)),
            ("p90", stats.percentiles.percentile(90)),
            ("p95", stats.percentiles.percentile(95)),
            ("p99", stats.percentiles.percentile(99)),
            ("Max", stats.max_duration),
        ]
        lines = [f"{_label(name)}:    {_value(_rounded(value))}" for name, value in rows]
        return "Latency Distribution\n" + f"{_RULE}\n\n" + "\n\n".join(lines) + "\n"

    def render_load_test_errors(self) -> str:
        """Counts of each failing status code."""
        stats = self.load_test_stats
        if stats is None:
            return "No error data"
        header = "Error Breakdown\n" + f"{_RULE}\n\n"
        if not stats.errors:
            return (
                header
                + _value("No errors encountered!")
                + "\n\n"
                + _faint("All requests completed successfully.")
            )
        return header + "".join(
            f"{_key(f'HTTP {code}')}: {_value(f'{count} occurrences')}\n\n"
            for code, count in sorted(stats.errors.items())
        )