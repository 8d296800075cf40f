"""Tab identifiers and tab-bar rendering."""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum

_RESET = "\x1b[0m"
_ACTIVE = "\x1b[1;38;5;255;48;5;98m"
_INACTIVE = "\x1b[38;5;240m"


class ResponseTab(IntEnum):
    """Tabs of the response pane for a single request."""

    BODY = 0
    HEADERS = 1
    TIMING = 2

    @property
    def label(self) -> str:
        return RESPONSE_TAB_LABELS[self]


class LoadTestTab(IntEnum):
    """Tabs of the response pane for load-test results."""

    OVERVIEW = 0
    LATENCY = 1
    ERRORS = 2

    @property
    def label(self) -> str:
        return LOAD_TEST_TAB_LABELS[self]


RESPONSE_TAB_LABELS = ("[1] Body", "[2] Headers", "[3] Timing")
LOAD_TEST_TAB_LABELS = ("[1] Overview", "[2] Latency", "[3] Errors")


def render_tab_bar(tabs: Sequence[str], active: int) -> str:
    """Render a one-line tab bar, highlighting the tab at index ``active``."""
    segments = [
        f"{_ACTIVE}  {name}  {_RESET}" if position == active else f"{_INACTIVE} {name} {_RESET}"
        for position, name in enumerate(tabs)
    ]
    return "".join(segments) + "\n"