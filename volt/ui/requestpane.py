"""The request editor: method, URL, name, headers, body and load-test settings."""

from __future__ import annotations

import json
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import IntEnum

from volt.benchconfig import ConfigError, parse_duration
from volt.client import Client
from volt.loadtest import JobConfig
from volt.request import InvalidRequestError, Request
from volt.response import ResultMsg
from volt.storage import RequestStore
from volt.ui.commands import SetRequestPaneRequestMsg, save_request_cmd, start_load_test_cmd
from volt.ui.fields import (
    TextField,
    body_area,
    headers_area,
    load_test_field,
    name_field,
    url_field,
)
from volt.ui.keybindings import KeyMap
from volt.ui.widgets import FocusManager, Focusable, MethodSelector, SubmitButton
from volt.utils import parse_key_value_pairs, parse_map_to_string

Cmd = Callable[[], object]

DEFAULT_CONCURRENCY = 100
DEFAULT_TOTAL_REQUESTS = 10000
DEFAULT_QPS = 0.0
DEFAULT_TIMEOUT = 30.0

_INT = re.compile(r"\s*([+-]?\d+)")
_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class FieldIndex(IntEnum):
    """Positions of the focusable fields; load-test fields follow the body."""

    METHOD_SELECTOR = 0
    URL = 1
    NAME = 2
    HEADERS = 3
    BODY = 4
    SUBMIT_BUTTON = 5
    LT_CONCURRENCY = 5
    LT_TOTAL_REQS = 6
    LT_QPS = 7
    LT_TIMEOUT = 8
    LT_SUBMIT = 9


class _Stopwatch:
    """Measures how long the request in flight has taken."""

    def __init__(self) -> None:
        self._started: float | None = None
        self._accumulated = 0.0

    @property
    def running(self) -> bool:
        return self._started is not None

    def start(self) -> None:
        if self._started is None:
            self._started = time.monotonic()

    def stop(self) -> None:
        if self._started is not None:
            self._accumulated += time.monotonic() - self._started
            self._started = None

    def reset(self) -> None:
        self._accumulated = 0.0
        if self._started is not None:
            self._started = time.monotonic()

    @property
    def elapsed(self) -> float:
        """Elapsed seconds."""
        if self._started is None:
            return self._accumulated
        return self._accumulated + time.monotonic() - self._started


def _go_json(data: dict[str, str]) -> str:
    text = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    for char, escape in (
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("&", "\\u0026"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        text = text.replace(char, escape)
    return text


def send_request_cmd(client: Client, request: Request) -> Cmd:
    """Command that sends ``request`` and yields the result message."""

    def command() -> ResultMsg:
        return ResultMsg(client.send(request))

    return command


class ModeStrategy(ABC):
    """Behaviour that differs between the normal and load-test editors."""

    @abstractmethod
    def components(self, pane: RequestPane) -> list[Focusable]:
        """Focusable controls of this mode, in focus order."""

    @abstractmethod
    def _submit(self, pane: RequestPane, key: str) -> Cmd | None:
        """Start the action of this mode when ``key`` asks for it."""

    def _is_submit_key(self, pane: RequestPane, key: str) -> bool:
        return key == "enter" or pane.keys.send_request.matches(key)

    def focus_manager(self, pane: RequestPane, index: int = 0) -> FocusManager:
        """A focus manager over this mode's controls, starting at ``index``."""
        return FocusManager(self.components(pane), index)

    def _route_to_field(self, pane: RequestPane, key: str) -> Cmd | None:
        current = pane.focus_manager.current()
        if current is pane.method_selector:
            if pane.keys.change_method_next.matches(key):
                pane.method_selector.next()
            if pane.keys.change_method_prev.matches(key):
                pane.method_selector.prev()
            return None
        if current is pane.submit_button:
            return self._submit(pane, key)
        if isinstance(current, TextField):
            current.handle_key(key)
        return None

    def handle_input(self, pane: RequestPane, key: str) -> Cmd | None:
        """Handle a key press not consumed by the pane itself."""
        if pane.keys.send_request.matches(key):
            return self._submit(pane, key)
        if pane.keys.toggle_load_test.matches(key) or pane.keys.save_request.matches(key):
            return None
        return self._route_to_field(pane, key)


class NormalMode(ModeStrategy):
    """Sends a single request."""

    def components(self, pane: RequestPane) -> list[Focusable]:
        return [
            pane.method_selector,
            pane.url_input,
            pane.name_input,
            pane.headers,
            pane.body,
            pane.submit_button,
        ]

    def handle_input(self, pane: RequestPane, key: str) -> Cmd | None:
        if key == "enter":
            return self._submit(pane, key)
        return super().handle_input(pane, key)

    def _submit(self, pane: RequestPane, key: str) -> Cmd | None:
        if not self._is_submit_key(pane, key) or pane.request_in_progress:
            return None
        pane.sync_request()
        pane.request_in_progress = True
        pane.stopwatch.reset()
        pane.stopwatch.start()
        return send_request_cmd(pane.client, pane.request)


class LoadTestMode(ModeStrategy):
    """Configures and starts a load test."""

    def components(self, pane: RequestPane) -> list[Focusable]:
        return [
            pane.method_selector,
            pane.url_input,
            pane.name_input,
            pane.headers,
            pane.body,
            pane.load_test_concurrency,
            pane.load_test_total_reqs,
            pane.load_test_qps,
            pane.load_test_timeout,
            pane.submit_button,
        ]

    def _submit(self, pane: RequestPane, key: str) -> Cmd | None:
        if not self._is_submit_key(pane, key) or pane.request_in_progress:
            return None
        pane.sync_request()
        pane.request_in_progress = True
        try:
            config = pane.build_job_config()
        except InvalidRequestError as exc:
            pane.parse_errors.append(f"Load test config error: {exc}")
            pane.request_in_progress = False
            return None
        return start_load_test_cmd(config)


class RequestPane:
    """Editor state for building and sending requests or load tests."""

    def __init__(
        self,
        db: RequestStore,
        keys: KeyMap | None = None,
        client: Client | None = None,
    ) -> None:
        self.db = db
        self.keys = keys if keys is not None else KeyMap.default()
        self._client = client
        self.stopwatch = _Stopwatch()
        self.panel_focused = False
        self.height = 0
        self.parse_errors: list[str] = []
        self.headers_expanded = False
        self.body_expanded = False
        self.request_in_progress = False
        self.request = Request.default()

        self.method_selector = MethodSelector()
        self.url_input = url_field(db)
        self.name_input = name_field()
        self.headers = headers_area()
        self.body = body_area()
        self.submit_button = SubmitButton()

        self.load_test_concurrency = load_test_field("100", 5, 15)
        self.load_test_total_reqs = load_test_field("10000", 10, 15)
        self.load_test_qps = load_test_field("0 (unlimited)", 10, 15)
        self.load_test_timeout = load_test_field("30s", 10, 15)

        self.load_test_mode = False
        self.mode: ModeStrategy = NormalMode()
        self.focus_manager = self.mode.focus_manager(self)

    @property
    def client(self) -> Client:
        """The client used to send single requests."""
        if self._client is None:
            self._client = Client()
        return self._client

    def current_method(self) -> str:
        """The selected HTTP method."""
        return self.method_selector.current()

    def update(self, msg: object) -> Cmd | None:
        """Handle a key press (a string) or a message; returns a command, if any."""
        if isinstance(msg, SetRequestPaneRequestMsg):
            self.load_request(msg.request)
            return None

        if isinstance(msg, str):
            if not self.panel_focused:
                return None
            if self.keys.toggle_load_test.matches(msg):
                self.toggle_load_test_mode()
                return None
            if self.keys.save_request.matches(msg):
                self.sync_request()
                return save_request_cmd(self.db, self.request)
            if self.keys.next_field.matches(msg):
                self.focus_manager.next()
                return None
            if self.keys.prev_field.matches(msg):
                self.focus_manager.prev()
                return None
            return self.mode.handle_input(self, msg)

        self.sync_request()
        return None

    def sync_request(self) -> None:
        """Copy what the fields hold into the request."""
        self.request.method = self.method_selector.current()
        self.request.url = self.url_input.value
        self.request.name = self.name_input.value

        header_map, header_errors = parse_key_value_pairs(self.headers.value)
        body_map, body_errors = parse_key_value_pairs(self.body.value)

        self.request.headers = header_map
        self.request.body = _go_json(body_map)
        self.parse_errors = header_errors + body_errors

    def build_job_config(self) -> JobConfig:
        """Build a load-test job from the settings fields.

        Unparsable settings fall back to defaults and are noted in
        ``parse_errors``; an invalid request raises :class:`InvalidRequestError`.
        """
        errors: list[str] = []

        concurrency = DEFAULT_CONCURRENCY
        if self.load_test_concurrency.value:
            match = _INT.match(self.load_test_concurrency.value)
            if match is None or int(match[1]) <= 0:
                errors.append("Invalid concurrency (must be positive integer)")
            else:
                concurrency = int(match[1])

        total_requests = DEFAULT_TOTAL_REQUESTS
        if self.load_test_total_reqs.value:
            match = _INT.match(self.load_test_total_reqs.value)
            if match is None or int(match[1]) <= 0:
                errors.append("Invalid total requests (must be positive integer)")
            else:
                total_requests = int(match[1])

        qps = DEFAULT_QPS
        if self.load_test_qps.value:
            match = _FLOAT.match(self.load_test_qps.value)
            if match is None or float(match[1]) < 0:
                errors.append("Invalid QPS (must be non-negative number)")
            else:
                qps = float(match[1])

        timeout = DEFAULT_TIMEOUT
        if self.load_test_timeout.value:
            try:
                parsed = parse_duration(self.load_test_timeout.value)
            except ConfigError:
                errors.append("Invalid timeout format (use 30s, 1m, etc.)")
            else:
                if parsed <= 0:
                    errors.append("Timeout must be positive")
                else:
                    timeout = parsed

        self.parse_errors.extend(errors)

        try:
            self.request.validate()
        except InvalidRequestError as exc:
            raise InvalidRequestError(f"invalid request: {exc}") from exc

        return JobConfig(
            request=self.request,
            concurrency=concurrency,
            total_requests=total_requests,
            qps=qps,
            timeout=timeout,
            stream_updates=True,
        )

    def toggle_load_test_mode(self) -> None:
        """Switch between normal and load-test editing, keeping focus where it can."""
        self.focus_manager.current().blur()
        index = self.focus_manager.current_index
        self.load_test_mode = not self.load_test_mode
        self.mode = LoadTestMode() if self.load_test_mode else NormalMode()
        self.focus_manager = self.mode.focus_manager(self, index)

    def exit_load_test_mode(self) -> None:
        """Return to normal editing after a load test ends."""
        self.focus_manager.current().blur()
        self.load_test_mode = False
        self.request_in_progress = False
        self.mode = NormalMode()
        self.focus_manager = self.mode.focus_manager(self)

    def load_request(self, request: Request) -> None:
        """Fill the fields from a saved request."""
        self.request = request
        self.method_selector.select(request.method)
        self.url_input.value = request.url
        self.name_input.value = request.name
        self.headers.value = parse_map_to_string(request.headers)
        self.body.value = request.body[1:-1]

    def result_cleanup(self) -> None:
        """Reset the stopwatch and progress state once a response arrived."""
        self.stopwatch.stop()
        self.stopwatch = _Stopwatch()
        self.request_in_progress = False