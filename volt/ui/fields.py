"""Editable text fields of the request editor."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable

from volt.storage import RequestStore

_COMMON_URLS = (
    "http://localhost:3000/health",
    "http://localhost:3000/login",
    "http://localhost:3000/register",
    "http://localhost:3000/logout",
    "http://localhost:3000/me",
    "http://localhost:3000/users/1",
    "http://localhost:3000/posts",
    "http://localhost:3000/posts/42",
    "http://localhost:3000/upload",
    "http://localhost:3000/settings",
    "https://httpbin.org/anything",
)

_DEFAULT_AREA_WIDTH = 40


class TextField:
    """A single- or multi-line text input with optional prefix suggestions.

    ``char_limit`` of 0 means unlimited. Keys are only handled while focused.
    """

    def __init__(
        self,
        *,
        placeholder: str = "",
        char_limit: int = 0,
        width: int = 0,
        value: str = "",
        suggestions: Iterable[str] = (),
        show_suggestions: bool = False,
        multiline: bool = False,
        accept_keys: tuple[str, ...] = ("tab",),
    ) -> None:
        self.placeholder = placeholder
        self.char_limit = char_limit
        self.width = width
        self.suggestions = list(suggestions)
        self.show_suggestions = show_suggestions
        self.multiline = multiline
        self.accept_keys = accept_keys
        self.focused = False
        self.cursor = 0
        self._suggestion_index = 0
        self._value = ""
        self.value = value

    @property
    def value(self) -> str:
        return self._value

    @value.setter
    def value(self, text: str) -> None:
        if self.char_limit > 0:
            text = text[: self.char_limit]
        self._value = text
        self.cursor = len(text)
        self._suggestion_index = 0

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def _matches(self) -> list[str]:
        if not self.show_suggestions or not self._value:
            return []
        typed = self._value.lower()
        return [s for s in self.suggestions if s.lower().startswith(typed)]

    def suggestion(self) -> str | None:
        """The suggestion currently offered for the typed text, if any."""
        matches = self._matches()
        if not matches:
            return None
        return matches[self._suggestion_index % len(matches)]

    def _insert(self, text: str) -> None:
        if self.char_limit > 0:
            text = text[: max(0, self.char_limit - len(self._value))]
        if not text:
            return
        self._value = self._value[: self.cursor] + text + self._value[self.cursor:]
        self.cursor += len(text)
        self._suggestion_index = 0

    def _delete(self, start: int) -> None:
        self._value = self._value[:start] + self._value[start + 1:]
        self._suggestion_index = 0

    def handle_key(self, key: str) -> None:
        """Apply a key press such as ``"a"``, ``"backspace"`` or ``"enter"``."""
        if not self.focused:
            return

        if key in self.accept_keys:
            choice = self.suggestion()
            if choice is not None:
                self.value = self._value[: self.cursor] + choice[self.cursor:]

        match key:
            case "backspace" | "ctrl+h":
                if self.cursor > 0:
                    self.cursor -= 1
                    self._delete(self.cursor)
            case "delete" | "ctrl+d":
                if self.cursor < len(self._value):
                    self._delete(self.cursor)
            case "left" | "ctrl+b":
                self.cursor = max(0, self.cursor - 1)
            case "right" | "ctrl+f":
                self.cursor = min(len(self._value), self.cursor + 1)
            case "home" | "ctrl+a":
                self.cursor = 0
            case "end" | "ctrl+e":
                self.cursor = len(self._value)
            case "down" | "ctrl+n" if not self.multiline:
                self._suggestion_index += 1
            case "up" | "ctrl+p" if not self.multiline:
                self._suggestion_index -= 1
            case "enter" if self.multiline:
                self._insert("\n")
            case _ if len(key) == 1 and key.isprintable():
                self._insert(key)


def url_field(store: RequestStore) -> TextField:
    """URL input suggesting scheme prefixes, saved URLs and common endpoints."""
    try:
        urls = ["http://", "https://", *store.get_all_urls()]
    except sqlite3.Error:
        urls = []
    urls.extend(_COMMON_URLS)
    return TextField(
        char_limit=10000,
        width=60,
        suggestions=urls,
        show_suggestions=True,
        accept_keys=("enter", "right"),
    )


def name_field() -> TextField:
    """Input for the request's name."""
    return TextField(placeholder="My new awesome request..", char_limit=40, width=60)


def load_test_field(placeholder: str, char_limit: int, width: int) -> TextField:
    """Input for one load-test setting."""
    return TextField(placeholder=placeholder, char_limit=char_limit, width=width)


def headers_area() -> TextField:
    """Multi-line input for ``key = value`` headers."""
    return TextField(
        placeholder="Content-Type = multipart/form-data,\nAuthorization= Bearer ...,",
        width=_DEFAULT_AREA_WIDTH,
        multiline=True,
        accept_keys=(),
    )


def body_area() -> TextField:
    """Multi-line input for ``key = value`` body fields."""
    return TextField(
        placeholder="key = value,\nname = volt,\nversion=1.0",
        width=_DEFAULT_AREA_WIDTH,
        multiline=True,
        accept_keys=(),
    )