"""Focus handling and the small focusable controls of the request editor."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from volt.request import DELETE, GET, PATCH, POST, PUT

FOCUS_COLOR = "205"
UNFOCUS_COLOR = "240"

METHOD_COLORS = {
    GET: "42",
    POST: "214",
    PUT: "117",
    PATCH: "141",
    DELETE: "196",
}


class Focusable(Protocol):
    """A control that can take and lose keyboard focus."""

    def focus(self) -> None: ...

    def blur(self) -> None: ...


class FocusManager:
    """Moves focus around a fixed ring of controls."""

    def __init__(self, components: Sequence[Focusable], index: int = 0) -> None:
        self._components = list(components)
        if not 0 <= index < len(self._components):
            index = 0
        self._index = index
        if self._components:
            self._components[index].focus()

    @property
    def current_index(self) -> int:
        """Position of the focused control."""
        return self._index

    def _move(self, step: int) -> None:
        if not self._components:
            raise IndexError("no focusable components")
        self._components[self._index].blur()
        self._index = (self._index + step) % len(self._components)
        self._components[self._index].focus()

    def next(self) -> None:
        """Focus the next control, wrapping around."""
        self._move(1)

    def prev(self) -> None:
        """Focus the previous control, wrapping around."""
        self._move(-1)

    def current(self) -> Focusable:
        """The focused control."""
        if not self._components:
            raise IndexError("no focusable components")
        return self._components[self._index]


@dataclass
class SubmitButton:
    """The send button."""

    focused: bool = False

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False


@dataclass(frozen=True)
class MethodStyle:
    """Colours used to draw the method selector; ``foreground`` may be unset."""

    foreground: str | None
    border: str


@dataclass
class MethodSelector:
    """Cycles through the HTTP methods that can be sent."""

    methods: tuple[str, ...] = (GET, POST, PUT, PATCH, DELETE)
    index: int = 0
    focused: bool = False

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def current(self) -> str:
        """The selected method."""
        return self.methods[self.index]

    def next(self) -> None:
        """Select the next method, wrapping around."""
        self.index = (self.index + 1) % len(self.methods)

    def prev(self) -> None:
        """Select the previous method, wrapping around."""
        self.index = (self.index - 1) % len(self.methods)

    def select(self, method: str) -> None:
        """Select ``method``; unknown or empty methods are ignored."""
        if method in self.methods:
            self.index = self.methods.index(method)

    def color(self) -> MethodStyle:
        """Colours for the selected method and the current focus state."""
        return MethodStyle(
            foreground=METHOD_COLORS.get(self.current()),
            border=FOCUS_COLOR if self.focused else UNFOCUS_COLOR,
        )