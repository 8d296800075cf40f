"""The keyboard-shortcut help modal."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from volt.ui.keybindings import KeyMap
from volt.ui.tabs import render_tab_bar

_DIRECT_TABS = {"1": 0, "2": 1, "3": 2, "4": 3}


@dataclass(frozen=True)
class Shortcut:
    """A key and what it does."""

    key: str
    description: str


@dataclass(frozen=True)
class ShortcutTab:
    """A named category of shortcuts."""

    name: str
    shortcuts: tuple[Shortcut, ...]


@dataclass(frozen=True)
class CloseHelpModalMsg:
    """Asks the application to close the help modal."""


def shortcut_tabs(keys: KeyMap) -> list[ShortcutTab]:
    """Build the help tabs from the actual key bindings."""
    return [
        ShortcutTab(
            name=group.name,
            shortcuts=tuple(Shortcut(b.help_key, b.help_desc) for b in group.bindings),
        )
        for group in keys.key_groups()
    ]


def _close_help() -> CloseHelpModalMsg:
    return CloseHelpModalMsg()


@dataclass
class ShortcutPane:
    """State of the help modal: which category is shown and its size."""

    keys: KeyMap = field(default_factory=KeyMap.default)
    active_tab: int = 0
    height: int = 30
    width: int = 40
    focused: bool = False
    tabs: list[ShortcutTab] = field(init=False)

    def __post_init__(self) -> None:
        self.tabs = shortcut_tabs(self.keys)

    def update(self, key: str) -> Callable[[], CloseHelpModalMsg] | None:
        """Handle a key press; returns a command when the modal should close."""
        if key in _DIRECT_TABS:
            self.active_tab = _DIRECT_TABS[key]

        count = len(self.tabs)
        if count and self.keys.prev_tab.matches(key):
            self.active_tab = (self.active_tab - 1) % count
        if count and self.keys.next_tab.matches(key):
            self.active_tab = (self.active_tab + 1) % count

        if self.keys.close_help.matches(key):
            return _close_help
        return None

    def render_tabs(self) -> str:
        """Render the category tab bar."""
        return render_tab_bar([tab.name for tab in self.tabs], self.active_tab)