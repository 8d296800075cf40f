"""Keyboard bindings of the interactive interface."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Binding:
    """A set of keys that trigger one action, with its help text."""

    keys: tuple[str, ...]
    help_key: str
    help_desc: str

    def matches(self, key: str) -> bool:
        """Whether ``key`` (e.g. ``"ctrl+c"``) triggers this binding."""
        return key in self.keys


def matches(key: str, binding: Binding) -> bool:
    """Whether ``key`` triggers ``binding``."""
    return binding.matches(key)


def _bind(*keys: str, help_key: str, help_desc: str) -> Binding:
    return Binding(keys=keys, help_key=help_key, help_desc=help_desc)


@dataclass(frozen=True)
class KeyGroup:
    """A named category of bindings, as shown in the help modal."""

    name: str
    bindings: tuple[Binding, ...]


@dataclass(frozen=True)
class KeyMap:
    """Every binding of the application."""

    # Global
    quit: Binding
    show_help: Binding
    cycle_panel: Binding
    escape_panel: Binding
    # Sidebar
    load_request: Binding
    delete_request: Binding
    nav_up: Binding
    nav_down: Binding
    # Request pane
    send_request: Binding
    save_request: Binding
    toggle_load_test: Binding
    next_field: Binding
    prev_field: Binding
    change_method_next: Binding
    change_method_prev: Binding
    # Response pane
    copy_response: Binding
    tab_nav_next: Binding
    tab_nav_prev: Binding
    direct_tab: Binding
    scroll_up: Binding
    scroll_down: Binding
    # Help modal
    close_help: Binding
    next_tab: Binding
    prev_tab: Binding

    @classmethod
    def default(cls) -> KeyMap:
        """The default key configuration."""
        return cls(
            quit=_bind("ctrl+c", help_key="ctrl+c", help_desc="quit"),
            show_help=_bind("?", help_key="?", help_desc="show help"),
            cycle_panel=_bind("shift+tab", help_key="shift+tab", help_desc="cycle panels"),
            escape_panel=_bind("esc", help_key="esc", help_desc="return to sidebar"),
            load_request=_bind("enter", " ", help_key="enter/space", help_desc="load request"),
            delete_request=_bind("d", help_key="d", help_desc="delete request"),
            nav_up=_bind("up", "k", help_key="↑/k", help_desc="navigate up"),
            nav_down=_bind("down", "j", help_key="↓/j", help_desc="navigate down"),
            send_request=_bind(
                "alt+enter", "ctrl+p", help_key="ctrl+p", help_desc="send request"
            ),
            save_request=_bind("ctrl+s", help_key="ctrl+s", help_desc="save request"),
            toggle_load_test=_bind(
                "ctrl+l", help_key="ctrl+l", help_desc="toggle load test"
            ),
            next_field=_bind("tab", "down", help_key="tab/↓", help_desc="next field"),
            prev_field=_bind(
                "shift+tab", "up", help_key="shift+tab/↑", help_desc="previous field"
            ),
            change_method_next=_bind("l", "right", help_key="l/→", help_desc="next method"),
            change_method_prev=_bind(
                "h", "left", help_key="h/←", help_desc="previous method"
            ),
            copy_response=_bind("y", "Y", help_key="y/Y", help_desc="copy response"),
            tab_nav_next=_bind("l", "right", help_key="l/→", help_desc="next tab"),
            tab_nav_prev=_bind("h", "left", help_key="h/←", help_desc="previous tab"),
            direct_tab=_bind("1", "2", "3", help_key="1-3", help_desc="jump to tab"),
            scroll_up=_bind("k", "up", help_key="k/↑", help_desc="scroll up"),
            scroll_down=_bind("j", "down", help_key="j/↓", help_desc="scroll down"),
            close_help=_bind("q", "?", "esc", help_key="q/?/esc", help_desc="close help"),
            next_tab=_bind("l", "right", "tab", help_key="l/→/tab", help_desc="next tab"),
            prev_tab=_bind(
                "h", "left", "shift+tab", help_key="h/←/shift+tab", help_desc="previous tab"
            ),
        )

    def key_groups(self) -> list[KeyGroup]:
        """Bindings organised by context, for the help display."""
        return [
            KeyGroup("Global", (self.show_help, self.cycle_panel, self.quit)),
            KeyGroup(
                "Sidebar",
                (self.load_request, self.delete_request, self.nav_up, self.nav_down),
            ),
            KeyGroup(
                "Request",
                (
                    self.send_request,
                    self.save_request,
                    self.toggle_load_test,
                    self.next_field,
                    self.change_method_next,
                ),
            ),
            KeyGroup(
                "Response",
                (self.direct_tab, self.tab_nav_next, self.copy_response, self.scroll_up),
            ),
        ]