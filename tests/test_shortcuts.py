import re

from volt.ui.keybindings import KeyMap
from volt.ui.shortcuts import CloseHelpModalMsg, ShortcutPane, shortcut_tabs

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def test_tabs_mirror_key_groups():
    keys = KeyMap.default()
    tabs = shortcut_tabs(keys)
    groups = keys.key_groups()
    assert [t.name for t in tabs] == [g.name for g in groups]
    for tab, group in zip(tabs, groups):
        assert [(s.key, s.description) for s in tab.shortcuts] == [
            (b.help_key, b.help_desc) for b in group.bindings
        ]


def test_direct_tab_keys():
    pane = ShortcutPane()
    pane.update("2")
    assert pane.tabs[pane.active_tab].name == "Sidebar"
    pane.update("4")
    assert pane.tabs[pane.active_tab].name == "Response"
    pane.update("1")
    assert pane.active_tab == 0


def test_next_wraps_around():
    pane = ShortcutPane()
    pane.update("4")
    pane.update("right")
    assert pane.active_tab == 0
    pane.update("tab")
    pane.update("l")
    assert pane.tabs[pane.active_tab].name == "Request"


def test_prev_wraps_around():
    pane = ShortcutPane()
    pane.update("left")
    assert pane.active_tab == len(pane.tabs) - 1
    pane.update("h")
    assert pane.tabs[pane.active_tab].name == "Request"


def test_close_keys_return_close_command():
    pane = ShortcutPane()
    for key in ("q", "?", "esc"):
        command = pane.update(key)
        assert command() == CloseHelpModalMsg()


def test_other_keys_do_not_close():
    pane = ShortcutPane()
    assert pane.update("x") is None
    assert pane.active_tab == 0


def test_render_tabs_highlights_active():
    pane = ShortcutPane()
    pane.update("3")
    bar = pane.render_tabs()
    plain = ANSI.sub("", bar)
    assert all(tab.name in plain for tab in pane.tabs)
    bold = re.findall(r"\x1b\[1;[0-9;]*m([^\x1b]*)", bar)
    assert [s.strip() for s in bold] == ["Request"]