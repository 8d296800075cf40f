"""Terminal pane components: editors, viewers, widgets, key bindings and commands."""