"""HTTP client, request store, load tester and terminal pane components."""

__version__ = "0.1.0"