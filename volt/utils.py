"""Small helpers shared across the package: sizes, key/value parsing, colours."""

from __future__ import annotations

from enum import IntEnum

SUCCESS_COLOR = "76"
REDIRECT_COLOR = "208"
ERROR_COLOR = "160"
UNUSUAL_COLOR = "96"

_SIZE_UNIT = 1024
_SIZE_PREFIXES = "KMGTPE"


class Panel(IntEnum):
    """The three panels of the interactive screen, in focus-cycling order."""

    SIDEBAR = 0
    REQUEST = 1
    RESPONSE = 2


def format_size(num_bytes: int) -> str:
    """Render a byte count with a binary unit, e.g. ``1.5 KB``."""
    if num_bytes < _SIZE_UNIT:
        return f"{num_bytes} B"
    divisor, exponent = _SIZE_UNIT, 0
    n = num_bytes // _SIZE_UNIT
    while n >= _SIZE_UNIT:
        divisor *= _SIZE_UNIT
        exponent += 1
        n //= _SIZE_UNIT
    return f"{num_bytes / divisor:.1f} {_SIZE_PREFIXES[exponent]}B"


def parse_key_value_pairs(text: str) -> tuple[dict[str, str], list[str]]:
    """Parse ``key = value`` pairs separated by commas.

    Returns the pairs that parsed and a list of messages for those that did not.
    """
    result: dict[str, str] = {}
    errors: list[str] = []
    for piece in text.split(","):
        trimmed = piece.strip()
        if not trimmed:
            continue
        key, sep, value = trimmed.partition("=")
        if not sep:
            errors.append(f"Invalid key-value pair: {trimmed}")
            continue
        key, value = key.strip(), value.strip()
        if not key:
            errors.append(f"Invalid key: {key}")
            continue
        if not value:
            errors.append(f"Invalid value: {value}")
            continue
        result[key] = value
    return result, errors


def parse_map_to_string(data: dict[str, str] | None) -> str:
    """Render a mapping in the form accepted by :func:`parse_key_value_pairs`."""
    if not data:
        return ""
    return "".join(f"{key} = {value},\n" for key, value in data.items())


def status_code_color(status_code: int) -> str:
    """Return the terminal colour code used to display an HTTP status code."""
    text = str(status_code)
    if len(text) != 3:
        return UNUSUAL_COLOR
    match text[0]:
        case "2":
            return SUCCESS_COLOR
        case "3":
            return REDIRECT_COLOR
        case "4" | "5":
            return ERROR_COLOR
        case _:
            return UNUSUAL_COLOR