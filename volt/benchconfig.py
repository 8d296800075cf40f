"""Command-line configuration of a benchmark run."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

VALID_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD"})

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_OCTAL = re.compile(r"[+-]?0[0-7_]+")

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}

# flag name -> (kind, attribute)
_FLAGS = {
    "url": ("str", "url"),
    "m": ("str", "method"),
    "b": ("str", "body"),
    "H": ("header", "headers"),
    "c": ("int", "concurrency"),
    "d": ("duration", "duration"),
    "n": ("int", "total_requests"),
    "t": ("duration", "timeout"),
    "rate": ("int", "rate_limit"),
    "keepalive": ("bool", "keep_alive"),
    "no-keepalive": ("bool", "no_keep_alive"),
    "q": ("bool", "quiet"),
    "json": ("bool", "json"),
    "o": ("str", "output"),
}


class ConfigError(ValueError):
    """Raised for unparsable flags or an invalid benchmark configuration."""


def parse_duration(text: str) -> float:
    """Parse a duration such as ``30s``, ``5m`` or ``1h30m`` into seconds."""
    rest = text
    sign = 1.0
    if rest[:1] in ("+", "-") and rest:
        sign = -1.0 if rest[0] == "-" else 1.0
        rest = rest[1:]
    if rest == "0":
        return 0.0
    if not rest:
        raise ConfigError(f'invalid duration "{text}"')
    total = 0.0
    pos = 0
    while pos < len(rest):
        match = _DURATION_PART.match(rest, pos)
        if match is None:
            raise ConfigError(f'invalid duration "{text}"')
        total += float(match[1]) * _UNITS[match[2]]
        pos = match.end()
    return sign * total


@dataclass
class BenchConfig:
    """Settings for a benchmark run; durations are in seconds."""

    url: str = ""
    method: str = "GET"
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    concurrency: int = 50
    duration: float = 10.0
    total_requests: int = 0
    timeout: float = 30.0
    rate_limit: int = 0
    keep_alive: bool = True
    quiet: bool = False
    json: bool = False
    output: str = ""

    def validate(self) -> None:
        """Raise :class:`ConfigError` if the configuration cannot be run."""
        if not self.url:
            raise ConfigError("--url is required")
        if not self.url.startswith(("http://", "https://")):
            raise ConfigError("URL must start with http:// or https://")
        if self.method.upper() not in VALID_METHODS:
            raise ConfigError("invalid HTTP method")
        if self.concurrency <= 0:
            raise ConfigError("concurrency must be > 0")
        if self.duration == 0 and self.total_requests == 0:
            raise ConfigError("must specify either -d (duration) or -n (total requests)")
        if self.duration > 0 and self.total_requests > 0:
            raise ConfigError("-d and -n are mutually exclusive")
        if self.timeout <= 0:
            raise ConfigError("timeout must be > 0")
        if self.rate_limit < 0:
            raise ConfigError("rate limit must be >= 0")


def _parse_header(text: str) -> tuple[str, str]:
    key, sep, value = text.partition(":")
    if not sep:
        raise ConfigError("header must be in format 'Key: Value'")
    return key.strip(), value.strip()


def _parse_int(name: str, text: str) -> int:
    try:
        if _OCTAL.fullmatch(text):
            return int(text, 8)
        return int(text, 0)
    except ValueError:
        raise ConfigError(f'invalid value "{text}" for flag -{name}: parse error') from None


def _convert(kind: str, name: str, text: str):
    if kind == "int":
        return _parse_int(name, text)
    if kind == "duration":
        try:
            return parse_duration(text)
        except ConfigError:
            raise ConfigError(f'invalid value "{text}" for flag -{name}: parse error') from None
    return text


def parse_bench_flags(args: list[str]) -> BenchConfig:
    """Parse benchmark flags (``-name value``, ``-name=value``, ``--name``)."""
    values: dict[str, object] = {}
    headers: dict[str, str] = {}
    position = 0
    while position < len(args):
        arg = args[position]
        if len(arg) < 2 or not arg.startswith("-"):
            break
        position += 1
        if arg == "--":
            break
        name = arg[2:] if arg.startswith("--") else arg[1:]
        if not name or name[0] in "-=":
            raise ConfigError(f"bad flag syntax: {arg}")
        name, has_value, value = name.partition("=")

        spec = _FLAGS.get(name)
        if spec is None:
            if name in ("h", "help"):
                raise ConfigError("flag: help requested")
            raise ConfigError(f"flag provided but not defined: -{name}")
        kind, attribute = spec

        if kind == "bool":
            if not has_value:
                values[attribute] = True
            elif value in _TRUE:
                values[attribute] = True
            elif value in _FALSE:
                values[attribute] = False
            else:
                raise ConfigError(f'invalid boolean value "{value}" for -{name}: parse error')
            continue

        if not has_value:
            if position >= len(args):
                raise ConfigError(f"flag needs an argument: -{name}")
            value = args[position]
            position += 1

        if kind == "header":
            key, header_value = _parse_header(value)
            headers[key] = header_value
        else:
            values[attribute] = _convert(kind, name, value)

    keep_alive = bool(values.pop("keep_alive", True))
    no_keep_alive = bool(values.pop("no_keep_alive", False))
    config = BenchConfig(**values, headers=headers)

    if config.total_requests > 0:
        config.duration = 0.0
    config.keep_alive = False if no_keep_alive else keep_alive
    return config