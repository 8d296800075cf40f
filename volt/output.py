"""Rendering of load-test results as a table, JSON or a single line."""

from __future__ import annotations

import json
import math
import time

from volt.benchconfig import BenchConfig
from volt.loadtest import LoadTestStats

_BYTES_PER_MB = 1024 * 1024
_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000


def _to_ns(seconds: float) -> int:
    return round(seconds * 1e9)


def _truncate_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // denominator
    return quotient if numerator >= 0 else -quotient


def _millis(seconds: float) -> int:
    """Whole milliseconds in ``seconds``, truncated toward zero."""
    return _truncate_div(_to_ns(seconds), _NS_PER_MS)


def _ratio(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    if numerator == 0:
        return math.nan
    return math.copysign(math.inf, numerator)


def _elapsed(stats: LoadTestStats) -> float:
    end = stats.end_time if stats.end_time is not None else time.time()
    return end - stats.start_time


def _average(stats: LoadTestStats) -> float:
    """Mean sampled latency in seconds, at whole-nanosecond precision."""
    if stats.completed_requests <= 0:
        return 0.0
    return (_to_ns(stats.total_duration) // stats.completed_requests) / 1e9


def format_number(n: int) -> str:
    """Render an integer with thousands separators."""
    return f"{n:,}"


def format_duration(seconds: float) -> str:
    """Render a duration with the most readable unit (ns, µs, ms or s)."""
    ns = _to_ns(seconds)
    if ns < _NS_PER_US:
        return f"{ns}ns"
    if ns < _NS_PER_MS:
        return f"{ns / _NS_PER_US:.0f}µs"
    if ns < _NS_PER_S:
        return f"{ns / 1e6:.2f}ms"
    return f"{ns / 1e9:.2f}s"


def format_table(stats: LoadTestStats) -> str:
    """Human-readable multi-line report."""
    duration = _elapsed(stats)
    completed = stats.completed_requests
    succeeded = completed - stats.failed_requests
    success_rate = _ratio(succeeded, completed) * 100
    rps = _ratio(completed, duration)
    data_per_sec = _ratio(stats.bytes_sent + stats.bytes_recv, duration) / _BYTES_PER_MB
    percentiles = stats.percentiles

    lines = [
        "\nVolt Load Test Results\n\n",
        f"Duration:       {duration:.2f}s\n",
        f"Total Requests: {format_number(completed)}\n\n",
        "Summary:\n",
        f"  Success:      {format_number(succeeded)} ({success_rate:.2f}%)\n",
        f"  Failed:       {format_number(stats.failed_requests)} ({100 - success_rate:.2f}%)\n",
        f"  Requests/sec: {rps:.2f}\n",
        f"  Data/sec:     {data_per_sec:.2f} MB\n\n",
        "Latency:\n",
        f"  Min:          {format_duration(stats.min_duration)}\n",
        f"  Mean:         {format_duration(_average(stats))}\n",
        f"  p50:          {format_duration(percentiles.percentile(50))}\n",
        f"  p95:          {format_duration(percentiles.percentile(95))}\n",
        f"  p99:          {format_duration(percentiles.percentile(99))}\n",
        f"  Max:          {format_duration(stats.max_duration)}\n\n",
    ]

    if stats.errors:
        lines.append("Status Codes:\n")
        lines.extend(
            f"  {code}:          {format_number(count)}\n"
            for code, count in sorted(stats.errors.items())
        )
    return "".join(lines)


def format_json(stats: LoadTestStats) -> str:
    """Machine-readable report, indented JSON with a trailing newline."""
    duration = _elapsed(stats)
    completed = stats.completed_requests
    success_rate = (completed - stats.failed_requests) / completed if completed else 0.0
    throughput = completed / duration if duration > 0 else 0.0
    percentiles = stats.percentiles

    result = {
        "summary": {
            "totalRequests": stats.total_requests,
            "completedRequests": completed,
            "failedRequests": stats.failed_requests,
            "successRate": success_rate,
            "throughput": throughput,
            "durationMs": _millis(duration),
        },
        "latency": {
            "minMs": _millis(stats.min_duration),
            "avgMs": _millis(_average(stats)),
            "p50Ms": _millis(percentiles.percentile(50)),
            "p90Ms": _millis(percentiles.percentile(90)),
            "p95Ms": _millis(percentiles.percentile(95)),
            "p99Ms": _millis(percentiles.percentile(99)),
            "maxMs": _millis(stats.max_duration),
        },
        "errors": dict(stats.errors),
    }
    return json.dumps(result, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def format_quiet(stats: LoadTestStats) -> str:
    """One-line summary."""
    rps = _ratio(stats.completed_requests, _elapsed(stats))
    p50 = format_duration(stats.percentiles.percentile(50))
    p99 = format_duration(stats.percentiles.percentile(99))
    return (
        f"Requests: {stats.completed_requests} | RPS: {rps:.2f} | "
        f"p50: {p50} | p99: {p99} | Failed: {stats.failed_requests}\n"
    )


def format_output(stats: LoadTestStats, config: BenchConfig) -> None:
    """Write ``stats`` in the format ``config`` asks for, to its file or stdout."""
    if config.json:
        text = format_json(stats)
    elif config.quiet:
        text = format_quiet(stats)
    else:
        text = format_table(stats)

    if config.output:
        with open(config.output, "w", encoding="utf-8") as handle:
            handle.write(text)
        return
    print(text, end="")