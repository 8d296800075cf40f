"""Command-line entry point and the benchmark runner."""

from __future__ import annotations

import contextlib
import queue
import signal
import sys
import threading
from collections.abc import Iterator

from volt.benchconfig import BenchConfig, ConfigError, parse_bench_flags
from volt.loadtest import JobConfig, LoadTestStats
from volt.output import format_output
from volt.request import Request

ESTIMATED_REQS_PER_WORKER_PER_SEC = 1000
_POLL_INTERVAL = 0.1

HELP_TEXT = """Volt - Terminal HTTP Client and Load Tester

USAGE:
  volt             Launch interactive TUI
  volt bench       Run CLI load test

BENCH FLAGS:
  -url <string>     Target URL (required)
  -c <int>          Number of concurrent connections (default: 50)
  -d <duration>     Test duration, e.g. "30s", "5m" (default: 10s)
  -n <int>          Total number of requests (mutually exclusive with -d)
  -m <string>       HTTP method (default: GET)
  -H <string>       Custom header, repeatable (format: "Key: Value")
  -b <string>       Request body
  -t <duration>     Request timeout (default: 30s)
  -rate <int>       Rate limit (requests/sec, 0 = unlimited)
  -keepalive        Enable HTTP keep-alive (default: true)
  -no-keepalive     Disable HTTP keep-alive
  -q                Quiet mode (minimal output)
  -json             Output results as JSON
  -o <file>         Write results to file

EXAMPLES:
  # Basic throughput test
  volt bench -url http://localhost:8080 -c 100 -d 30s

  # POST request with custom headers
  volt bench -url http://localhost:8080/api -m POST \\
    -b '{"test":true}' -H "Content-Type: application/json"

  # JSON output to file for CI/CD
  volt bench -url http://localhost:8080 -c 50 -d 60s -json -o results.json

  # Rate-limited testing
  volt bench -url http://localhost:8080 -c 10 -d 30s -rate 1000

  # Quiet mode (just final stats)
  volt bench -url http://localhost:8080 -c 100 -n 10000 -q"""

_HELP_ARGS = ("help", "-h", "--help")


def print_help() -> None:
    """Write usage information to standard output."""
    stream = sys.stdout
    stream.write(f"{HELP_TEXT}\n")
    stream.flush()


@contextlib.contextmanager
def _sigterm_as_interrupt() -> Iterator[None]:
    """Treat SIGTERM like Ctrl+C while the benchmark runs."""
    if threading.current_thread() is not threading.main_thread() or not hasattr(
        signal, "SIGTERM"
    ):
        yield
        return
    previous = signal.signal(signal.SIGTERM, signal.default_int_handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def run_bench(config: BenchConfig) -> None:
    """Validate ``config``, run the load test and write its results."""
    try:
        config.validate()
    except ConfigError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc

    request = Request(
        method=config.method,
        url=config.url,
        headers=dict(config.headers),
        body=config.body,
    )

    total_requests = config.total_requests
    if total_requests == 0:
        total_requests = max(
            config.concurrency * int(config.duration) * ESTIMATED_REQS_PER_WORKER_PER_SEC,
            1,
        )

    job = JobConfig(
        request=request,
        concurrency=config.concurrency,
        total_requests=total_requests,
        timeout=config.timeout,
        qps=float(config.rate_limit),
        stream_updates=False,
    )

    updates: queue.Queue = queue.Queue()
    failures: list[Exception] = []

    def run_job() -> None:
        try:
            job.run(updates)
        except Exception as exc:  # surfaced to the caller below
            failures.append(exc)
            updates.put(None)

    threading.Thread(target=run_job, daemon=True).start()

    final: LoadTestStats | None = None
    with _sigterm_as_interrupt():
        try:
            while True:
                try:
                    stats = updates.get(timeout=_POLL_INTERVAL)
                except queue.Empty:
                    continue
                if stats is None:
                    break
                final = stats
        except KeyboardInterrupt:
            print("\nTest interrupted by user", file=sys.stderr)
            if final is not None:
                format_output(final, config)
            return

    if failures:
        raise failures[0]
    if final is not None:
        format_output(final, config)


def main(argv: list[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] in _HELP_ARGS:
        print_help()
        return 0

    if args[0] == "bench":
        args = args[1:]

    try:
        config = parse_bench_flags(args)
    except ConfigError as exc:
        print(f"Error parsing flags: {exc}", file=sys.stderr)
        return 1

    try:
        run_bench(config)
    except (ConfigError, OSError, ValueError) as exc:
        print(f"Error running benchmark: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())