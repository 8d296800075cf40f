"""Concurrent load testing: workers, aggregation and streaming statistics."""

from __future__ import annotations

import bisect
import math
import queue
import threading
import time
from dataclasses import dataclass, field, replace

import requests

from volt.fastclient import CompiledRequest, FastClient
from volt.request import Request

# Reported as the minimum latency until a sample has been seen.
UNSET_MIN_DURATION = (2**63 - 1) / 1e9

STREAM_INTERVAL = 0.3
SAMPLE_MASK = 0xFF
_MERGE_THRESHOLD_FACTOR = 5


class PercentileCalculator:
    """Thread-safe streaming quantile estimator over latencies in milliseconds.

    A compact digest of weighted centroids; ``compression`` bounds its size.
    """

    def __init__(self, compression: float = 100.0) -> None:
        self.compression = compression
        self._centroids: list[list[float]] = []
        self._pending: list[list[float]] = []
        self._total = 0.0
        self._lock = threading.Lock()

    def add(self, value: float, weight: float = 1.0) -> None:
        """Record ``value`` (milliseconds) with the given weight."""
        if weight <= 0:
            raise ValueError("weight must be positive")
        with self._lock:
            bisect.insort(self._pending, [float(value), float(weight)])
            if len(self._pending) > _MERGE_THRESHOLD_FACTOR * self.compression:
                self._merge()

    def _merge(self) -> None:
        if not self._pending:
            return
        points = sorted(self._centroids + self._pending)
        self._pending = []
        total = sum(weight for _, weight in points)
        merged: list[list[float]] = []
        seen = 0.0
        for mean, weight in points:
            if merged:
                last = merged[-1]
                centre = seen - last[1] + (last[1] + weight) / 2
                q = centre / total
                limit = 4 * total * q * (1 - q) / self.compression
                if last[1] + weight <= limit:
                    combined = last[1] + weight
                    last[0] += (mean - last[0]) * weight / combined
                    last[1] = combined
                    seen += weight
                    continue
            merged.append([mean, weight])
            seen += weight
        self._centroids = merged
        self._total = total

    def _quantile(self, q: float) -> float:
        with self._lock:
            self._merge()
            centroids = [tuple(c) for c in self._centroids]
            total = self._total
        if not centroids:
            return math.nan
        if len(centroids) == 1:
            return centroids[0][0]
        index = q * total
        seen = 0.0
        previous: tuple[float, float] | None = None
        for mean, weight in centroids:
            centre = seen + weight / 2
            if index < centre:
                if previous is None:
                    return mean
                prev_mean, prev_centre = previous
                return prev_mean + (mean - prev_mean) * (index - prev_centre) / (centre - prev_centre)
            previous = (mean, centre)
            seen += weight
        return centroids[-1][0]

    def percentile(self, percentile: float) -> float:
        """Return the given percentile (0-100) in seconds, truncated to whole ms."""
        millis = self._quantile(percentile / 100.0)
        if math.isnan(millis):
            return 0.0
        return int(millis) / 1000


@dataclass
class LoadTestStats:
    """Aggregated statistics of a load test; times are seconds."""

    total_requests: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    completed_requests: int = 0
    failed_requests: int = 0
    min_duration: float = UNSET_MIN_DURATION
    max_duration: float = 0.0
    total_duration: float = 0.0
    percentiles: PercentileCalculator = field(
        default_factory=lambda: PercentileCalculator(100.0), repr=False, compare=False
    )
    bytes_sent: int = 0
    bytes_recv: int = 0
    errors: dict[str, int] = field(default_factory=dict)
    cpu_usage: float = 0.0
    memory_usage: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def snapshot(self) -> LoadTestStats:
        """Return a consistent copy; the percentile calculator is shared."""
        with self._lock:
            return replace(self, errors=dict(self.errors))


@dataclass
class _WorkerStats:
    requests: int = 0
    failures: int = 0
    sampled_count: int = 0
    sampled_min: float = 0.0
    sampled_max: float = 0.0
    sampled_total: float = 0.0
    error_codes: dict[int, int] = field(default_factory=dict)


_DONE = object()


def compile_request(request: Request) -> CompiledRequest:
    """Prepare ``request`` for repeated sending."""
    return CompiledRequest(
        method=request.method,
        url=request.url,
        headers=tuple((request.headers or {}).items()),
        body=request.body.encode() if request.body else None,
    )


@dataclass
class JobConfig:
    """A load test: what to send, how many times and how hard.

    ``timeout`` is seconds per request (0 means no limit); ``qps`` limits the
    rate of each worker (0 means unlimited).
    """

    request: Request
    concurrency: int = 1
    total_requests: int = 0
    rate_limit: int = 0
    timeout: float = 0.0
    qps: float = 0.0
    stream_updates: bool = False
    compiled: CompiledRequest | None = field(default=None, init=False, repr=False)
    stats: LoadTestStats | None = field(default=None, init=False, repr=False)

    def run(self, updates: queue.Queue) -> None:
        """Run the test, putting stats snapshots on ``updates``.

        The last snapshot is the final result; ``None`` follows it to mark the end.
        """
        if self.concurrency <= 0:
            raise ValueError("concurrency must be > 0")
        self.stats = LoadTestStats(total_requests=self.total_requests)
        self.compiled = compile_request(self.request)
        inbox: queue.Queue = queue.Queue(maxsize=self.concurrency * 4)

        aggregator = threading.Thread(
            target=self._aggregate, args=(inbox, updates), daemon=True
        )
        aggregator.start()

        with FastClient(self.timeout or None, self.concurrency) as client:
            workers = [
                threading.Thread(
                    target=self._run_worker, args=(worker_id, client, inbox), daemon=True
                )
                for worker_id in range(self.concurrency)
            ]
            for worker in workers:
                worker.start()
            for worker in workers:
                worker.join()

        inbox.put(_DONE)
        aggregator.join()

    def _requests_for(self, worker_id: int) -> int:
        share, remainder = divmod(self.total_requests, self.concurrency)
        return share + 1 if worker_id < remainder else share

    def _run_worker(self, worker_id: int, client: FastClient, inbox: queue.Queue) -> None:
        stats = _WorkerStats()
        interval = max(int(1e6 / self.qps), 1) / 1e6 if self.qps > 0 else None
        next_tick = time.monotonic() + interval if interval else 0.0

        for i in range(self._requests_for(worker_id)):
            if interval:
                delay = next_tick - time.monotonic()
                if delay > 0:
                    time.sleep(delay)
                next_tick = max(next_tick + interval, time.monotonic())

            sample = (i & SAMPLE_MASK) == 0
            start = time.perf_counter() if sample else 0.0

            failed = False
            status = 0
            try:
                status, _ = client.do(self.compiled)
            except requests.RequestException as exc:
                failed = True
                status = exc.response.status_code if exc.response is not None else 0
            except (OSError, ValueError):
                failed = True

            if sample:
                elapsed = time.perf_counter() - start
                stats.sampled_count += 1
                if stats.sampled_min == 0 or elapsed < stats.sampled_min:
                    stats.sampled_min = elapsed
                stats.sampled_max = max(stats.sampled_max, elapsed)
                stats.sampled_total += elapsed

            stats.requests += 1
            if failed:
                stats.failures += 1
                if status > 0:
                    stats.error_codes[status] = stats.error_codes.get(status, 0) + 1

            if sample and i > 0:
                self._flush(inbox, stats)
                stats = _WorkerStats()

        self._flush(inbox, stats)

    @staticmethod
    def _flush(inbox: queue.Queue, stats: _WorkerStats) -> None:
        # A flush is dropped when the aggregator is behind.
        try:
            inbox.put_nowait(stats)
        except queue.Full:
            pass

    def _aggregate(self, inbox: queue.Queue, updates: queue.Queue) -> None:
        stats = self.stats
        next_tick = time.monotonic() + STREAM_INTERVAL if self.stream_updates else None
        while True:
            timeout = None if next_tick is None else max(0.0, next_tick - time.monotonic())
            try:
                message = inbox.get(timeout=timeout)
            except queue.Empty:
                updates.put(stats.snapshot())
                next_tick += STREAM_INTERVAL
                continue

            if message is _DONE:
                stats.end_time = time.time()
                updates.put(stats.snapshot())
                updates.put(None)
                return

            with stats._lock:
                stats.completed_requests += message.requests
                stats.failed_requests += message.failures
                if message.sampled_count > 0:
                    if stats.min_duration == 0 or message.sampled_min < stats.min_duration:
                        stats.min_duration = message.sampled_min
                    stats.max_duration = max(stats.max_duration, message.sampled_max)
                    stats.total_duration += message.sampled_total
                    average_ms = message.sampled_total / message.sampled_count * 1000
                    stats.percentiles.add(average_ms, message.sampled_count)
                for code, count in message.error_codes.items():
                    key = str(code)
                    stats.errors[key] = stats.errors.get(key, 0) + count


@dataclass
class LoadTestStartMsg:
    """Asks the interface to start a load test."""

    config: JobConfig


@dataclass
class LoadTestStatsMsg:
    """A progress update; ``progress`` runs from 0.0 to 1.0."""

    stats: LoadTestStats
    progress: float = 0.0


@dataclass
class LoadTestCompleteMsg:
    """The load test finished; ``duration`` is in seconds."""

    stats: LoadTestStats | None = None
    duration: float = 0.0


@dataclass
class LoadTestErrorMsg:
    """The load test could not run."""

    error: Exception