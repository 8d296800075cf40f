# volt

An HTTP client and load tester. Volt sends single HTTP requests, keeps
named requests in a local SQLite store, and runs concurrent load tests
that report throughput, latency percentiles and failing status codes.
It also holds the state and rendering logic of the panes of a terminal
interface (request editor, response viewer, help modal).

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Command-line load testing

Show the usage summary:

```
volt help
```

`volt -h`, `volt --help` and `volt` with no arguments print the same text.

Run a benchmark. The word `bench` is optional; any other arguments given
to `volt` are treated as benchmark flags.

```
volt bench -url http://localhost:8080 -c 100 -n 10000
```

Flags take the form `-name value`, `-name=value` or `--name value`.
The command exits with status 1 when the flags cannot be parsed, the
configuration is invalid, or the results cannot be written.

### Flags

| Flag            | Meaning                                                   | Default   |
|-----------------|-----------------------------------------------------------|-----------|
| `-url`          | Target URL, must start with `http://` or `https://`       | required  |
| `-c`            | Number of concurrent workers                              | 50        |
| `-d`            | Duration, e.g. `30s`, `5m`, `1h30m`                       | 10s       |
| `-n`            | Total number of requests (clears `-d`)                    | 0         |
| `-m`            | HTTP method: GET, POST, PUT, DELETE, PATCH or HEAD        | GET       |
| `-H`            | Header in `Key: Value` form, repeatable                   |           |
| `-b`            | Request body                                              |           |
| `-t`            | Per-request timeout                                       | 30s       |
| `-rate`         | Rate limit in requests per second for each worker, 0 for unlimited | 0 |
| `-keepalive`    | Keep-alive setting, recorded in the configuration         | on        |
| `-no-keepalive` | Turns the keep-alive setting off                          |           |
| `-q`            | One-line summary                                          | off       |
| `-json`         | Machine-readable JSON output                              | off       |
| `-o`            | Write the results to a file instead of standard output    |           |

`-d` is not a wall-clock limit: when no `-n` is given, the run sends an
estimated number of requests, `concurrency × whole seconds × 1000`.
The keep-alive flags are parsed into `BenchConfig.keep_alive` but do not
change how connections are made; workers always share a pooled session.

### Examples

POST with a JSON body and headers:

```
volt bench -url http://localhost:8080/api -m POST \
  -b '{"test":true}' -H "Content-Type: application/json" \
  -H "Authorization: Bearer token"
```

A fixed number of requests, quiet output:

```
volt bench -url http://localhost:8080 -c 100 -n 10000 -q
```

JSON results written to a file:

```
volt bench -url http://localhost:8080 -c 50 -n 5000 -json -o results.json
```

Rate-limited run:

```
volt bench -url http://localhost:8080 -c 10 -n 2000 -rate 100
```

Ctrl+C (or SIGTERM) stops waiting for the run and prints
"Test interrupted by user". The command line reports only a final
snapshot, so an interrupted run normally prints no statistics.

## Using the library

```python
from volt.request import Request
from volt.client import Client
from volt.storage import SQLiteStorage

request = Request(method="GET", url="http://localhost:8080/health")
request.validate()          # raises volt.request.InvalidRequestError

with Client(timeout=5.0) as client:
    response = client.send(request)
    print(response.status_code, response.body, response.error)

with SQLiteStorage("requests.db") as store:
    store.save(request)     # sets request.id
    print(store.load())
    print(store.get_all_urls())
    store.delete(request.id)  # raises RequestNotFoundError if absent
```

Load tests:

```python
import queue
from volt.loadtest import JobConfig
from volt.output import format_table

job = JobConfig(request=request, concurrency=4, total_requests=200, timeout=5.0)
updates = queue.Queue()
job.run(updates)

final = None
while (stats := updates.get()) is not None:
    final = stats
print(format_table(final))
```

`JobConfig.run` puts `LoadTestStats` snapshots on the queue (every
0.3 s when `stream_updates` is set) and finishes with `None`. Latency
is sampled on one request in 256 per worker. `volt.output` renders the
statistics with `format_table`, `format_quiet` or `format_json`, and
`format_output` picks one according to a `BenchConfig`.

Other modules:

- `volt.benchconfig`: `parse_bench_flags`, `parse_duration`, `BenchConfig.validate`.
- `volt.utils`: `format_size`, `parse_key_value_pairs`, `parse_map_to_string`,
  `status_code_color`, `Panel`.
- `volt.ui.keybindings`: `KeyMap.default()` and its help groups.
- `volt.ui.requestpane.RequestPane`: editor state that builds a `Request`
  or a load-test `JobConfig` from its fields and returns commands to run.
- `volt.ui.responsepane.ResponsePane`: renders a response (body, headers,
  timing) or load-test results (overview, latency, errors) as ANSI text.
- `volt.ui.shortcuts.ShortcutPane`, `volt.ui.formatting`, `volt.ui.tabs`,
  `volt.ui.fields`, `volt.ui.widgets`, `volt.ui.commands`.

## What it does not do

There is no interactive full-screen terminal application. The pane
classes hold state, handle key names given as strings (`"ctrl+s"`,
`"tab"`, ...) and render text, but nothing draws them on a screen or
reads keys from the terminal, and there is no sidebar listing saved
requests. Running `volt` with no arguments prints the usage text.