# modernapi

Two small services in one package.

**Fibonacci over HTTP.** A server computes Fibonacci sequences either in one
synchronous response or progressively, handing back whatever has been
computed since the last poll for the same request id. A client drives either
mode from the command line.

**Books catalogue backend.** YAML configuration with environment-variable
overrides, request ids carried through a request scope, JSON logging tagged
with a request id, a book model, a SQLAlchemy repository, SQL file migrations
and a service layer that returns human-readable status messages.

## Installation

```
pip install .
```

Development and tests:

```
pip install ".[test]"
pytest
```

## Fibonacci server

```
rest-fibonacci-server
```

The server listens on port 6080 on all interfaces and answers two routes
(for any HTTP method); every other path gets `404 page not found`.

- `/fibonacci/sync/<n>` returns the first `n` Fibonacci numbers and the time
  taken:

  ```json
  {"timeTaken":"0.000012 seconds","fibonacciNumbers":[0,1,1,2,3]}
  ```

- `/fibonacci/async/<n>` starts computing `fib(0)` … `fib(n)` in a background
  thread. Every call drains the numbers produced since the previous call and
  returns them with the request id and whether the last number has been
  written:

  ```json
  {"requestid":"…","fibonacciNumbers":[0,1,1],"endOfResponse":false}
  ```

  Send the returned id back in a `request-id` header to keep polling the same
  computation; a request without that header is given a fresh UUID. Once
  `endOfResponse` is true the computation is forgotten.

The application object can be used without a socket:

```python
from modernapi.rest_fibonacci_server import FibonacciApp

app = FibonacciApp()
response = app.handle("GET", "/fibonacci/sync/5", {})
print(response.status, response.headers, response.body)
```

`FibonacciApp.serve(host, port)` runs it on a threading HTTP server.

## Fibonacci client

```
rest-fibonacci-client --typeOfCall sync --number 10
rest-fibonacci-client -typeOfCall async -number 30
```

In `sync` mode one request is made and its body printed. In `async` mode the
client polls every five seconds, reusing the request id from the first reply,
until the server reports `endOfResponse`. On a failed request it prints the
error and exits with status 1.

From Python:

```python
from modernapi.rest_fibonacci_client import run, send_request

body = send_request("http://localhost:6080/fibonacci/sync/5", {"accept": "application/json"})
bodies = run("async", 20, "http://localhost:6080", sleep=lambda seconds: None)
```

`run` prints each body and returns them as a list. `send_request` raises
`RequestError` (with `status_code` set for non-2xx replies) when a request
fails.

## Fibonacci functions

```python
from modernapi.fibonacci import fib, fibonacci_sequence, sync_fibonacci, async_fibonacci

fib(10)                     # 55
fibonacci_sequence(6)       # [0, 1, 1, 2, 3, 5]
sync_fibonacci(6)           # SyncFibonacciResponse(time_taken="... seconds", fibonacci_numbers=[...])
list(async_fibonacci(3))    # AsyncFibonacciResponse(sequence=0, fibonacci_number=0), ...
```

`sync_fibonacci` and `async_fibonacci` wrap their values to signed 32 bits.
`AsyncStore` (in `modernapi.async_store`) is the thread-safe buffer the server
uses between its background computation and the polling requests.

## Books backend

### Configuration

```python
from modernapi.configs import load_config

with open("books.yaml", encoding="utf-8") as fh:
    config = load_config(fh)
print(config.server.port, config.db.dbname, config.db.connection.timeout)
```

The YAML document has `app`, `db` and `client` sections; keys are matched
case-insensitively (`serviceName`, `connectionPool`, `maxOpenConnections`,
`migrationPath`, …). The non-empty environment variables `APP_PORT`,
`DB_NAME`, `DB_USER`, `DB_HOST`, `DB_PORT` and `DB_PASSWORD` override the
matching keys. `load_config` also takes an `environ` mapping in place of
`os.environ`.

`provide_app_config(argv)` reads the path from a `-configFile` argument,
loads it once and returns the cached `AppConfig` from then on. Unreadable
files, bad YAML and unconvertible values raise `ConfigError`.

### Database, migrations, repository and service

```python
from modernapi.db import provide_db_conn
from modernapi.migrations import provide_migrator
from modernapi.model import Book
from modernapi.repo import BookRepository
from modernapi.service import BookService

engine = provide_db_conn(config.db)
provide_migrator(config.db, engine).run_migrations()

service = BookService(BookRepository(engine))
print(service.add_book(Book(isbn=12345, name="Dune", publisher="Chilton")))
print(service.list_books())
print(service.get_book(12345))
print(service.remove_book(12345))
```

- `provide_db_conn` builds a PostgreSQL URL from the configuration (or takes
  an explicit SQLAlchemy URL, e.g. `"sqlite://"`), sizes the pool with
  `engine_options`, checks the connection with `SELECT 1` and raises
  `ConnectionError` on failure. A PostgreSQL driver for SQLAlchemy must be
  installed separately. `build_dsn` renders the `key=value` connection
  string.
- `Migrator` applies files named `<version>_<name>.up.<ext>` from the
  configured directory (a leading `file://` is accepted) in version order and
  records progress in a `schema_migrations` table. `up()` raises on problems;
  `run_migrations()` logs them instead. Both return the versions applied.
- `BookRepository` works on a `books` table with `isbn`, `name` and
  `publisher` columns. It does not create the table; use a migration or
  `modernapi.repo.metadata.create_all(engine)`. `get_book` returns an empty
  `DBBook` when nothing matches.
- `DBBook.to_json()` writes the publisher under the key `publiser`;
  `Book.from_json()` ignores unknown keys, so books listed through
  `BookService.list_books()` come back with an empty publisher.

### Request ids and logging

```python
from modernapi.request import RequestIdGenerator, request_scope, get_request_id
from modernapi.logger import with_context

ids = RequestIdGenerator()          # ids look like "<host>/<10 random chars>-000001"
with request_scope(ids.next_id()):
    with_context().info("handling request")
```

`get_context_request_id(metadata)` prefers the first `request-id` in a
metadata mapping and falls back to the current scope. Records from
`with_context` go to standard output as JSON with `level`, `timestamp`,
`caller`, `msg` and `request-id` fields, plus `stacktrace` when there is one.

## What is not included

The books backend has no network front end and no command of its own: the
service, repository and migrations are used from Python. The Fibonacci
functions in `modernapi.fibonacci` are likewise plain functions; only the
HTTP server and client above serve them over the network.