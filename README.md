# admincore

Reusable parts for admin-style back-end services.

- **Storage** (`admincore.storage`)
  - `types`: the abstract interfaces `AdapterCache`, `AdapterQueue` and
    `AdapterLocker`, and the `CacheError` exception.
  - `message`: the `Message` dataclass (`id`, `stream`, `values`,
    `error_count`, a `prefix` property and `copy()`).
  - `memory_cache`: `MemoryCache`, a thread-safe in-process cache of string
    values with expiry, counters and hash fields.
  - `redis_cache`: `RedisCache`, the same interface on a Redis server.
  - `memory_queue`: `MemoryQueue`, an in-process queue with one channel per
    stream; a consumer that raises gets the message again, up to three times.
  - `redis_locker`: `RedisLocker`, handing out `Lock` objects kept in Redis.
- **Server** (`admincore.server`)
  - `manager`: `Server` starts several `Runnable` services together, stops
    them when a `threading.Event` is set or one of them fails, and waits for
    them within a grace period (`graceful_shutdown_timeout`, 5 seconds by
    default).
  - `listener`: `ListenerServer` serves a WSGI application over HTTP (or
    HTTPS with `cert_file` and `key_file`); `new_listener`, `new_healthz`
    (`/healthz` on `:4000`) and `new_readyz` (`/readyz` on `:2000`).
- **Tools** (`admincore.tools`)
  - `language`: `parse_accept_language` for `Accept-Language` headers.
  - `condition` and `search`: `GormCondition`, `search_field` and
    `resolve_search_query` turn tagged dataclasses into SQL `where`, `order`
    and `join` clauses for MySQL or Postgres quoting.
  - `utils`: `convert_num_to_chars` for spreadsheet column names, and
    `get_request_id`, `get_username`, `get_header_first`, `new_request_id`
    for request metadata.
- **Logging** (`admincore.logging`)
  - `fields`: the `Fields` collection of structured log values.
  - `levels`: `Level` and `Code` enums, `default_code_to_level`,
    `default_client_code_to_level`, duration field helpers and
    `LoggingOptions` built by `evaluate_server_options` /
    `evaluate_client_options`.

## Installation

```
pip install admincore
```

## Examples

An in-memory cache:

```python
from admincore.storage.memory_cache import MemoryCache

cache = MemoryCache()
cache.set("visits", 1, 60)   # value, lifetime in seconds
cache.increase("visits")
print(cache.get("visits"))   # "2"
```

A memory queue with a consumer:

```python
from admincore.storage.memory_queue import MemoryQueue
from admincore.storage.message import Message

queue = MemoryQueue(100)
queue.register("login_log", lambda message: print(message.values))
queue.append(Message(stream="login_log", values={"user": "alice"}))
# queue.run() blocks until queue.shutdown() is called
```

A lock held in Redis:

```python
import redis
from admincore.storage.redis_locker import RedisLocker

locker = RedisLocker(redis.Redis())
with locker.lock("jobs:nightly", 30, retry_count=3, retry_delay=0.2):
    ...  # released on leaving the block
```

Running services together:

```python
import threading
from admincore.server.listener import new_healthz
from admincore.server.manager import Server

stop = threading.Event()
manager = Server(graceful_shutdown_timeout=5)
manager.add(new_healthz(addr="127.0.0.1:4000"))
manager.start(stop)   # returns once stop is set
```

Sorting languages from an `Accept-Language` header:

```python
from admincore.tools.language import parse_accept_language

parse_accept_language("en;q=0.5, zh-cn;q=0.9", [])
# ['zh-cn', 'en']
```

Building search conditions:

```python
from dataclasses import dataclass
from admincore.tools.condition import GormCondition
from admincore.tools.search import resolve_search_query, search_field

@dataclass
class UserQuery:
    name: str = search_field("type:contains;column:name;table:users", default="")
    status: int = search_field("type:exact;column:status;table:users", default=0)

condition = GormCondition()
resolve_search_query("mysql", UserQuery(name="ali", status=1), condition)
condition.where
# {'`users`.`name` like ?': ['%ali%'], '`users`.`status` = ?': [1]}
```

Spreadsheet column letters:

```python
from admincore.tools.utils import convert_num_to_chars

convert_num_to_chars(0)    # 'A'
convert_num_to_chars(26)   # 'AA'
```

## What it does not do

- `MemoryQueue` is the only queue back end; there is no queue on Redis or
  other brokers.
- There is no RPC server, client or interceptor chain; `admincore.logging`
  provides only the field collection, the code-to-level mappings and the
  option sets such interceptors would use.
- `convert_num_to_chars` names columns, but nothing here writes spreadsheet
  files, and there is no database connection setup.
- `ListenerServer` serves plain WSGI applications; it exposes no metrics
  endpoint.

## Running the tests

```
pip install -e .[test]
pytest
```