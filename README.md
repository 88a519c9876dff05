# minidb

The network front end of a small teaching database: a server that accepts
client connections over TCP or a Unix domain socket and hands each request to
a handler you supply, an interactive command-line client, and the data
structures used to describe parsed SQL statements and their results.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
minidb-server [-p PORT] [-s UNIX_SOCKET_PATH] [-f CONFIG_FILE] [-o FILE] [-e FILE] [-d] [-h]
```

- `-p` server port. A positive value here wins; otherwise the `PORT` entry of
  the `[NET]` section of the configuration file is used, and failing that the
  default port 6789.
- `-s` listen on a Unix domain socket at the given path instead of TCP. An
  existing file at that path is removed first.
- `-f` path of an INI-style configuration file. Only its `[NET]` section is
  read: `PORT`, `MAX_CONNECTION_NUM` (listen backlog, default 8192) and
  `CLIENT_ADDRESS` (the listen address as a 32-bit integer, default 0 for all
  addresses). If the file cannot be read the server exits with status 1.
- `-o`, `-e`, `-d` are accepted but have no effect.
- `-h`, or any unknown option, prints the usage and exits with status 0.

The server stops on SIGINT or SIGTERM.

## Running the client

```
minidb-client [-h HOST] [-p PORT] [-s UNIX_SOCKET_PATH]
```

The client connects to `127.0.0.1:6789` by default, shows the prompt
`miniob > `, sends each non-blank line as one request and prints the reply.
A line starting with `exit` or `bye` (in any case) ends the session. Input
lines longer than 8191 characters are sent as several requests. If the
connection cannot be made the client exits with status 1.

## Wire protocol

Each request and each response is a byte string terminated by a single NUL
byte; anything after the NUL in the same read is discarded.
`minidb.server.read_message(sock, limit)` reads one request (returning `None`
if the peer closes, raising `MessageTooLong` if `limit` bytes arrive without
a terminator; the server uses a limit of 8192 and closes such connections).
`minidb.client.receive_response(sock)` reads one response, raising
`ConnectionClosed` if the peer closes first.

## Embedding the server

```python
from minidb.server import Server, ServerParam

def handler(event):
    event.set_response("you sent: " + event.request_buf + "\n")

server = Server(ServerParam(port=6789), handler)
server.serve()          # blocks; call server.shutdown() from another thread
```

For every non-blank request the server builds a `SessionEvent` whose
`request_buf` is the request text and whose `client` is the
`ConnectionContext` (with its own `Session`). The handler sets the response
with `set_response`. If the handler raises, the reply is `FAILURE\n`; if the
response is empty, the reply is `No data\n`. A NUL byte is appended to every
reply. Blank requests get no reply. `server_param_from_config(net_section,
port, unix_socket_path)` builds a `ServerParam` the same way the command does.

## Library modules

- `minidb.rc` — the `RC` result codes, `strrc` for their names (`"UNKNOWN"`
  for anything else) and the `RCError` exception that carries one.
- `minidb.parse_defs` — statement structures (`Query`, `Selects`, `Inserts`,
  `Deletes`, `Updates`, `CreateTable`, `DropTable`, `CreateIndex`,
  `DropIndex`, `DescTable`, `LoadData`, `Condition`, `Aggregation`,
  `RelAttr`, `Value`, `AttrInfo`, `InsertTuple`), the enums `AttrType`,
  `CompOp`, `FuncName` and `SqlCommandFlag`, and the helpers `make_value` and
  `load_data`. Lists are limited to 20 entries; going over raises
  `ValueError`.
- `minidb.value` — typed cell values (`IntValue`, `FloatValue`, `DateValue`,
  `StringValue`) with `to_string` and `compare`, and the date helpers
  `serialize_date` / `deserialize_date` (days since 1970-01-01; years
  1970–2038 only, otherwise `RCError` with `RC.INVALID_ARGUMENT`).
- `minidb.tuples` — `Tuple`, `TupleField`, `TupleSchema` and `TupleSet`,
  whose `to_text` methods produce the `a | b | c` result layout.
- `minidb.session` — `Session` and `default_session()`.
- `minidb.events` — `SessionEvent`, `SQLStageEvent`, `ExecutionPlanEvent`
  and `StorageEvent`.

```python
from minidb.value import serialize_date, deserialize_date

days = serialize_date("2021-10-24")
assert deserialize_date(days) == "2021-10-24"
```

## What this package does not do

There is no SQL parser, no query execution and no storage engine here. The
statement structures can be built by hand but nothing turns SQL text into
them or runs them. Started with `minidb-server`, the server has no handler,
so it answers every request with `No data`. To serve real queries you must
pass your own handler to `Server`.