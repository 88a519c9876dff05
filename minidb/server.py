"""Network front end of the database server and its command-line entry point."""

from __future__ import annotations

import configparser
import getopt
import logging
import os
import re
import selectors
import signal
import socket
import struct
import sys
import threading
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Mapping

from minidb.events import SessionEvent
from minidb.session import Session, default_session

__all__ = [
    "PORT_DEFAULT",
    "MAX_CONNECTION_NUM_DEFAULT",
    "SOCKET_BUFFER_SIZE",
    "INADDR_ANY",
    "ServerParam",
    "ConnectionContext",
    "Server",
    "MessageTooLong",
    "read_message",
    "parse_parameter",
    "server_param_from_config",
    "main",
]

_log = logging.getLogger(__name__)

PORT_DEFAULT = 6789
MAX_CONNECTION_NUM_DEFAULT = 8192
SOCKET_BUFFER_SIZE = 8192
INADDR_ANY = 0

NET_SECTION = "NET"
CLIENT_ADDRESS = "CLIENT_ADDRESS"
MAX_CONNECTION_NUM = "MAX_CONNECTION_NUM"
PORT = "PORT"

_NO_DATA = "No data\n"
_FAILURE = "FAILURE\n"
_BLANKS = " \t\n\v\f\r"

Handler = Callable[[SessionEvent], None]


class MessageTooLong(Exception):
    """A request did not end within the size limit."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"The length of sql exceeds the limitation {limit}")
        self.limit = limit


@dataclass
class ServerParam:
    """Where and how the server listens."""

    listen_addr: int = INADDR_ANY
    max_connection_num: int = MAX_CONNECTION_NUM_DEFAULT
    port: int = PORT_DEFAULT
    unix_socket_path: str = ""
    use_unix_socket: bool = False


@dataclass(eq=False)
class ConnectionContext:
    """State of one accepted client connection."""

    sock: socket.socket
    addr: str
    session: Session | None = None
    buf: str = ""
    lock: Any = field(default_factory=threading.RLock)
    closed: bool = False


def read_message(sock: socket.socket, limit: int) -> bytes | None:
    """Read one NUL-terminated request and return it without the NUL.

    Data after the NUL in the same read is discarded. Returns ``None`` when
    the peer closes the connection first, and raises :class:`MessageTooLong`
    when ``limit`` bytes arrive without a terminator.
    """
    received = bytearray()
    while True:
        room = limit - len(received)
        if room <= 0:
            raise MessageTooLong(limit)
        chunk = sock.recv(room)
        if not chunk:
            return None
        end = chunk.find(b"\0")
        if end >= 0:
            received += chunk[:end]
            return bytes(received)
        received += chunk


def _str_to_int(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _ipv4_text(addr: int) -> str:
    return socket.inet_ntoa(struct.pack("!I", addr & 0xFFFFFFFF))


@dataclass
class _ProcessParam:
    process_name: str = "observer"
    conf: str | None = None
    port: int = 0
    unix_socket_path: str = ""
    std_out: str | None = None
    std_err: str | None = None
    demon: bool = False


_USAGE = (
    "Useage \n"
    "-p: server port. if not specified, the item in the config file will be used\n"
    "-f: path of config file.\n"
    "-s: use unix socket and the argument is socket address\n"
)


def parse_parameter(argv) -> _ProcessParam:
    """Parse the server's command-line options (without the program name).

    ``-h`` or an unknown option prints the usage and exits with status 0.
    """
    params = _ProcessParam(process_name=os.path.basename(sys.argv[0]) or "observer")
    try:
        opts, _ = getopt.getopt(list(argv), "dp:s:f:o:e:h")
    except getopt.GetoptError:
        sys.stdout.write(_USAGE)
        raise SystemExit(0)
    for opt, arg in opts:
        if opt == "-s":
            params.unix_socket_path = arg
        elif opt == "-p":
            params.port = _str_to_int(arg)
        elif opt == "-f":
            params.conf = arg
        elif opt == "-o":
            params.std_out = arg
        elif opt == "-e":
            params.std_err = arg
        elif opt == "-d":
            params.demon = True
        else:
            sys.stdout.write(_USAGE)
            raise SystemExit(0)
    return params


def server_param_from_config(
    net_section: Mapping[str, str], port: int, unix_socket_path: str
) -> ServerParam:
    """Combine the NET configuration section with command-line settings.

    A positive ``port`` from the command line wins over the configured one.
    """
    param = ServerParam()
    if CLIENT_ADDRESS in net_section:
        param.listen_addr = _str_to_int(net_section[CLIENT_ADDRESS])
    if MAX_CONNECTION_NUM in net_section:
        param.max_connection_num = _str_to_int(net_section[MAX_CONNECTION_NUM])
    if port > 0:
        param.port = port
        _log.info("Use port config in command line: %d", port)
    elif PORT in net_section:
        param.port = _str_to_int(net_section[PORT])
    if unix_socket_path:
        param.use_unix_socket = True
        param.unix_socket_path = unix_socket_path
    return param


class Server:
    """Accepts client connections and answers one request at a time per client.

    Each complete request is wrapped in a :class:`SessionEvent` and passed to
    ``handler``, which sets the response. An empty response is answered with
    ``"No data\\n"``; every reply ends with a NUL byte.
    """

    def __init__(self, server_param: ServerParam | None = None, handler: Handler | None = None) -> None:
        self.server_param = server_param if server_param is not None else ServerParam()
        self.handler = handler
        self.started = False
        self.address = None
        self.ready = threading.Event()
        self._stopping = False
        self._selector: selectors.BaseSelector | None = None
        self._listen_sock: socket.socket | None = None
        self._wake_r: socket.socket | None = None
        self._wake_w: socket.socket | None = None
        self._clients: set[ConnectionContext] = set()
        self._state_lock = threading.Lock()

    # -- lifecycle ---------------------------------------------------------

    def serve(self) -> int:
        """Listen and dispatch events until :meth:`shutdown` is called."""
        self._selector = selectors.DefaultSelector()
        self._wake_r, self._wake_w = socket.socketpair()
        self._wake_r.setblocking(False)
        try:
            self._start()
            self._selector.register(self._listen_sock, selectors.EVENT_READ, self._accept)
            self._selector.register(self._wake_r, selectors.EVENT_READ, self._drain_wake)
            self.ready.set()
            while not self._stopping:
                for key, _ in self._selector.select():
                    key.data(key.fileobj)
                    if self._stopping:
                        break
        finally:
            self._cleanup()
        return 0

    def shutdown(self) -> None:
        """Stop the event loop; safe to call from any thread."""
        _log.info("Server shutting down")
        with self._state_lock:
            self._stopping = True
            if self._wake_w is not None:
                try:
                    self._wake_w.send(b"\0")
                except OSError:
                    pass
        _log.info("Server quit")

    def _drain_wake(self, sock: socket.socket) -> None:
        try:
            sock.recv(64)
        except OSError:
            pass

    def _cleanup(self) -> None:
        for client in list(self._clients):
            self._close_connection(client)
        if self._listen_sock is not None:
            self._listen_sock.close()
            self._listen_sock = None
        with self._state_lock:
            for s in (self._wake_r, self._wake_w):
                if s is not None:
                    s.close()
            self._wake_r = self._wake_w = None
        if self._selector is not None:
            self._selector.close()
            self._selector = None
        self.started = False
        self.ready.set()

    def _start(self) -> None:
        if self.server_param.use_unix_socket:
            self._start_unix_socket_server()
        else:
            self._start_tcp_server()
        self.started = True
        _log.info("Observer start success")

    def _start_tcp_server(self) -> None:
        param = self.server_param
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setblocking(False)
            sock.bind((_ipv4_text(param.listen_addr), param.port))
            sock.listen(param.max_connection_num)
        except OSError:
            sock.close()
            raise
        self._listen_sock = sock
        self.address = sock.getsockname()
        _log.info("Listen on port %d", self.address[1])

    def _start_unix_socket_server(self) -> None:
        path = self.server_param.unix_socket_path
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.setblocking(False)
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass
            sock.bind(path)
            sock.listen(self.server_param.max_connection_num)
        except OSError:
            sock.close()
            raise
        self._listen_sock = sock
        self.address = path
        _log.info("Listen on unix socket: %s", path)

    # -- connections -------------------------------------------------------

    def _accept(self, listen_sock: socket.socket) -> None:
        try:
            client_sock, peer = listen_sock.accept()
        except (BlockingIOError, InterruptedError):
            return
        except OSError as exc:
            _log.error("Failed to accept client's connection, %s", exc)
            return

        if self.server_param.use_unix_socket:
            addr = self.server_param.unix_socket_path
        else:
            addr = f"{peer[0]}:{peer[1]}"
        try:
            client_sock.setblocking(True)
            if not self.server_param.use_unix_socket:
                client_sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError as exc:
            _log.error("Failed to set up socket of %s: %s", addr, exc)
            client_sock.close()
            return

        client = ConnectionContext(client_sock, addr, session=default_session().copy())
        self._selector.register(client_sock, selectors.EVENT_READ, partial(self._recv, client))
        self._clients.add(client)
        _log.info("Accepted connection from %s", addr)

    def _close_connection(self, client: ConnectionContext) -> None:
        with client.lock:
            if client.closed:
                return
            client.closed = True
            _log.info("Close connection of %s.", client.addr)
            if self._selector is not None:
                try:
                    self._selector.unregister(client.sock)
                except (KeyError, ValueError):
                    pass
            client.sock.close()
            client.session = None
            self._clients.discard(client)

    def _recv(self, client: ConnectionContext, _sock: socket.socket) -> None:
        with client.lock:
            try:
                message = read_message(client.sock, SOCKET_BUFFER_SIZE)
            except MessageTooLong as exc:
                _log.warning("%s", exc)
                self._close_connection(client)
                return
            except OSError as exc:
                _log.error("Failed to read socket of %s, %s", client.addr, exc)
                self._close_connection(client)
                return
            if message is None:
                _log.info("The peer has been closed %s", client.addr)
                self._close_connection(client)
                return
            client.buf = message.decode("utf-8", errors="replace")

        _log.info("receive command(size=%d): %s", len(message) + 1, client.buf)
        try:
            self._handle(SessionEvent(client))
        except OSError:
            pass

    def _handle(self, event: SessionEvent) -> None:
        sql = event.request_buf
        if not sql.strip(_BLANKS):
            return
        if self.handler is not None:
            try:
                self.handler(event)
            except Exception:
                _log.exception("Failed to handle request")
                event.set_response(_FAILURE)
        response = event.response.encode("utf-8") if event.response else _NO_DATA.encode() + b"\0"
        if not response.endswith(b"\0"):
            response += b"\0"
        self.send(event.client, response)

    def send(self, client: ConnectionContext, data: bytes) -> None:
        """Write data to a client in at most three attempts.

        On a write error the connection is closed and the error re-raised.
        """
        if not data:
            return
        data = bytes(data)
        with client.lock:
            written = 0
            for _ in range(3):
                if written >= len(data):
                    break
                try:
                    written += client.sock.send(data[written:])
                except OSError:
                    _log.error("Failed to send data back to client")
                    self._close_connection(client)
                    raise
            if written < len(data):
                _log.warning("Not all data has been send back to client")


def _load_net_section(path: str) -> dict[str, str]:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    with open(path, encoding="utf-8") as fh:
        parser.read_file(fh)
    if parser.has_section(NET_SECTION):
        return dict(parser.items(NET_SECTION))
    return {}


def main(argv=None) -> int:
    """Run the server until it receives a termination signal."""
    if argv is None:
        argv = sys.argv[1:]
    params = parse_parameter(argv)
    logging.basicConfig(level=logging.INFO)

    net_section: dict[str, str] = {}
    if params.conf is not None:
        try:
            net_section = _load_net_section(params.conf)
        except (OSError, configparser.Error) as exc:
            print(f"Failed to load configuration files: {exc}", file=sys.stderr)
            print("Shutdown due to failed to init!", file=sys.stderr)
            return 1

    server = Server(server_param_from_config(net_section, params.port, params.unix_socket_path))

    def quit_signal_handle(signum, _frame) -> None:
        _log.info("Receive signal: %d", signum)
        threading.Thread(target=server.shutdown, daemon=True).start()

    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGINT, quit_signal_handle)
        signal.signal(signal.SIGTERM, quit_signal_handle)

    try:
        server.serve()
    except OSError as exc:
        _log.critical("Failed to start network: %s", exc)
        return 1
    _log.info("Server stopped")
    return 0