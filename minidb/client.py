"""Interactive command-line client for the database server."""

from __future__ import annotations

import getopt
import re
import socket
import sys
from typing import Iterator

__all__ = [
    "PROMPT",
    "PORT_DEFAULT",
    "MAX_MEM_BUFFER_SIZE",
    "ConnectionClosed",
    "is_exit_command",
    "is_blank",
    "connect",
    "receive_response",
    "run",
    "main",
]

MAX_MEM_BUFFER_SIZE = 8192
PORT_DEFAULT = 6789
PROMPT = "miniob > "

_BLANKS = " \t\n\v\f\r"


class ConnectionClosed(ConnectionError):
    """The server closed the connection before ending its message."""

    def __init__(self, partial: str = "") -> None:
        super().__init__("Connection has been closed")
        self.partial = partial


def is_exit_command(cmd: str) -> bool:
    """True when the line starts with ``exit`` or ``bye``, in any case."""
    return cmd[:4].lower() == "exit" or cmd[:3].lower() == "bye"


def is_blank(text: str) -> bool:
    """True when the text holds only whitespace."""
    return not text.strip(_BLANKS)


def connect(host: str, port: int, unix_socket_path: str | None) -> socket.socket:
    """Open a stream connection over a unix socket if a path is given, else TCP.

    Raises :class:`OSError` when the connection cannot be made.
    """
    if unix_socket_path is not None:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(unix_socket_path)
        except OSError:
            sock.close()
            raise
        return sock
    addr = socket.gethostbyname(host)
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.connect((addr, port))
    except OSError:
        sock.close()
        raise
    return sock


def receive_response(sock: socket.socket) -> str:
    """Read one NUL-terminated message and return the text before the NUL.

    Anything after the NUL in the same read is discarded. Raises
    :class:`ConnectionClosed` if the peer closes first.
    """
    received = bytearray()
    while True:
        data = sock.recv(MAX_MEM_BUFFER_SIZE)
        if not data:
            raise ConnectionClosed(received.decode("utf-8", errors="replace"))
        end = data.find(b"\0")
        if end >= 0:
            received += data[:end]
            return received.decode("utf-8", errors="replace")
        received += data


def _read_commands(stdin) -> Iterator[str]:
    limit = MAX_MEM_BUFFER_SIZE - 1
    for line in stdin:
        while len(line) > limit:
            yield line[:limit]
            line = line[limit:]
        yield line


def _prompt(stdout) -> None:
    stdout.write(PROMPT)
    stdout.flush()


def run(sock: socket.socket, stdin, stdout) -> int:
    """Send each input line as a command and print the replies; return an exit code."""
    _prompt(stdout)
    for line in _read_commands(stdin):
        if is_blank(line):
            _prompt(stdout)
            continue
        if is_exit_command(line):
            break
        try:
            sock.sendall(line.encode("utf-8") + b"\0")
        except OSError as exc:
            print(f"send error: {exc.errno}:{exc.strerror} ", file=sys.stderr)
            return 1
        try:
            text = receive_response(sock)
        except ConnectionClosed as exc:
            stdout.write(exc.partial)
            stdout.write("Connection has been closed\n")
            stdout.flush()
            break
        except OSError as exc:
            stdout.flush()
            print(f"Connection was broken: {exc.strerror}", file=sys.stderr)
            break
        stdout.write(text)
        _prompt(stdout)
    return 0


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def main(argv=None) -> int:
    """Run the client: ``-h host``, ``-p port`` or ``-s unix socket path``."""
    if argv is None:
        argv = sys.argv[1:]
    unix_socket_path = None
    host = "127.0.0.1"
    port = PORT_DEFAULT
    try:
        opts, _ = getopt.gnu_getopt(list(argv), "s:h:p:")
    except getopt.GetoptError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    for opt, arg in opts:
        if opt == "-s":
            unix_socket_path = arg
        elif opt == "-p":
            port = _atoi(arg)
        elif opt == "-h":
            host = arg

    try:
        sock = connect(host, port, unix_socket_path)
    except OSError as exc:
        if unix_socket_path is not None:
            print(
                f"failed to connect to server. unix socket path '{unix_socket_path}'. "
                f"error {exc.strerror or exc}",
                file=sys.stderr,
            )
        else:
            print(f"Failed to connect. errmsg={exc.errno}:{exc.strerror or exc}", file=sys.stderr)
        return 1

    with sock:
        return run(sock, sys.stdin, sys.stdout)