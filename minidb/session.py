"""Per-connection session state."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Session", "default_session"]


@dataclass
class Session:
    """The state a client connection carries between statements.

    ``trx_multi_operation_mode`` tells whether the current transaction spans
    several statements; when it is off each statement commits on its own.
    """

    current_db: str = ""
    trx_multi_operation_mode: bool = False

    def copy(self) -> "Session":
        """Return a new session on the same database, in single-statement mode."""
        return Session(current_db=self.current_db)


_DEFAULT_SESSION = Session()


def default_session() -> Session:
    """Return the shared template session new connections are copied from."""
    return _DEFAULT_SESSION