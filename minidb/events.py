"""Events passed between the stages that handle one client request."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from minidb.parse_defs import Query

__all__ = ["SessionEvent", "SQLStageEvent", "ExecutionPlanEvent", "StorageEvent"]


@dataclass
class SessionEvent:
    """A request read from a client connection, and the response to send back."""

    client: Any
    response: str = field(default="")

    @property
    def request_buf(self):
        """The raw request held by the client connection."""
        return self.client.buf

    @property
    def response_len(self) -> int:
        return len(self.response)

    def set_response(self, response) -> None:
        """Set the response text; bytes are decoded as UTF-8."""
        if isinstance(response, (bytes, bytearray)):
            response = bytes(response).decode("utf-8", errors="replace")
        if not isinstance(response, str):
            raise TypeError(f"response must be str or bytes, not {type(response).__name__}")
        self.response = response


@dataclass
class SQLStageEvent:
    """The SQL text of a session request on its way to the parser."""

    session_event: SessionEvent | None
    sql: str


@dataclass
class ExecutionPlanEvent:
    """A parsed query ready to be executed."""

    sql_event: SQLStageEvent | None
    sqls: Query | None

    def close(self) -> None:
        """Release the query and the link back to the SQL event."""
        self.sql_event = None
        if self.sqls is not None:
            self.sqls.reset()
            self.sqls = None

    def __enter__(self) -> "ExecutionPlanEvent":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


@dataclass
class StorageEvent:
    """A request handed to the storage layer for one execution plan."""

    exe_event: ExecutionPlanEvent | None