"""Typed cell values held in result tuples, and the date encoding they use."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta

from minidb.parse_defs import AttrType
from minidb.rc import RC, RCError

__all__ = [
    "TupleValue",
    "IntValue",
    "DateValue",
    "FloatValue",
    "StringValue",
    "serialize_date",
    "deserialize_date",
]

_EPOCH = date(1970, 1, 1)
_MIN_YEAR = 1970
_MAX_YEAR = 2038
_UINT16_MAX = 0xFFFF


def serialize_date(text: str) -> int:
    """Encode ``YYYY-MM-DD`` as days since 1970-01-01.

    Raises :class:`RCError` with ``RC.INVALID_ARGUMENT`` for anything that is
    not a real calendar date between 1970 and 2038.
    """
    parts = [0, 0, 0]
    state = 0
    for ch in text:
        if ch.isdigit() and ch.isascii():
            if state < len(parts):
                parts[state] = parts[state] * 10 + int(ch)
        elif ch == "-":
            state += 1
        else:
            raise RCError(RC.INVALID_ARGUMENT, f"invalid date: {text!r}")

    year, month, day = parts
    if state != 2 or year < _MIN_YEAR or year > _MAX_YEAR:
        raise RCError(RC.INVALID_ARGUMENT, f"invalid date: {text!r}")
    try:
        parsed = date(year, month, day)
    except ValueError as exc:
        raise RCError(RC.INVALID_ARGUMENT, f"invalid date: {text!r}") from exc
    return (parsed - _EPOCH).days & _UINT16_MAX


def deserialize_date(days: int) -> str:
    """Decode a day count since 1970-01-01 into ``YYYY-MM-DD``."""
    if not 0 <= days <= _UINT16_MAX:
        raise ValueError(f"day count out of range: {days}")
    return (_EPOCH + timedelta(days=days)).isoformat()


def _to_float32(v: float) -> float:
    return struct.unpack("f", struct.pack("f", v))[0]


def _sign(n) -> int:
    return (n > 0) - (n < 0)


class TupleValue(ABC):
    """A single cell of a result row."""

    attr_type: AttrType = AttrType.UNDEFINED

    @abstractmethod
    def to_string(self) -> str:
        """Return the text shown to clients."""

    @abstractmethod
    def compare(self, other: "TupleValue") -> int:
        """Return a negative, zero or positive number as self is below, equal or above other."""

    def _check_same(self, other: "TupleValue") -> None:
        if type(other) is not type(self):
            raise TypeError(
                f"cannot compare {type(self).__name__} with {type(other).__name__}"
            )

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class IntValue(TupleValue):
    """An integer cell."""

    value: int
    attr_type = AttrType.INTS

    def to_string(self) -> str:
        return str(self.value)

    def compare(self, other: TupleValue) -> int:
        self._check_same(other)
        return self.value - other.value


@dataclass(frozen=True)
class DateValue(TupleValue):
    """A date cell stored as days since 1970-01-01."""

    value: int
    attr_type = AttrType.DATES

    def __post_init__(self) -> None:
        if not 0 <= self.value <= _UINT16_MAX:
            raise ValueError(f"day count out of range: {self.value}")

    def to_string(self) -> str:
        return deserialize_date(self.value)

    def compare(self, other: TupleValue) -> int:
        self._check_same(other)
        return self.value - other.value


@dataclass(frozen=True)
class FloatValue(TupleValue):
    """A single-precision float cell."""

    value: float
    attr_type = AttrType.FLOATS

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _to_float32(float(self.value)))

    def to_string(self) -> str:
        # Two decimals, then trailing zeros and a bare point are dropped.
        text = f"{self.value:.2f}"
        for _ in range(3):
            if text and text[-1] in "0.":
                text = text[:-1]
            else:
                break
        return text

    def compare(self, other: TupleValue) -> int:
        self._check_same(other)
        return _sign(_to_float32(self.value - other.value))


@dataclass(frozen=True)
class StringValue(TupleValue):
    """A character-string cell."""

    value: str
    attr_type = AttrType.CHARS

    def to_string(self) -> str:
        return self.value

    def compare(self, other: TupleValue) -> int:
        self._check_same(other)
        mine = self.value.encode("utf-8")
        theirs = other.value.encode("utf-8")
        return (mine > theirs) - (mine < theirs)