"""Result rows, their schema and sets of rows printed back to clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from minidb.parse_defs import AttrType
from minidb.value import FloatValue, IntValue, StringValue, TupleValue

__all__ = ["Tuple", "TupleField", "TupleSchema", "TupleSet"]

_log = logging.getLogger(__name__)


class Tuple:
    """One result row: an ordered list of cell values."""

    def __init__(self, values=()) -> None:
        self._values: list[TupleValue] = []
        for v in values:
            self.add(v)

    def add(self, value) -> None:
        """Append a cell; plain ints, floats and strs are wrapped."""
        if isinstance(value, TupleValue):
            self._values.append(value)
        elif isinstance(value, bool):
            raise TypeError("boolean values are not supported")
        elif isinstance(value, int):
            self._values.append(IntValue(value))
        elif isinstance(value, float):
            self._values.append(FloatValue(value))
        elif isinstance(value, str):
            self._values.append(StringValue(value))
        else:
            raise TypeError(f"unsupported value type: {type(value).__name__}")

    @property
    def values(self) -> list[TupleValue]:
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index: int) -> TupleValue:
        return self._values[index]

    def __iter__(self) -> Iterator[TupleValue]:
        return iter(self._values)


@dataclass(frozen=True)
class TupleField:
    """A column of a result: its type, table and name."""

    type: AttrType
    table_name: str
    field_name: str

    def to_string(self) -> str:
        return f"{self.table_name}.{self.field_name}{int(self.type)}"


@dataclass
class TupleSchema:
    """The ordered columns of a result."""

    fields: list[TupleField] = field(default_factory=list)

    def add(self, attr_type: AttrType, table_name: str, field_name: str) -> None:
        self.fields.append(TupleField(AttrType(attr_type), table_name, field_name))

    def add_if_not_exists(
        self, attr_type: AttrType, table_name: str, field_name: str
    ) -> None:
        """Add a column unless one with the same table and name is present."""
        if self.index_of_field(table_name, field_name) < 0:
            self.add(attr_type, table_name, field_name)

    def append(self, other: "TupleSchema") -> None:
        self.fields.extend(other.fields)

    def index_of_field(self, table_name: str, field_name: str) -> int:
        """Return the column's position, or -1 when it is absent."""
        for i, f in enumerate(self.fields):
            if f.table_name == table_name and f.field_name == field_name:
                return i
        return -1

    def clear(self) -> None:
        self.fields.clear()

    def to_text(self) -> str:
        """Render the header line; columns are table-qualified when tables differ."""
        if not self.fields:
            return "No schema"
        qualify = len({f.table_name for f in self.fields}) > 1
        names = (
            f"{f.table_name}.{f.field_name}" if qualify else f.field_name
            for f in self.fields
        )
        return " | ".join(names) + "\n"

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[TupleField]:
        return iter(self.fields)

    def __getitem__(self, index: int) -> TupleField:
        return self.fields[index]


class TupleSet:
    """A schema and the rows that follow it."""

    def __init__(self, schema: TupleSchema | None = None) -> None:
        self._tuples: list[Tuple] = []
        self._schema = TupleSchema()
        if schema is not None:
            self.set_schema(schema)

    @property
    def schema(self) -> TupleSchema:
        return self._schema

    @property
    def tuples(self) -> list[Tuple]:
        return list(self._tuples)

    def set_schema(self, schema: TupleSchema) -> None:
        """Use a copy of the given schema."""
        self._schema = TupleSchema(list(schema.fields))

    def add(self, tuple_: Tuple) -> None:
        self._tuples.append(tuple_)

    def clear(self) -> None:
        self._tuples.clear()
        self._schema.clear()

    def is_empty(self) -> bool:
        return not self._tuples

    def to_text(self) -> str:
        """Render the header and every row; empty when there is no schema."""
        if not self._schema.fields:
            _log.warning("Got empty schema")
            return ""
        lines = [self._schema.to_text()]
        lines.extend(
            " | ".join(v.to_string() for v in row) + "\n" for row in self._tuples
        )
        return "".join(lines)

    def __len__(self) -> int:
        return len(self._tuples)

    def __getitem__(self, index: int) -> Tuple:
        return self._tuples[index]

    def __iter__(self) -> Iterator[Tuple]:
        return iter(self._tuples)