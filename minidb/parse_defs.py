"""Structures that describe a parsed SQL statement."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

__all__ = [
    "MAX_NUM",
    "MAX_REL_NAME",
    "MAX_ATTR_NAME",
    "MAX_ERROR_MESSAGE",
    "MAX_DATA",
    "AttrType",
    "CompOp",
    "FuncName",
    "SqlCommandFlag",
    "RelAttr",
    "Value",
    "Condition",
    "Aggregation",
    "Selects",
    "InsertTuple",
    "Inserts",
    "Deletes",
    "Updates",
    "AttrInfo",
    "CreateTable",
    "DropTable",
    "CreateIndex",
    "DropIndex",
    "DescTable",
    "LoadData",
    "Query",
    "make_value",
    "load_data",
]

MAX_NUM = 20
MAX_REL_NAME = 20
MAX_ATTR_NAME = 20
MAX_ERROR_MESSAGE = 20
MAX_DATA = 50


class CompOp(IntEnum):
    """Comparison operators used in conditions."""

    EQUAL_TO = 0
    LESS_EQUAL = 1
    NOT_EQUAL = 2
    LESS_THAN = 3
    GREAT_EQUAL = 4
    GREAT_THAN = 5
    NO_OP = 6


class FuncName(IntEnum):
    """Aggregation functions."""

    AGG_MAX = 0
    AGG_MIN = 1
    AGG_COUNT = 2
    AGG_AVG = 3


class AttrType(IntEnum):
    """Types an attribute or a value can have."""

    UNDEFINED = 0
    CHARS = 1
    INTS = 2
    DATES = 3
    FLOATS = 4


class SqlCommandFlag(IntEnum):
    """The kind of statement a query holds."""

    SCF_ERROR = 0
    SCF_SELECT = 1
    SCF_INSERT = 2
    SCF_UPDATE = 3
    SCF_DELETE = 4
    SCF_CREATE_TABLE = 5
    SCF_DROP_TABLE = 6
    SCF_CREATE_INDEX = 7
    SCF_DROP_INDEX = 8
    SCF_SYNC = 9
    SCF_SHOW_TABLES = 10
    SCF_DESC_TABLE = 11
    SCF_BEGIN = 12
    SCF_COMMIT = 13
    SCF_ROLLBACK = 14
    SCF_LOAD_DATA = 15
    SCF_HELP = 16
    SCF_EXIT = 17


def _check_room(items: list, what: str, extra: int = 1) -> None:
    if len(items) + extra > MAX_NUM:
        raise ValueError(f"too many {what}: at most {MAX_NUM} allowed")


def _check_count(items: list, what: str) -> None:
    if len(items) > MAX_NUM:
        raise ValueError(f"too many {what}: at most {MAX_NUM} allowed")


@dataclass
class RelAttr:
    """A column reference; ``relation_name`` is ``None`` when unqualified."""

    relation_name: str | None = None
    attribute_name: str | None = None


@dataclass
class Value:
    """A literal value and its type."""

    type: AttrType = AttrType.UNDEFINED
    data: object = None


def _to_float32(v: float) -> float:
    return struct.unpack("f", struct.pack("f", v))[0]


def make_value(v) -> Value:
    """Build a literal from an int, a float (kept at single precision) or a str."""
    if isinstance(v, bool):
        raise TypeError("boolean values are not supported")
    if isinstance(v, int):
        return Value(AttrType.INTS, v)
    if isinstance(v, float):
        return Value(AttrType.FLOATS, _to_float32(v))
    if isinstance(v, str):
        return Value(AttrType.CHARS, v)
    raise TypeError(f"unsupported value type: {type(v).__name__}")


Operand = Union[RelAttr, Value]


@dataclass
class Condition:
    """A comparison whose sides are each a column or a literal."""

    comp: CompOp
    left: Operand
    right: Operand

    @property
    def left_is_attr(self) -> bool:
        return isinstance(self.left, RelAttr)

    @property
    def right_is_attr(self) -> bool:
        return isinstance(self.right, RelAttr)


@dataclass
class Aggregation:
    """An aggregate over either a column or a literal."""

    func_name: FuncName
    attribute: RelAttr | None = None
    value: Value | None = None

    @property
    def is_value(self) -> bool:
        return self.value is not None


@dataclass
class Selects:
    """A SELECT statement."""

    attributes: list[RelAttr] = field(default_factory=list)
    relations: list[str] = field(default_factory=list)
    conditions: list[Condition] = field(default_factory=list)
    aggregations: list[Aggregation] = field(default_factory=list)

    def append_attribute(self, attr: RelAttr) -> None:
        _check_room(self.attributes, "attributes")
        self.attributes.append(attr)

    def append_relation(self, relation_name: str) -> None:
        _check_room(self.relations, "relations")
        self.relations.append(relation_name)

    def set_conditions(self, conditions) -> None:
        """Replace the WHERE conditions."""
        conditions = list(conditions)
        _check_count(conditions, "conditions")
        self.conditions = conditions

    def append_aggregation_attr(self, func_name: FuncName, attr: RelAttr) -> None:
        _check_room(self.aggregations, "aggregations")
        self.aggregations.append(Aggregation(FuncName(func_name), attribute=attr))

    def append_aggregation_value(self, func_name: FuncName, value: Value) -> None:
        _check_room(self.aggregations, "aggregations")
        self.aggregations.append(Aggregation(FuncName(func_name), value=value))


@dataclass
class InsertTuple:
    """One row of values to insert."""

    values: list[Value] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_count(self.values, "values")


@dataclass
class Inserts:
    """An INSERT statement."""

    relation_name: str
    tuples: list[InsertTuple] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_count(self.tuples, "tuples")


@dataclass
class Deletes:
    """A DELETE statement."""

    relation_name: str
    conditions: list[Condition] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_count(self.conditions, "conditions")


@dataclass
class Updates:
    """An UPDATE statement setting one column."""

    relation_name: str
    attribute_name: str
    value: Value
    conditions: list[Condition] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_count(self.conditions, "conditions")


@dataclass
class AttrInfo:
    """A column definition."""

    name: str
    type: AttrType
    length: int


@dataclass
class CreateTable:
    """A CREATE TABLE statement."""

    relation_name: str
    attributes: list[AttrInfo] = field(default_factory=list)

    def append_attribute(self, attr_info: AttrInfo) -> None:
        _check_room(self.attributes, "attributes")
        self.attributes.append(attr_info)


@dataclass
class DropTable:
    """A DROP TABLE statement."""

    relation_name: str


@dataclass
class CreateIndex:
    """A CREATE INDEX statement."""

    index_name: str
    relation_name: str
    attribute_name: str


@dataclass
class DropIndex:
    """A DROP INDEX statement."""

    index_name: str


@dataclass
class DescTable:
    """A DESC statement."""

    relation_name: str


@dataclass
class LoadData:
    """A LOAD DATA statement."""

    relation_name: str
    file_name: str


def load_data(relation_name: str, file_name: str) -> LoadData:
    """Build a LOAD DATA statement, dropping one surrounding quote on each end."""
    if file_name[:1] in ("'", '"'):
        file_name = file_name[1:]
    if file_name[-1:] in ("'", '"'):
        file_name = file_name[:-1]
    return LoadData(relation_name, file_name)


Statement = Union[
    Selects,
    Inserts,
    Deletes,
    Updates,
    CreateTable,
    DropTable,
    CreateIndex,
    DropIndex,
    DescTable,
    LoadData,
]


@dataclass
class Query:
    """A parsed statement: its kind, its contents and any parse error."""

    flag: SqlCommandFlag = SqlCommandFlag.SCF_ERROR
    sstr: Statement | None = None
    errors: str | None = None

    def reset(self) -> None:
        """Discard the statement and return to the freshly created state."""
        self.flag = SqlCommandFlag.SCF_ERROR
        self.sstr = None
        self.errors = None