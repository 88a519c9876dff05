import pytest

from minidb.parse_defs import AttrType
from minidb.tuples import Tuple, TupleField, TupleSchema, TupleSet
from minidb.value import DateValue, FloatValue, IntValue, StringValue


def test_tuple_add_wraps_plain_values():
    t = Tuple()
    t.add(7)
    t.add(1.5)
    t.add("x")
    t.add(DateValue(0))
    assert len(t) == 4
    assert isinstance(t[0], IntValue)
    assert isinstance(t[1], FloatValue)
    assert isinstance(t[2], StringValue)
    assert t[3].to_string() == "1970-01-01"
    assert [v.to_string() for v in t] == ["7", "1.5", "x", "1970-01-01"]


def test_tuple_rejects_unknown_types():
    with pytest.raises(TypeError):
        Tuple().add([1])


def test_tuple_field_to_string():
    f = TupleField(AttrType.INTS, "t", "a")
    assert f.to_string() == "t.a" + str(int(AttrType.INTS))


def test_schema_index_and_dedup():
    s = TupleSchema()
    s.add(AttrType.INTS, "t", "a")
    s.add(AttrType.CHARS, "t", "b")
    s.add_if_not_exists(AttrType.INTS, "t", "a")
    assert len(s) == 2
    assert s.index_of_field("t", "b") == 1
    assert s.index_of_field("t", "zz") == -1
    assert s[0].field_name == "a"


def test_schema_append_and_clear():
    a = TupleSchema()
    a.add(AttrType.INTS, "t1", "x")
    b = TupleSchema()
    b.add(AttrType.INTS, "t2", "y")
    a.append(b)
    assert [f.table_name for f in a] == ["t1", "t2"]
    assert a.index_of_field("t2", "y") == 1
    a.clear()
    assert len(a) == 0


def test_schema_text_single_table():
    s = TupleSchema()
    s.add(AttrType.INTS, "t", "a")
    s.add(AttrType.CHARS, "t", "b")
    assert s.to_text() == "a | b\n"


def test_schema_text_multiple_tables():
    s = TupleSchema()
    s.add(AttrType.INTS, "t1", "a")
    s.add(AttrType.INTS, "t2", "b")
    assert s.to_text() == "t1.a | t2.b\n"


def test_empty_schema_text():
    assert TupleSchema().to_text() == "No schema"


def test_tuple_set_text():
    s = TupleSchema()
    s.add(AttrType.INTS, "t", "id")
    s.add(AttrType.CHARS, "t", "name")
    ts = TupleSet()
    ts.set_schema(s)
    ts.add(Tuple([1, "one"]))
    ts.add(Tuple([2, "two"]))
    assert len(ts) == 2
    assert not ts.is_empty()
    assert ts.to_text() == "id | name\n1 | one\n2 | two\n"


def test_tuple_set_schema_is_copied():
    s = TupleSchema()
    s.add(AttrType.INTS, "t", "a")
    ts = TupleSet(s)
    s.add(AttrType.INTS, "t", "b")
    assert len(ts.schema) == 1


def test_tuple_set_without_schema_renders_nothing():
    ts = TupleSet()
    ts.add(Tuple([1]))
    assert ts.to_text() == ""


def test_tuple_set_clear():
    s = TupleSchema()
    s.add(AttrType.INTS, "t", "a")
    ts = TupleSet(s)
    ts.add(Tuple([1]))
    ts.clear()
    assert ts.is_empty()
    assert len(ts.schema) == 0
    assert ts.tuples == []