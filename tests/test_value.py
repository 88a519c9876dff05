import pytest

from minidb.parse_defs import AttrType
from minidb.rc import RC, RCError
from minidb.value import (
    DateValue,
    FloatValue,
    IntValue,
    StringValue,
    deserialize_date,
    serialize_date,
)


def test_epoch_encodes_to_zero():
    assert serialize_date("1970-01-01") == 0
    assert deserialize_date(0) == "1970-01-01"


@pytest.mark.parametrize(
    "text", ["1970-01-02", "2000-02-29", "2021-12-31", "2038-01-19", "1999-07-04"]
)
def test_date_round_trip(text):
    assert deserialize_date(serialize_date(text)) == text


def test_date_order_is_preserved():
    assert serialize_date("2021-01-01") < serialize_date("2021-01-02")
    assert serialize_date("2021-01-02") - serialize_date("2021-01-01") == 1


def test_unpadded_date_accepted():
    assert serialize_date("2021-3-7") == serialize_date("2021-03-07")


@pytest.mark.parametrize(
    "text",
    [
        "2021-02-30",
        "2021-13-01",
        "2021-00-10",
        "2021-01-00",
        "1969-12-31",
        "2039-01-01",
        "2021/01/01",
        "2021-01",
        "2021-01-01-01",
        "abc",
        "",
    ],
)
def test_invalid_dates_rejected(text):
    with pytest.raises(RCError) as info:
        serialize_date(text)
    assert info.value.rc == RC.INVALID_ARGUMENT


def test_deserialize_out_of_range():
    with pytest.raises(ValueError):
        deserialize_date(-1)
    with pytest.raises(ValueError):
        deserialize_date(70000)


def test_int_value():
    v = IntValue(42)
    assert v.to_string() == str(42)
    assert str(v) == "42"
    assert v.attr_type == AttrType.INTS
    assert v.compare(IntValue(42)) == 0
    assert v.compare(IntValue(50)) < 0
    assert v.compare(IntValue(-3)) > 0


def test_date_value():
    days = serialize_date("2021-10-24")
    v = DateValue(days)
    assert v.to_string() == "2021-10-24"
    assert v.attr_type == AttrType.DATES
    assert v.compare(DateValue(days + 1)) < 0
    assert v.compare(DateValue(days)) == 0


def test_date_value_range():
    with pytest.raises(ValueError):
        DateValue(-5)


@pytest.mark.parametrize(
    "number, text",
    [(2.0, "2"), (1.5, "1.5"), (3.25, "3.25"), (10.0, "10"), (0.0, "0")],
)
def test_float_formatting(number, text):
    assert FloatValue(number).to_string() == text


def test_float_compare():
    assert FloatValue(1.5).compare(FloatValue(2.5)) == -1
    assert FloatValue(2.5).compare(FloatValue(1.5)) == 1
    assert FloatValue(1.5).compare(FloatValue(1.5)) == 0
    assert FloatValue(1.0).attr_type == AttrType.FLOATS


def test_float_is_single_precision():
    assert FloatValue(0.1).value != 0.1
    assert FloatValue(0.1).to_string() == "0.1"


def test_string_value():
    v = StringValue("abc")
    assert v.to_string() == "abc"
    assert v.attr_type == AttrType.CHARS
    assert v.compare(StringValue("abd")) < 0
    assert v.compare(StringValue("abc")) == 0
    assert v.compare(StringValue("ab")) > 0


def test_compare_across_types_rejected():
    with pytest.raises(TypeError):
        IntValue(1).compare(StringValue("1"))