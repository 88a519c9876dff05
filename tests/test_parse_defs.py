import pytest

from minidb.parse_defs import (
    MAX_NUM,
    AttrInfo,
    AttrType,
    CompOp,
    Condition,
    CreateTable,
    Deletes,
    FuncName,
    Inserts,
    InsertTuple,
    Query,
    RelAttr,
    Selects,
    SqlCommandFlag,
    make_value,
    load_data,
)


def test_enum_values_fixed_by_format():
    cond = Condition(CompOp.EQUAL_TO, make_value(1), make_value(1))
    assert cond.comp == 0
    assert make_value(0.5).type == 4
    assert make_value(1).type == 2
    assert Query().flag == 0
    assert SqlCommandFlag(17) is SqlCommandFlag.SCF_EXIT


def test_make_value_types():
    assert make_value(7).type is AttrType.INTS
    assert make_value(7).data == 7
    assert make_value("abc").type is AttrType.CHARS
    assert make_value("abc").data == "abc"
    v = make_value(0.5)
    assert v.type is AttrType.FLOATS
    assert v.data == 0.5


def test_make_value_float_single_precision():
    v = make_value(0.1)
    assert abs(v.data - 0.1) < 1e-7
    assert make_value(v.data).data == v.data


def test_make_value_rejects_other_types():
    with pytest.raises(TypeError):
        make_value([1])
    with pytest.raises(TypeError):
        make_value(True)


@pytest.mark.parametrize(
    "raw",
    ["'data.csv'", '"data.csv"', "data.csv", "'data.csv", 'data.csv"'],
)
def test_load_data_strips_quotes(raw):
    result = load_data("t", raw)
    assert result.relation_name == "t"
    assert result.file_name == "data.csv"


def test_load_data_empty_name():
    assert load_data("t", "").file_name == ""


def test_condition_sides():
    cond = Condition(CompOp.LESS_THAN, RelAttr("t", "a"), make_value(3))
    assert cond.left_is_attr is True
    assert cond.right_is_attr is False


def test_selects_appends_in_order():
    s = Selects()
    s.append_attribute(RelAttr(None, "a"))
    s.append_attribute(RelAttr("t", "b"))
    s.append_relation("t")
    assert [a.attribute_name for a in s.attributes] == ["a", "b"]
    assert s.relations == ["t"]


def test_selects_set_conditions_replaces():
    s = Selects()
    c1 = Condition(CompOp.EQUAL_TO, RelAttr(None, "a"), make_value(1))
    c2 = Condition(CompOp.NOT_EQUAL, RelAttr(None, "b"), make_value(2))
    s.set_conditions([c1])
    s.set_conditions([c2])
    assert s.conditions == [c2]


def test_selects_aggregations():
    s = Selects()
    s.append_aggregation_attr(FuncName.AGG_COUNT, RelAttr(None, "*"))
    s.append_aggregation_value(FuncName.AGG_MAX, make_value(5))
    assert s.aggregations[0].is_value is False
    assert s.aggregations[0].attribute.attribute_name == "*"
    assert s.aggregations[1].is_value is True
    assert s.aggregations[1].value.data == 5


def test_selects_limit():
    s = Selects()
    for i in range(MAX_NUM):
        s.append_relation(f"t{i}")
    assert len(s.relations) == MAX_NUM
    with pytest.raises(ValueError):
        s.append_relation("extra")
    with pytest.raises(ValueError):
        s.set_conditions(
            [Condition(CompOp.EQUAL_TO, make_value(1), make_value(1))] * (MAX_NUM + 1)
        )


def test_create_table_limit():
    ct = CreateTable("t")
    for i in range(MAX_NUM):
        ct.append_attribute(AttrInfo(f"c{i}", AttrType.INTS, 4))
    assert ct.attributes[-1].name == f"c{MAX_NUM - 1}"
    with pytest.raises(ValueError):
        ct.append_attribute(AttrInfo("x", AttrType.INTS, 4))


def test_insert_and_delete_limits():
    with pytest.raises(ValueError):
        InsertTuple([make_value(1)] * (MAX_NUM + 1))
    with pytest.raises(ValueError):
        Inserts("t", [InsertTuple()] * (MAX_NUM + 1))
    with pytest.raises(ValueError):
        Deletes(
            "t",
            [Condition(CompOp.EQUAL_TO, make_value(1), make_value(1))] * (MAX_NUM + 1),
        )
    ins = Inserts("t", [InsertTuple([make_value(1), make_value("x")])])
    assert ins.tuples[0].values[1].data == "x"


def test_query_reset():
    q = Query()
    assert q.flag is SqlCommandFlag.SCF_ERROR
    q.flag = SqlCommandFlag.SCF_SELECT
    q.sstr = Selects(relations=["t"])
    q.errors = "oops"
    q.reset()
    assert q.flag is SqlCommandFlag.SCF_ERROR
    assert q.sstr is None
    assert q.errors is None