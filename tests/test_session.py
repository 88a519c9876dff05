from minidb.session import Session, default_session


def test_default_session_is_shared():
    first = default_session()
    second = default_session()
    assert second is first
    original = first.trx_multi_operation_mode
    try:
        first.trx_multi_operation_mode = True
        assert second.trx_multi_operation_mode is True
    finally:
        first.trx_multi_operation_mode = original


def test_new_session_defaults():
    s = Session()
    assert s.current_db == ""
    assert s.trx_multi_operation_mode is False


def test_copy_keeps_database():
    s = Session(current_db="sys")
    c = s.copy()
    assert c.current_db == "sys"
    assert c is not s


def test_copy_resets_multi_operation_mode():
    s = Session(current_db="db1", trx_multi_operation_mode=True)
    c = s.copy()
    assert c.trx_multi_operation_mode is False
    assert s.trx_multi_operation_mode is True


def test_copy_is_independent():
    s = Session(current_db="a")
    c = s.copy()
    c.current_db = "b"
    assert s.current_db == "a"


def test_copy_of_default_session():
    base = default_session()
    c = base.copy()
    assert c.current_db == base.current_db
    assert c is not base