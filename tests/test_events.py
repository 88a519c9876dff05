from types import SimpleNamespace

import pytest

from minidb.events import ExecutionPlanEvent, SessionEvent, SQLStageEvent, StorageEvent
from minidb.parse_defs import Query, Selects, SqlCommandFlag


def test_session_event_request_buf_comes_from_client():
    client = SimpleNamespace(buf="select * from t;")
    ev = SessionEvent(client)
    assert ev.request_buf == "select * from t;"
    assert ev.client is client


def test_session_event_response_defaults_empty():
    ev = SessionEvent(SimpleNamespace(buf=""))
    assert ev.response == ""
    assert ev.response_len == 0


def test_set_response_str():
    ev = SessionEvent(SimpleNamespace(buf=""))
    ev.set_response("FAILURE\n")
    assert ev.response == "FAILURE\n"
    assert ev.response_len == len("FAILURE\n")


def test_set_response_bytes():
    ev = SessionEvent(SimpleNamespace(buf=""))
    ev.set_response(b"SUCCESS")
    assert ev.response == "SUCCESS"


def test_set_response_rejects_other_types():
    ev = SessionEvent(SimpleNamespace(buf=""))
    with pytest.raises(TypeError):
        ev.set_response(42)


def test_sql_stage_event_links_session_event():
    sev = SessionEvent(SimpleNamespace(buf="help;"))
    ev = SQLStageEvent(sev, "help;")
    assert ev.session_event is sev
    assert ev.sql == "help;"


def test_execution_plan_event_close_releases_query():
    sev = SessionEvent(SimpleNamespace(buf=""))
    sql_ev = SQLStageEvent(sev, "select a from t;")
    q = Query(SqlCommandFlag.SCF_SELECT, Selects(relations=["t"]))
    ev = ExecutionPlanEvent(sql_ev, q)
    assert ev.sqls is q
    ev.close()
    assert ev.sqls is None
    assert ev.sql_event is None
    assert q.flag == SqlCommandFlag.SCF_ERROR
    assert q.sstr is None


def test_execution_plan_event_context_manager():
    q = Query(SqlCommandFlag.SCF_HELP)
    with ExecutionPlanEvent(None, q) as ev:
        assert ev.sqls.flag == SqlCommandFlag.SCF_HELP
    assert ev.sqls is None
    assert q.flag == SqlCommandFlag.SCF_ERROR


def test_storage_event_links_plan_event():
    plan = ExecutionPlanEvent(None, Query())
    ev = StorageEvent(plan)
    assert ev.exe_event is plan