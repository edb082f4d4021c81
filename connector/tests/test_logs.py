import json
import logging

from connector.logs import LogContext, configure_logging, logger


def test_configure_logging_is_idempotent():
    h1 = configure_logging(logging.INFO)
    h2 = configure_logging(logging.ERROR)
    assert h1 is h2
    assert logger.level == logging.ERROR
    assert sum(1 for h in logger.handlers if getattr(h, "_connector_stderr", False)) == 1


def test_log_context_records_outcome(caplog):
    caplog.set_level(logging.INFO, logger="connector")
    ctx = LogContext("execute_statement")
    ctx.set_entity("x.sqlite")
    ctx.set_payload("DELETE FROM t;")

    rec = ctx.write()
    assert rec["result"] == "OK" and rec["err_msg"] is None
    assert rec["latency_ms"] >= 0

    ctx.write("EXECUTE", "no such table: t")
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    body = json.loads(errors[0].getMessage())
    assert body["err_msg"] == "no such table: t"
    assert body["request_id"] == ctx.request_id
    assert body["entity_id"] == "x.sqlite"


def test_connector_logs_each_call(connector, caplog):
    caplog.set_level(logging.INFO, logger="connector")
    connector.execute_statement("CREATE TABLE t (id INTEGER);")
    actions = [json.loads(r.getMessage())["action"] for r in caplog.records if r.name == "connector.connector"]
    assert actions == ["execute_statement"]
