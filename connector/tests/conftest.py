import sys
import logging
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture()
def tmp_db_path(tmp_path, monkeypatch):
    path = tmp_path / "connector_test.sqlite"
    # Point the connector at this temp DB
    monkeypatch.setenv("CONNECTOR_DB_PATH", str(path))
    monkeypatch.delenv("CONNECTOR_TIMEOUT", raising=False)
    monkeypatch.delenv("CONNECTOR_CONFIG", raising=False)
    return str(path)


@pytest.fixture()
def connector(tmp_db_path):
    from connector import ConnectorConfig, SQLiteConnector
    return SQLiteConnector(ConnectorConfig(db_path=tmp_db_path))


@pytest.fixture(autouse=True)
def _isolated(tmp_db_path):
    # Fresh shared instance and no leftover stderr handlers for each test
    from connector import reset_connector
    reset_connector()
    yield
    reset_connector()
    log = logging.getLogger("connector")
    for h in list(log.handlers):
        if getattr(h, "_connector_stderr", False):
            log.removeHandler(h)
    log.setLevel(logging.NOTSET)
