from __future__ import annotations

# connector/config.py
import os
from dataclasses import dataclass
from typing import Optional, Tuple

import yaml

# Database file resolution order:
# 1) env CONNECTOR_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: DB_NAME in the current working directory
DB_NAME = "test.sqlite"
PROTOCOL = "db"
DRIVER = "sqlite3"
DEFAULT_TIMEOUT = 5.0

_CONFIG_FILE = "config.yaml"


def _read_config_yaml(cfg_path: Optional[str] = None) -> dict:
    cfg_path = cfg_path or os.environ.get("CONNECTOR_CONFIG") or _CONFIG_FILE
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(cfg, dict):
        return {}
    out = {}
    for k in ("db_path", "test_db_path"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    if "timeout" in cfg:
        out["timeout"] = cfg["timeout"]
    return out


def get_db_path(cfg_path: Optional[str] = None) -> str:
    env_path = os.environ.get("CONNECTOR_DB_PATH")
    cfg = _read_config_yaml(cfg_path)
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        return env_path
    if is_test and cfg_test:
        return cfg_test
    if cfg_db:
        return cfg_db
    return DB_NAME


def _get_timeout(cfg_path: Optional[str] = None) -> float:
    raw = os.environ.get("CONNECTOR_TIMEOUT")
    if raw is None:
        raw = _read_config_yaml(cfg_path).get("timeout")
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT


def build_url(db_path: str) -> str:
    return f"{PROTOCOL}:{DRIVER}:{db_path}"


def parse_url(url: str) -> Tuple[str, str, str]:
    """Split ``<protocol>:<driver>:<filename>`` into its three parts.

    The filename may itself contain colons (Windows drive letters), so only
    the first two separators are significant.
    """
    parts = url.split(":", 2)
    if len(parts) != 3 or not parts[2]:
        raise ValueError(f"malformed connection string: {url!r}")
    protocol, driver, filename = parts
    if protocol != PROTOCOL:
        raise ValueError(f"unsupported protocol {protocol!r} in {url!r}")
    if driver != DRIVER:
        raise ValueError(f"unsupported driver {driver!r} in {url!r}")
    return protocol, driver, filename


@dataclass(frozen=True)
class ConnectorConfig:
    db_path: str = DB_NAME
    timeout: float = DEFAULT_TIMEOUT

    @property
    def url(self) -> str:
        return build_url(self.db_path)

    @classmethod
    def from_url(cls, url: str, timeout: float = DEFAULT_TIMEOUT) -> "ConnectorConfig":
        _, _, filename = parse_url(url)
        return cls(db_path=filename, timeout=timeout)


def load_config(db_path: Optional[str] = None, cfg_path: Optional[str] = None) -> ConnectorConfig:
    """Build the connector configuration. An explicit db_path wins over everything else."""
    return ConnectorConfig(
        db_path=db_path or get_db_path(cfg_path),
        timeout=_get_timeout(cfg_path),
    )
