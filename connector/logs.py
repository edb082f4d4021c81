import json, logging, sys, time, uuid
from typing import Optional

logger = logging.getLogger("connector")

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int = logging.WARNING) -> logging.Handler:
    """Attach a single stderr handler to the package logger (idempotent)."""
    for h in logger.handlers:
        if getattr(h, "_connector_stderr", False):
            logger.setLevel(level)
            return h
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._connector_stderr = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


class LogContext:
    def __init__(self, action: str, log: Optional[logging.Logger] = None):
        self.action = action
        self.log = log or logger
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.payload = None
        self.entity_id = None

    def set_entity(self, eid: str):
        self.entity_id = eid

    def set_payload(self, obj): self.payload = obj

    def write(self, result: str = "OK", err: Optional[str] = None) -> dict:
        elapsed_ms = int((time.perf_counter() - self.start) * 1000)
        rec = {
            "action": self.action,
            "entity_id": self.entity_id,
            "request_id": self.request_id,
            "payload": self.payload,
            "result": result,
            "err_msg": err,
            "latency_ms": elapsed_ms,
        }
        line = json.dumps(rec, ensure_ascii=False, default=str)
        if result == "OK":
            self.log.info(line)
        else:
            self.log.error(line)
        return rec
