"""JSONL log file for resolver runs.

`init_json_logging` is called once by the CLI. Each record becomes one JSON
line carrying the logger name, level, message, any `extra=` fields and the
type and text of an attached exception.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path

LOG_PATH_ENV = "FORMATTER_RESOLVER_LOG_PATH"
LOG_LEVEL_ENV = "FORMATTER_RESOLVER_LOG_LEVEL"
DEFAULT_PATH = "./formatter-resolver.log.jsonl"

LOG_SCHEMA = {"name": "formatter-resolver.log", "ver": "1.0.0"}


class JsonlHandler(logging.Handler):
    """Appends one JSON object per record to `path`."""

    # Attributes every LogRecord has; anything else came in through `extra=`
    standard_attrs = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def format_record(self, record: logging.LogRecord) -> dict:
        payload = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": LOG_SCHEMA,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({k: v for k, v in vars(record).items() if k not in self.standard_attrs})
        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            payload["error"] = {"type": type(error).__name__, "message": str(error)}
        return payload

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.format_record(record), ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def init_json_logging(path: str | None = None, level: str | None = None) -> None:
    """Point the root logger at a single JSONL file.

    Explicit arguments win over the environment variables, which win over the
    defaults. Calling it again swaps the file rather than adding a second one.
    """
    path = path or os.environ.get(LOG_PATH_ENV) or DEFAULT_PATH
    level = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    for handler in [h for h in root.handlers if isinstance(h, JsonlHandler)]:
        root.removeHandler(handler)
        handler.close()
    root.addHandler(JsonlHandler(path))
