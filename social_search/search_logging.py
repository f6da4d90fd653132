"""
Structured logging for the search service

Every line is one JSON object with ts, level, module, action and msg, plus
whatever context the call passes (credential_key, platform, search_string...).
Set LOG_FORMAT=pretty for one-line human output while developing.

    logger = logging.getLogger(__name__)
    log.info(logger, "session", "session_reused", "Reusing stored session",
             credential_key="facebook-alice")
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

_BASE_FIELDS = ("ts", "level", "module", "action", "msg")


class StructuredFormatter(logging.Formatter):
    """JSON formatter. Records not emitted through `log` become module=legacy."""

    def __init__(self, pretty: bool = False):
        super().__init__()
        self.pretty = pretty

    def format(self, record: logging.LogRecord) -> str:
        context = getattr(record, "search_context", None)
        if context is None and self.pretty:
            return record.getMessage()

        data: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "module": getattr(record, "search_module", "legacy"),
            "action": getattr(record, "search_action", "log"),
            "msg": record.getMessage(),
        }
        data.update(context or {})

        if self.pretty:
            ctx = " ".join(f"{k}={v}" for k, v in data.items() if k not in _BASE_FIELDS)
            head = f"{data['level'][0]} [{data['module'].upper()[:8].ljust(8)}] {data['action']}: {data['msg']}"
            return head + (f" | {ctx}" if ctx else "")
        return json.dumps(data, default=str, separators=(',', ':'))


class StructuredLogger:
    """
    Emits records the formatter understands.

    Context fields set to None are dropped, so callers can pass optional
    values (error=None) without cluttering the output.
    """

    def _log(self, logger: logging.Logger, level: int, module: str, action: str, msg: str, **kwargs) -> None:
        logger.log(level, msg, extra={
            "search_module": module,
            "search_action": action,
            "search_context": {k: v for k, v in kwargs.items() if v is not None},
        })

    def debug(self, logger: logging.Logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.DEBUG, module, action, msg, **kwargs)

    def info(self, logger: logging.Logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.INFO, module, action, msg, **kwargs)

    def warning(self, logger: logging.Logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.WARNING, module, action, msg, **kwargs)

    def error(self, logger: logging.Logger, module: str, action: str, msg: str, **kwargs) -> None:
        """Log ERROR. Pass error=str(e) and error_type=type(e).__name__ for failures."""
        self._log(logger, logging.ERROR, module, action, msg, **kwargs)


log = StructuredLogger()


def configure_logging() -> None:
    """Send everything to stdout through StructuredFormatter. Call once at startup."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(pretty=os.environ.get("LOG_FORMAT", "json") == "pretty"))
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper(), handlers=[handler], force=True)

    # Selenium logs every WebDriver HTTP call at DEBUG/INFO
    for name in ("selenium", "urllib3", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)
