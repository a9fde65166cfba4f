import logging
import json
import os
import sys
from datetime import datetime, UTC
from typing import Any, Dict

_debug_logs_on = False


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
        }

        # Merge extra fields if they exist
        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)  # type: ignore

        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def set_debug_logs(enabled: bool) -> None:
    """Toggle the `debug_logs_on` switch used by StructuredLogger.debug."""
    global _debug_logs_on
    _debug_logs_on = bool(enabled)


def setup_logging(level: str = "INFO", debug_logs_on: bool = False):
    logger = logging.getLogger("ssfs")
    set_debug_logs(debug_logs_on)
    # Debug lines must reach the handler once the switch is on.
    logger.setLevel(logging.DEBUG if debug_logs_on else level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    # Remove existing handlers to avoid duplicates
    logger.handlers = []
    logger.addHandler(handler)

    # Add file handler if SSFS_LOG_DIR is set
    log_dir = os.getenv("SSFS_LOG_DIR")
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(os.path.join(log_dir, "ssfs.log"))
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)
        except OSError as e:
            sys.stderr.write(f"Failed to setup file logging: {e}\n")

    # Suppress uvicorn access logs to avoid distinct format
    logging.getLogger("uvicorn.access").disabled = True


class StructuredLogger:
    def __init__(self, name: str):
        self.logger = logging.getLogger(f"ssfs.{name}")

    def debug(self, msg: str, **kwargs):
        """Emit only when the `debug_logs_on` switch is enabled."""
        if _debug_logs_on:
            self.logger.debug(msg, extra={"extra_fields": kwargs})

    def info(self, msg: str, **kwargs):
        self.logger.info(msg, extra={"extra_fields": kwargs})

    def warning(self, msg: str, **kwargs):
        self.logger.warning(msg, extra={"extra_fields": kwargs})

    def error(self, msg: str, **kwargs):
        self.logger.error(msg, extra={"extra_fields": kwargs})

    def exception(self, msg: str, **kwargs):
        self.logger.error(msg, exc_info=True, extra={"extra_fields": kwargs})

    def critical(self, msg: str, **kwargs):
        self.logger.critical(msg, extra={"extra_fields": kwargs})
