"""
Structured JSON Logging
=======================
One JSON line per record, so `cdk synth` output in CI can be filtered with jq:

    cdk synth 2>&1 | jq -c 'select(.entity == "devices")'

Usage:
  from acorn_pups_db.logger import get_logger
  logger = get_logger(__name__)
  logger.info("Declared table", extra={"entity": "users", "environment": "dev"})

Output:
  {"timestamp":"2024-01-01T00:00:00Z","level":"INFO","logger":"acorn_pups_db.dynamodb_stack",
   "message":"Declared table","entity":"users","environment":"dev"}
"""
from __future__ import annotations

import json
import logging
import os
import sys
import time
from typing import Any

# Standard logging.LogRecord fields we don't want in the output
_STDLIB_FIELDS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "taskName",
}

_configured = False


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()

        log_obj: dict[str, Any] = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.message,
        }

        for key, value in record.__dict__.items():
            if key not in _STDLIB_FIELDS:
                log_obj[key] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the `acorn_pups_db` hierarchy that emits JSON.

    Only the package logger gets a handler. stdout belongs to `cdk synth`
    (it may carry the template), so we write to stderr.
    """
    global _configured
    if not _configured:
        package_logger = logging.getLogger("acorn_pups_db")
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
        package_logger.addHandler(handler)
        log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
        package_logger.setLevel(getattr(logging, log_level, logging.INFO))
        _configured = True
    return logging.getLogger(name)
