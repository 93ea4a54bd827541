"""
Structured logging configuration.

- Development / testing: one colored line per record, request context appended
- Production: one JSON object per record
- Level: LOG_LEVEL config (env), else DEBUG in development and INFO otherwise

Services pass request context through ``extra=``:

    logger.info("Capture saved kind=%s", kind,
                extra={"user_id": user_id, "project_id": project_id, "entry_id": entry_id})
"""

import json
import logging
import sys
from datetime import datetime, timezone

# Record attributes emitted when a caller supplied them via extra=.
_CONTEXT_FIELDS = ("user_id", "project_id", "entry_id")
_REQUEST_FIELDS = ("method", "path", "status", "duration_ms", "request_id")


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for key in _REQUEST_FIELDS + _CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """Colored single-line format for a terminal."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, "")
        when = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}{when} {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            line += f" [{duration:.0f}ms]"
        context = " ".join(
            f"{key.removesuffix('_id')}={getattr(record, key)}"
            for key in _CONTEXT_FIELDS if getattr(record, key, None)
        )
        if context:
            line += f" ({context})"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app):
    """Install a single root handler for the app's environment.

    Called first in create_app. The root handler list is replaced, not
    appended to, so the test suite can build several apps.
    """
    testing = app.config.get("TESTING", False)
    production = not app.config.get("DEBUG", False) and not testing

    level_name = (app.config.get("LOG_LEVEL") or ("INFO" if production else "DEBUG")).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if production else ReadableFormatter())
    handler.setLevel(level)

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # Third-party request/SQL chatter only above WARNING
    for name in ("werkzeug", "sqlalchemy.engine", "urllib3", "httpx", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not testing:
        app.logger.info("Logging configured: level=%s format=%s",
                        level_name, "json" if production else "readable")
