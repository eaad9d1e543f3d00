"""JSON log output for the Obsidian News generator.

Every component logs through an ``ExecutionLogger`` so each line carries the
run's execution id. Keyword arguments listed in ``PROMOTED_FIELDS`` become
top-level keys; anything else is nested under ``context``.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

PROMOTED_FIELDS = (
    "execution_id",
    "component",
    "feed_url",
    "item_title",
    "slug",
    "status",
    "metrics",
)

# Third-party loggers that drown out run output at INFO
QUIET_LOGGERS = ("botocore", "boto3", "urllib3")


class StructuredFormatter(logging.Formatter):
    """Renders each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        entry.update(
            (name, getattr(record, name))
            for name in PROMOTED_FIELDS
            if hasattr(record, name)
        )

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class ExecutionLogger:
    """Component logger bound to one generator run."""

    def __init__(self, execution_id: str, component: str = "main"):
        self.execution_id = execution_id
        self.component = component
        self.logger = logging.getLogger(f"obsidian_news.{component}")
        self.start_time: datetime | None = None

    def _log(self, level: int, message: str, **kwargs) -> None:
        extra: dict[str, Any] = {
            "execution_id": self.execution_id,
            "component": self.component,
        }
        context = {
            key: value for key, value in kwargs.items() if key not in PROMOTED_FIELDS
        }
        extra.update(
            (key, value) for key, value in kwargs.items() if key in PROMOTED_FIELDS
        )
        if context:
            extra["context"] = context
        self.logger.log(level, message, extra=extra)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def log_execution_start(self, **kwargs) -> None:
        self.start_time = datetime.now(UTC)
        self.info(
            f"Starting {self.component} execution",
            execution_start=self.start_time.isoformat(),
            **kwargs,
        )

    def log_execution_end(self, success: bool = True, **kwargs) -> None:
        """Log the end of a run with its duration since ``log_execution_start``."""
        end_time = datetime.now(UTC)
        duration_seconds = None
        if self.start_time:
            duration_seconds = (end_time - self.start_time).total_seconds()

        self.info(
            f"Completed {self.component} execution",
            execution_end=end_time.isoformat(),
            execution_duration_seconds=duration_seconds,
            execution_success=success,
            **kwargs,
        )

    def log_candidate(self, item_title: str, decision: str) -> None:
        """Record what selection did with one candidate."""
        self.info(
            f"Candidate {decision}: {item_title}",
            item_title=item_title,
            decision=decision,
        )

    def log_metrics(self, metrics: dict[str, Any]) -> None:
        self.info("Execution metrics", metrics=metrics)


def setup_structured_logging(log_level: str = "INFO") -> None:
    """Send JSON log lines to stdout.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR);
            unknown names fall back to INFO
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(console_handler)

    logging.getLogger("obsidian_news").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def create_execution_logger(
    component: str, execution_id: str | None = None
) -> ExecutionLogger:
    """Create a logger for a component, generating an execution id if needed."""
    if not execution_id:
        execution_id = f"exec_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"

    return ExecutionLogger(execution_id, component)
