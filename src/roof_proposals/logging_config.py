from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime
from typing import Iterable

from google.cloud import logging as cloud_logging

SERVICE_NAME = "roof-proposals"

# Header Cloud Run and the load balancer stamp on every request.
TRACE_HEADER = "X-Cloud-Trace-Context"

# Loggers that drown out quote warnings at INFO.
QUIET_LOGGERS = ("google", "urllib3", "uvicorn.access")

trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, in the shape Cloud Logging parses from stdout.

    Every line carries the service name and environment so pricing warnings
    from dev and prod can be told apart in a shared log bucket.
    """

    def __init__(self, *, environment: str = "dev") -> None:
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.utcfromtimestamp(record.created).isoformat() + "Z",
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "environment": self.environment,
            "serviceContext": {"service": SERVICE_NAME},
            "logging.googleapis.com/sourceLocation": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        trace_id = trace_id_var.get()
        if trace_id:
            log_obj["logging.googleapis.com/trace"] = trace_id

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS:
                log_obj[key] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def trace_id_from_header(header: str | None, *, project_id: str | None = None) -> str:
    """Trace ID for a request, taken from ``X-Cloud-Trace-Context`` when present.

    The header reads ``TRACE_ID/SPAN_ID;o=OPTIONS``; only the trace part is
    kept. Requests without one get a fresh ID. With a project the ID is
    expanded to the ``projects/.../traces/...`` name Cloud Logging groups on.
    """
    trace = header.split("/", 1)[0].strip() if header else ""
    if not trace:
        trace = uuid.uuid4().hex
    if project_id:
        return f"projects/{project_id}/traces/{trace}"
    return trace


def setup_logging(
    *,
    environment: str = "dev",
    project_id: str | None = None,
    use_cloud_logging: bool = True,
    quiet_loggers: Iterable[str] = QUIET_LOGGERS,
) -> None:
    """Configure logging for the proposals service.

    Args:
        environment: Environment name (dev, staging, prod)
        project_id: GCP project ID for Cloud Logging
        use_cloud_logging: Whether to ship through the Cloud Logging client
        quiet_loggers: Library loggers held at WARNING
    """
    log_level = logging.DEBUG if environment == "dev" else logging.INFO

    if use_cloud_logging and project_id and environment != "dev":
        client = cloud_logging.Client(project=project_id)
        client.setup_logging(log_level=log_level, labels={"service": SERVICE_NAME, "environment": environment})
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter(environment=environment))
        logging.basicConfig(level=log_level, handlers=[handler])

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def set_trace_id(trace_id: str | None) -> None:
    trace_id_var.set(trace_id)


def get_trace_id() -> str | None:
    return trace_id_var.get()


__all__ = [
    "QUIET_LOGGERS",
    "SERVICE_NAME",
    "StructuredFormatter",
    "TRACE_HEADER",
    "get_trace_id",
    "set_trace_id",
    "setup_logging",
    "trace_id_from_header",
]
