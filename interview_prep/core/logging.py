import json
import logging
import os
import sys
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

LOGGER_NAME = "interview_prep"
ENV_PREFIX = "INTERVIEW_PREP_"

_TRUTHY = {"1", "true", "yes", "on"}

# Correlation context shared by every record emitted while handling a request
_ctx_trace_id: ContextVar[str | None] = ContextVar("trace_id", default=None)
_ctx_span_id: ContextVar[str | None] = ContextVar("span_id", default=None)
_ctx_parent_span_id: ContextVar[str | None] = ContextVar("parent_span_id", default=None)
_ctx_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)
_ctx_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_ctx_mask: ContextVar[bool] = ContextVar("mask", default=False)

# LogRecord attributes that are never treated as structured extras
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    }
)

_ORDERED_FIELDS = (
    "event",
    "trace_id",
    "span_id",
    "parent_span_id",
    "run_id",
    "request_id",
    "component",
    "operation",
    "duration_ms",
    "status",
    "error_type",
    "error_msg",
)


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = _ctx_trace_id.get()
        record.span_id = _ctx_span_id.get()
        record.parent_span_id = _ctx_parent_span_id.get()
        record.run_id = _ctx_run_id.get()
        record.request_id = _ctx_request_id.get()
        record.component = getattr(record, "component", None)
        record.operation = getattr(record, "operation", None)
        if not hasattr(record, "event"):
            record.event = record.name
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in _ORDERED_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in payload:
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def _coerce_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    if not level:
        return logging.INFO
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _env_flag(name: str) -> bool | None:
    raw = os.getenv(f"{ENV_PREFIX}{name}")
    if raw is None:
        return None
    return raw.strip().lower() in _TRUTHY


def init_logging(
    level: str | int | None = None,
    fmt: str | None = None,
    file_path: str | None = None,
    mask: bool | None = None,
    use_stderr: bool | None = None,
) -> logging.Logger:
    """Initialize application-wide logging.

    Every argument falls back to an ``INTERVIEW_PREP_*`` environment variable:

    - level: ``INTERVIEW_PREP_LOG_LEVEL`` (default INFO)
    - fmt: 'json' or 'text', ``INTERVIEW_PREP_LOG_FORMAT`` (default 'json')
    - file_path: ``INTERVIEW_PREP_LOG_FILE`` (default: stream output)
    - mask: hide job posting text in logs, ``INTERVIEW_PREP_LOG_MASK`` (default False)
    - use_stderr: stream to stderr instead of stdout, ``INTERVIEW_PREP_LOG_STDERR``
    """

    resolved_level = _coerce_level(level or os.getenv(f"{ENV_PREFIX}LOG_LEVEL") or logging.INFO)
    resolved_format = (fmt or os.getenv(f"{ENV_PREFIX}LOG_FORMAT") or "json").lower()
    resolved_file = file_path or os.getenv(f"{ENV_PREFIX}LOG_FILE")

    env_mask = _env_flag("LOG_MASK")
    resolved_mask = mask if mask is not None else bool(env_mask)

    env_stderr = _env_flag("LOG_STDERR")
    resolved_stderr = use_stderr if use_stderr is not None else bool(env_stderr)

    root = logging.getLogger()
    root.setLevel(resolved_level)

    # Repeated init (tests, CLI then server) must not duplicate output
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler: logging.Handler
    if resolved_file:
        try:
            handler = logging.FileHandler(resolved_file)
        except OSError as e:
            print(f"Warning: Could not create log file '{resolved_file}': {e}", file=sys.stderr)
            handler = logging.StreamHandler(sys.stderr)
            resolved_file = None
    else:
        handler = logging.StreamHandler(sys.stderr if resolved_stderr else sys.stdout)

    formatter: logging.Formatter
    if resolved_format == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(event)s %(message)s [request=%(request_id)s span=%(span_id)s]",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    root.addHandler(handler)

    if not _ctx_run_id.get():
        set_run_id(short_uuid())

    set_masking(resolved_mask)

    logger = logging.getLogger(LOGGER_NAME)
    logger.debug(
        "logging initialized",
        extra={
            "event": "logging.init",
            "component": "logging",
            "operation": "init",
            "level": resolved_level,
            "format": resolved_format,
            "file": resolved_file or ("stderr" if resolved_stderr else "stdout"),
            "mask": resolved_mask,
        },
    )
    return logger


def short_uuid() -> str:
    return uuid.uuid4().hex[:12]


def set_trace_id(trace_id: str | None) -> None:
    _ctx_trace_id.set(trace_id)


def get_trace_id() -> str | None:
    return _ctx_trace_id.get()


def set_run_id(run_id: str) -> None:
    _ctx_run_id.set(run_id)


def get_run_id() -> str | None:
    return _ctx_run_id.get()


def set_request_id(request_id: str | None) -> None:
    _ctx_request_id.set(request_id)


def get_request_id() -> str | None:
    return _ctx_request_id.get()


def set_masking(mask: bool) -> None:
    _ctx_mask.set(mask)


def is_masking() -> bool:
    return _ctx_mask.get()


def mask_text(text: str, preview: int = 80) -> str:
    """Return a log-safe rendition of user supplied text.

    With masking on only the length survives. Otherwise the text is cut to
    ``preview`` characters so a full job posting never lands in a log line.
    """
    if is_masking():
        return f"[masked len={len(text)}]"
    if len(text) <= preview:
        return text
    return f"{text[:preview]}... (len={len(text)})"


@contextmanager
def span(event: str, **fields: Any) -> Iterator[None]:
    """Time an operation and emit one structured record when it finishes.

    Usage:
        with span("llm.request", component="openrouter", operation="chat_completion", model=model):
            ...
    """

    logger = logging.getLogger(LOGGER_NAME)
    parent = _ctx_span_id.get()
    parent_token = _ctx_parent_span_id.set(parent)
    span_token = _ctx_span_id.set(short_uuid())
    start = time.perf_counter()
    error_type: str | None = None
    error_msg: str | None = None
    status = "ok"
    try:
        yield
    except BaseException as e:
        status = "error"
        error_type = type(e).__name__
        error_msg = str(e)
        raise
    finally:
        log_payload: dict[str, Any] = {
            "event": event,
            "component": fields.pop("component", None),
            "operation": fields.pop("operation", None),
            "duration_ms": round((time.perf_counter() - start) * 1000.0, 3),
            "status": status,
        }
        if error_type:
            log_payload["error_type"] = error_type
            log_payload["error_msg"] = error_msg
        log_payload.update(fields)
        logger.info("span", extra=log_payload)
        _ctx_span_id.reset(span_token)
        _ctx_parent_span_id.reset(parent_token)


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    extra = {"event": event}
    extra.update(fields)
    logger.log(level, event, extra=extra)


def audit_log(event_type: str, user_id: str | None, client_ip: str | None = None, **details: Any) -> None:
    """Log a security-relevant event to the audit trail.

    Audit records are always emitted at WARNING and carry ``audit=True`` so
    they can be filtered out of the regular stream.

    Args:
        event_type: Type of security event (e.g. "auth.invalid_token")
        user_id: ID of the user involved (None for anonymous requests)
        client_ip: IP address of the client
        **details: Additional context about the event
    """
    logger = logging.getLogger(LOGGER_NAME)
    extra = {
        "event": f"audit.{event_type}",
        "audit": True,
        "user_id": user_id,
        "client_ip": client_ip,
    }
    extra.update(details)
    logger.warning(f"AUDIT: {event_type}", extra=extra)
