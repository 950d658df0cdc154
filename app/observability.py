import json
import logging
import sys
import time
from contextvars import ContextVar
from typing import Any, Dict, Mapping


_CTX: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})

_SENSITIVE_KEY_EXACT = {
    "authorization",
    "cookie",
    "email",
    "secret",
    "token",
    "token_hash",
}

_SENSITIVE_KEY_SUBSTR = (
    "api_key",
    "authorization",
    "cookie",
    "password",
    "secret",
    "token",
)


def bind_context(**fields: Any) -> None:
    ctx = dict(_CTX.get())
    for key, value in fields.items():
        if value is None:
            ctx.pop(key, None)
        else:
            ctx[key] = value
    _CTX.set(ctx)


def clear_context(*keys: str) -> None:
    if not keys:
        _CTX.set({})
        return
    ctx = dict(_CTX.get())
    for key in keys:
        ctx.pop(key, None)
    _CTX.set(ctx)


def get_context() -> Dict[str, Any]:
    return dict(_CTX.get())


def _is_sensitive_key(key: str) -> bool:
    k = key.lower()
    if k in _SENSITIVE_KEY_EXACT:
        return True
    return any(substr in k for substr in _SENSITIVE_KEY_SUBSTR)


def sanitize_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for k, v in headers.items():
        if _is_sensitive_key(k):
            out[k] = "[REDACTED]"
        else:
            out[k] = v
    return out


class JsonFormatter(logging.Formatter):
    _RESERVED = {
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
        "message",
    }

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        ctx = get_context()
        if ctx:
            payload.update(ctx)

        # Include any explicit structured fields passed via `extra=`.
        for k, v in record.__dict__.items():
            if k in self._RESERVED or k.startswith("_"):
                continue
            payload.setdefault(k, v)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


_CONFIGURED = False


def setup_logging(*, level: str = "INFO") -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(level.upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_service(service: str) -> None:
    bind_context(service=service)


def set_request_id(request_id: str) -> None:
    bind_context(request_id=request_id)
