"""Structured logging with request and session context.

Every record carries the request id and, once the session cookie has been
decoded, the acting role and team id. Settlement lines can therefore be traced
back to the team that placed them even when several classrooms trade at once.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import settings


request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
session_role_var: ContextVar[Optional[str]] = ContextVar("session_role", default=None)
session_team_var: ContextVar[Optional[int]] = ContextVar("session_team", default=None)

# Attributes passed through ``extra=`` by the request middleware
REQUEST_FIELDS = ("method", "path", "status_code", "duration_ms")


def bind_session(role: Optional[str], team_id: Optional[int]) -> None:
    """Attach the acting session to log records of the current request."""
    session_role_var.set(role)
    session_team_var.set(team_id)


def _context() -> Dict[str, Any]:
    context: Dict[str, Any] = {}
    request_id = request_id_var.get()
    if request_id:
        context["request_id"] = request_id
    role = session_role_var.get()
    if role:
        context["role"] = role
    team_id = session_team_var.get()
    if team_id is not None:
        context["team_id"] = team_id
    return context


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(),
        }

        for field in REQUEST_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if settings.debug:
            log_data["location"] = f"{record.filename}:{record.lineno} {record.funcName}"

        return json.dumps(log_data, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        context = _context()
        tags = []
        if "request_id" in context:
            tags.append(context["request_id"][:8])
        if "team_id" in context:
            tags.append(f"team={context['team_id']}")
        elif context.get("role") == "admin":
            tags.append("admin")
        prefix = f"[{' '.join(tags)}] " if tags else ""

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{timestamp} {record.levelname:8} {prefix}{record.name}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class SensitiveDataFilter(logging.Filter):
    """Redact admin passwords, team access codes and session tokens."""

    SENSITIVE_KEYS = (
        "password",
        "newpassword",
        "new_password",
        "accesscode",
        "access_code",
        "newaccesscode",
        "new_access_code",
        "session",
        "secret",
        "token",
    )

    _patterns = [
        re.compile(rf"""(["']?{key}["']?\s*[=:]\s*)["']?[^\s,'"}}\]]+["']?""", re.IGNORECASE)
        for key in SENSITIVE_KEYS
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._redact(str(record.msg))
        if isinstance(record.args, tuple):
            record.args = tuple(
                self._redact(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True

    def _redact(self, text: str) -> str:
        for pattern in self._patterns:
            text = pattern.sub(r"\1[REDACTED]", text)
        return text


def setup_logging() -> None:
    """Install a single stdout handler on the root logger."""
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(settings.log_level)
    handler.setFormatter(
        StructuredFormatter() if settings.log_format == "json" else TextFormatter()
    )
    handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``cashcrash`` namespace."""
    return logging.getLogger(f"cashcrash.{name}")
