"""JSON logging with request-scoped context.

Each line carries service metadata, whatever the observability middleware
bound for the current request, and the ``extra=`` fields of the call.
Sensitive fields are masked and large values are clipped.
"""

from __future__ import annotations

import json
import logging
import random
import re
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from interest_connect.settings import settings

_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar("interest_connect_log_context", default={})

_MASKED = re.compile(r"token|secret|authorization|password|email|content|body", re.IGNORECASE)
_MAX_TEXT = 256
_MAX_ITEMS = 10
_ELLIPSIS = "…"

# Attributes every LogRecord has; anything else on a record came from ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def bind_context(**fields: Optional[str]) -> Token:
	"""Layer ``fields`` over the current context. Pass the token to :func:`reset_context`."""
	merged = dict(_CONTEXT.get())
	merged.update({key: value for key, value in fields.items() if value is not None})
	return _CONTEXT.set(merged)


def reset_context(token: Token) -> None:
	_CONTEXT.reset(token)


def current_request_id() -> Optional[str]:
	return _CONTEXT.get().get("request_id")


def _clip(value: Any) -> Any:
	if isinstance(value, str) and len(value) > _MAX_TEXT:
		return value[:_MAX_TEXT] + _ELLIPSIS
	if isinstance(value, Mapping):
		items = list(value.items())
		clipped = {str(key): _scrub(str(key), item) for key, item in items[:_MAX_ITEMS]}
		if len(items) > _MAX_ITEMS:
			clipped[_ELLIPSIS] = f"+{len(items) - _MAX_ITEMS} keys"
		return clipped
	if isinstance(value, (list, tuple, set, frozenset)):
		items = [_clip(item) for item in value]
		return items if len(items) <= _MAX_ITEMS else items[:_MAX_ITEMS] + [_ELLIPSIS]
	return value


def _scrub(key: str, value: Any) -> Any:
	return "[redacted]" if _MASKED.search(key) else _clip(value)


class JSONLogFormatter(logging.Formatter):
	def format(self, record: logging.LogRecord) -> str:  # noqa: A003
		line: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"msg": record.getMessage(),
			"logger": record.name,
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		line.update(_CONTEXT.get())
		if record.exc_info:
			line["exc_info"] = self.formatException(record.exc_info)
		for key, value in vars(record).items():
			if key not in _RECORD_ATTRS and not key.startswith("_"):
				line[key] = _scrub(key, value)
		return json.dumps(line, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Keep a ``obs_log_sampling_rate_info`` share of INFO lines and every other level."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = settings.obs_log_sampling_rate_info
		return rate >= 1.0 or random.random() < max(rate, 0.0)


def configure_logging() -> logging.Logger:
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root = logging.getLogger()
	root.handlers[:] = [handler]
	root.setLevel(settings.obs_log_level)
	return logging.getLogger("interest_connect")


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or "interest_connect")
