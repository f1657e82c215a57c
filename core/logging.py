"""
Request-id correlation for log records.

`RequestInfoMiddleware` binds the id of the request being served with
`bind_request_id()` and releases it with `reset_request_id()`; anything that
logs in between (views, audit service, health checks) gets the same id in
`%(request_id)s` through `RequestIDFilter`, which is attached to the console
handler in `LOGGING`. Outside a request the id is `"-"`.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar, Token

NO_REQUEST_ID = "-"

request_id_var: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)


def bind_request_id(request_id: str) -> Token:
    return request_id_var.set(request_id)


def reset_request_id(token: Token) -> None:
    request_id_var.reset(token)


def current_request_id() -> str:
    return request_id_var.get()


class RequestIDFilter(logging.Filter):
    """Adds `record.request_id` unless the caller passed one via `extra=`."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = current_request_id()
        return True
