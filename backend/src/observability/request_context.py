"""Per-request correlation context.

The request id lives in a ContextVar so it follows the request across awaits
and into threadpool-executed sync endpoints, and is reset when the request
finishes so ids never leak between requests handled by the same worker.
"""

import re
import uuid
from contextvars import ContextVar, Token
from typing import Optional

NO_REQUEST_ID = "no-request-id"

# Incoming X-Request-ID values are echoed into logs and headers
_ACCEPTED_REQUEST_ID = re.compile(r'^[A-Za-z0-9._-]{1,128}$')

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def new_request_id() -> str:
    return str(uuid.uuid4())


def accept_request_id(candidate: Optional[str]) -> str:
    """Reuse a caller-supplied request id if it is safe, else mint one."""
    if candidate and _ACCEPTED_REQUEST_ID.match(candidate):
        return candidate
    return new_request_id()


def get_request_id() -> str:
    return request_id_var.get() or NO_REQUEST_ID


def bind_request_id(request_id: str) -> Token:
    """Bind a request id to the current context.

    Returns:
        Token: Pass to reset_request_id() when the request ends
    """
    return request_id_var.set(request_id)


def reset_request_id(token: Token) -> None:
    request_id_var.reset(token)
