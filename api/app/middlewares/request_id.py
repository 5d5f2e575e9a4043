import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Context variable used by log filter to inject request id
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Client supplied ids are echoed back, so only accept short printable tokens.
_VALID_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def incoming_id(request: Request) -> str:
    """Return the client's ``X-Request-ID`` when well formed, else a new id."""
    candidate = request.headers.get("X-Request-ID", "")
    if _VALID_ID.match(candidate):
        return candidate
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Ensure every request carries a request id."""

    async def dispatch(self, request: Request, call_next):
        req_id = incoming_id(request)
        token = request_id_ctx.set(req_id)
        request.state.request_id = req_id
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = req_id
        return response
