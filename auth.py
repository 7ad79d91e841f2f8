"""Optional HTTP Basic gate in front of the dashboard pages."""

import base64
import binascii
import hmac
import logging
import re

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)

REALM = "PodInsightHQ Staging"

# API routes, health checks and static assets are never gated.
EXEMPT_PATH = re.compile(r"^/(api(/|$)|health$|static/|favicon\.ico$)")


def password_from_header(header: str | None) -> str | None:
    """Return the password from a Basic authorization header, or None if malformed."""
    if not header:
        return None
    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    _, sep, password = decoded.partition(":")
    return password if sep else None


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """Password-only Basic auth; the username is ignored.

    Disabled entirely in development or when no password is configured.
    """

    def __init__(self, app, password: str = "", environment: str = "production"):
        super().__init__(app)
        self.password = password
        self.enabled = bool(password) and environment != "development"
        logger.info("Basic auth gate %s", "enabled" if self.enabled else "disabled")

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self.enabled or EXEMPT_PATH.match(request.url.path):
            return await call_next(request)

        supplied = password_from_header(request.headers.get("authorization"))
        if supplied is not None and hmac.compare_digest(supplied.encode(), self.password.encode()):
            return await call_next(request)

        logger.debug("Rejected unauthenticated request to %s", request.url.path)
        return PlainTextResponse(
            "Authentication required",
            status_code=401,
            headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
        )
