import logging
from typing import Iterable, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


logger = logging.getLogger(__name__)


class OriginGuard:
    """Decides whether a request's Origin header may receive cross-origin responses."""

    def __init__(self, allowed_origins: Iterable[str]):
        self.allowed_origins = frozenset(allowed_origins)

    def is_allowed(self, origin: Optional[str]) -> bool:
        # No Origin means a same-origin or non-browser caller.
        if not origin:
            return True
        return origin in self.allowed_origins


class OriginGuardMiddleware(BaseHTTPMiddleware):
    """Refuse requests from origins outside the allow-list before any handler runs."""

    def __init__(self, app, guard: OriginGuard):
        super().__init__(app)
        self.guard = guard

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        if not self.guard.is_allowed(origin):
            logger.warning("Rejected request from disallowed origin %s", origin)
            return JSONResponse(status_code=403, content={"detail": f"Not allowed by CORS: {origin}"})
        return await call_next(request)
