"""In-memory per-IP rate limiting for the API."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, Tuple

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from ..config import settings

# Login, password reset and OTP endpoints share a tighter budget
SENSITIVE_PREFIXES = ("/api/auth", "/api/otp")


@dataclass
class _RateLimitState:
    window_start: float
    count: int = 0


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window counter per client address. Every ``/api`` route draws from
    the general budget; the sensitive prefixes also count against their own,
    smaller one.
    """

    def __init__(self, app, path_prefix: str = "/api") -> None:
        super().__init__(app)
        self._path_prefix = path_prefix
        self._states: Dict[Tuple[str, str], _RateLimitState] = {}
        self._window = settings.RATE_LIMIT_PERIOD_SECONDS
        self._limit = settings.RATE_LIMIT_REQUESTS
        self._sensitive_limit = settings.AUTH_RATE_LIMIT_REQUESTS

    def _hit(self, key: Tuple[str, str], now: float) -> int:
        state = self._states.get(key)
        if state is None or now - state.window_start >= self._window:
            state = _RateLimitState(window_start=now)
            self._states[key] = state
        state.count += 1
        return state.count

    def _too_many(self) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={"error": "Trop de requêtes, veuillez réessayer plus tard."},
            headers={"Retry-After": str(self._window)},
        )

    async def dispatch(self, request: Request, call_next):
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        path = request.url.path
        if not path.startswith(self._path_prefix):
            return await call_next(request)

        client_host = request.client.host if request.client else "unknown"
        now = time.time()

        if self._hit((client_host, self._path_prefix), now) > self._limit:
            return self._too_many()

        sensitive = next((prefix for prefix in SENSITIVE_PREFIXES if path.startswith(prefix)), None)
        if sensitive and self._hit((client_host, sensitive), now) > self._sensitive_limit:
            return self._too_many()

        return await call_next(request)
