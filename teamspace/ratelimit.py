"""Fixed-window, per-client rate limiting for the REST API."""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from fastapi import status
from starlette.types import ASGIApp, Receive, Scope, Send

from teamspace.errors import error_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    name: str
    prefixes: Tuple[str, ...]
    max_requests: int
    window_seconds: int
    message: str

    def applies_to(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.prefixes)


class FixedWindowCounter:
    """Counts hits per key inside windows aligned to ``window_seconds``.

    Only the current window of each rule is kept; counts from a finished
    window are dropped as soon as that rule rolls over.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._current: Dict[str, int] = {}
        self._counts: Dict[str, Dict[str, int]] = {}

    def hit(self, rule: RateLimitRule, key: str) -> bool:
        """Record one request; False once ``key`` has exhausted the window."""
        window = int(self.clock() // rule.window_seconds)
        if self._current.get(rule.name) != window:
            self._current[rule.name] = window
            self._counts[rule.name] = {}

        counts = self._counts[rule.name]
        counts[key] = counts.get(key, 0) + 1
        return counts[key] <= rule.max_requests

    def tracked(self, rule: RateLimitRule) -> int:
        return len(self._counts.get(rule.name, {}))

    def reset(self) -> None:
        self._current.clear()
        self._counts.clear()


class RateLimitMiddleware:
    """Reject requests over any matching rule with a 429 envelope.

    Rules are checked in order; the first exhausted rule answers.
    """

    def __init__(self, app: ASGIApp, rules: Sequence[RateLimitRule], counter: Optional[FixedWindowCounter] = None):
        self.app = app
        self.rules = list(rules)
        self.counter = counter or FixedWindowCounter()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        client = scope.get("client")
        key = client[0] if client else "unknown"

        for rule in self.rules:
            if rule.applies_to(path) and not self.counter.hit(rule, key):
                logger.warning("Rate limit %s exceeded by %s on %s", rule.name, key, path)
                response = error_response(status.HTTP_429_TOO_MANY_REQUESTS, rule.message)
                await response(scope, receive, send)
                return

        await self.app(scope, receive, send)


def default_rules(settings) -> Sequence[RateLimitRule]:
    return [
        RateLimitRule(
            name="auth",
            prefixes=("/api/auth/login", "/api/auth/register"),
            max_requests=settings.AUTH_RATE_LIMIT_MAX,
            window_seconds=settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
            message="Too many login attempts, please try again later.",
        ),
        RateLimitRule(
            name="api",
            prefixes=("/api/",),
            max_requests=settings.RATE_LIMIT_MAX,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
            message="Too many requests, please try again later.",
        ),
    ]
