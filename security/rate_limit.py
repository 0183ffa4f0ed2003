import math
import threading
import time
from typing import Callable, Dict, List, Tuple

from flask import current_app


class PaymentAttemptLimiter:
    """
    Rolling window limiter for checkout attempts, keyed by user id.

    Lives in process memory, so it is advisory only: it slows down a user
    double-clicking "Pay" but is not a security boundary. Swap it for a
    shared store before relying on it across workers.
    """

    def __init__(self, max_attempts: int = 3, window_seconds: int = 300,
                 clock: Callable[[], float] = time.monotonic):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._attempts: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def check(self, key: str) -> Tuple[bool, int]:
        """
        Records an attempt if allowed.
        Returns (allowed, retry_after_seconds).
        """
        now = self._clock()
        with self._lock:
            recent = [t for t in self._attempts.get(key, []) if now - t < self.window_seconds]

            if len(recent) >= self.max_attempts:
                self._attempts[key] = recent
                retry_after = math.ceil(self.window_seconds - (now - recent[0]))
                return False, max(retry_after, 1)

            recent.append(now)
            self._attempts[key] = recent
            return True, 0

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)


def init_rate_limiter(app) -> PaymentAttemptLimiter:
    limiter = app.extensions.get("payment_rate_limiter")
    if limiter is None:
        limiter = PaymentAttemptLimiter(
            max_attempts=app.config.get("PAYMENT_RATE_MAX_ATTEMPTS", 3),
            window_seconds=app.config.get("PAYMENT_RATE_WINDOW_SECONDS", 300),
        )
        app.extensions["payment_rate_limiter"] = limiter
    return limiter


def get_rate_limiter() -> PaymentAttemptLimiter:
    return current_app.extensions["payment_rate_limiter"]
