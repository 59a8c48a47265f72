"""
Fixed-window rate limiter for quiz submissions.

The store is pluggable; the default keeps counters in process memory, which
is enough for a single instance. A shared store (e.g. Redis) can be swapped
in with set_rate_limit_store().
"""
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Protocol, Tuple

from fastapi import HTTPException, Request

from leadflow.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float


class RateLimitStore(Protocol):
    def get(self, key: str) -> Optional[RateLimitEntry]: ...

    def set(self, key: str, entry: RateLimitEntry) -> None: ...

    def delete(self, key: str) -> None: ...

    def entries(self) -> Iterator[Tuple[str, RateLimitEntry]]: ...


class MemoryStore:
    def __init__(self):
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[RateLimitEntry]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def entries(self) -> Iterator[Tuple[str, RateLimitEntry]]:
        with self._lock:
            snapshot = list(self._entries.items())
        return iter(snapshot)


_store: RateLimitStore = MemoryStore()
_next_purge_at = 0.0
_purge_lock = threading.Lock()


def set_rate_limit_store(store: RateLimitStore) -> None:
    global _store, _next_purge_at
    _store = store
    _next_purge_at = 0.0


def get_rate_limit_store() -> RateLimitStore:
    return _store


def reset_rate_limits() -> None:
    """Forget every window and the purge schedule."""
    set_rate_limit_store(MemoryStore())


def purge_expired(now: Optional[float] = None) -> int:
    """Drop expired windows. Returns how many were removed."""
    now = time.time() if now is None else now
    expired = [key for key, entry in _store.entries() if entry.reset_at < now]
    for key in expired:
        _store.delete(key)
    return len(expired)


def _purge_if_due(now: float, window_seconds: float) -> None:
    """Sweep expired windows at most once per window."""
    global _next_purge_at
    with _purge_lock:
        if now < _next_purge_at:
            return
        _next_purge_at = now + window_seconds
    removed = purge_expired(now)
    if removed:
        logger.debug("Purged %d expired rate-limit windows", removed)


def check_rate_limit(
    identifier: str,
    max_requests: Optional[int] = None,
    window_seconds: Optional[float] = None,
    now: Optional[float] = None,
) -> RateLimitResult:
    max_requests = settings.RATE_LIMIT_MAX_REQUESTS if max_requests is None else max_requests
    window_seconds = settings.RATE_LIMIT_WINDOW_SECONDS if window_seconds is None else window_seconds
    now = time.time() if now is None else now

    _purge_if_due(now, window_seconds)
    entry = _store.get(identifier)
    if entry is None or entry.reset_at < now:
        reset_at = now + window_seconds
        _store.set(identifier, RateLimitEntry(count=1, reset_at=reset_at))
        return RateLimitResult(allowed=True, remaining=max_requests - 1, reset_at=reset_at)

    if entry.count >= max_requests:
        return RateLimitResult(allowed=False, remaining=0, reset_at=entry.reset_at)

    entry.count += 1
    _store.set(identifier, entry)
    return RateLimitResult(allowed=True, remaining=max_requests - entry.count, reset_at=entry.reset_at)


def client_identifier(request: Request) -> str:
    """First X-Forwarded-For hop, else X-Real-IP, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_quiz_rate_limit(request: Request) -> None:
    """Dependency: 429 once a client exceeds the submission quota for the window."""
    result = check_rate_limit(f"quiz:{client_identifier(request)}")
    if not result.allowed:
        minutes = max(1, math.ceil((result.reset_at - time.time()) / 60))
        raise HTTPException(
            status_code=429,
            detail=f"Too many submissions. Please try again in {minutes} minutes.",
        )
