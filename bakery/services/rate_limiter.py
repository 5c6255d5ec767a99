"""
Fixed-window rate limiter

Counters live in a ``RateLimitStore``. The in-memory store is process-local:
it is lost on restart and not shared between instances. A shared store only
has to implement the same four methods.
"""
import abc
import asyncio
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, NamedTuple, Optional

logger = logging.getLogger(__name__)


class RateLimitEntry(NamedTuple):
    count: int
    reset_time: float  # epoch seconds


class RateLimitConfig(NamedTuple):
    max_requests: int
    window_seconds: int
    identifier: str = "global"


class RateLimitResult(NamedTuple):
    success: bool
    limit: int
    remaining: int
    reset_time: float

    @property
    def reset_at(self) -> datetime:
        return datetime.fromtimestamp(self.reset_time, tz=timezone.utc)


RATE_LIMITS = {
    # 10 orders per hour per user
    "ORDER_CREATION": RateLimitConfig(max_requests=10, window_seconds=3600, identifier="order_creation"),
    # 5 login attempts per 15 minutes per credential
    "LOGIN": RateLimitConfig(max_requests=5, window_seconds=900, identifier="login"),
    # 100 requests per minute
    "GENERAL_API": RateLimitConfig(max_requests=100, window_seconds=60, identifier="general_api"),
}


class RateLimitStore(abc.ABC):
    """Storage for rate limit counters"""
    
    @abc.abstractmethod
    def get(self, key: str) -> Optional[RateLimitEntry]:
        """Current entry for a key, expired or not"""
    
    @abc.abstractmethod
    def increment(self, key: str, reset_time: float) -> RateLimitEntry:
        """
        Count one request in the window ending at ``reset_time``
        
        A stored entry belonging to another window is replaced by a new one
        starting at count 1.
        """
    
    @abc.abstractmethod
    def delete(self, key: str) -> None:
        """Forget a key"""
    
    @abc.abstractmethod
    def sweep(self, now: float) -> int:
        """Delete entries whose window has ended; returns how many"""

    @abc.abstractmethod
    def __len__(self) -> int:
        """Number of stored entries"""


class InMemoryRateLimitStore(RateLimitStore):
    """Dict-backed store for a single process"""
    
    def __init__(self):
        self._entries: Dict[str, RateLimitEntry] = {}
    
    def get(self, key: str) -> Optional[RateLimitEntry]:
        return self._entries.get(key)
    
    def increment(self, key: str, reset_time: float) -> RateLimitEntry:
        entry = self._entries.get(key)
        if entry is None or entry.reset_time != reset_time:
            entry = RateLimitEntry(count=0, reset_time=reset_time)
        entry = entry._replace(count=entry.count + 1)
        self._entries[key] = entry
        return entry
    
    def delete(self, key: str) -> None:
        self._entries.pop(key, None)
    
    def sweep(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if now > entry.reset_time]
        for key in expired:
            del self._entries[key]
        return len(expired)
    
    def __len__(self):
        return len(self._entries)


class RateLimiter:
    """
    Fixed-window counter keyed by ``<config identifier>_<identifier>``
    
    Sync endpoints run in a threadpool and the sweeper runs on the event
    loop, so every store access happens under one lock.
    """
    
    def __init__(self, store: Optional[RateLimitStore] = None, clock: Callable[[], float] = time.time):
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.clock = clock
        self._lock = threading.Lock()
    
    @staticmethod
    def _key(identifier: str, config: RateLimitConfig) -> str:
        return f"{config.identifier or 'global'}_{identifier}"
    
    def check(self, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        """
        Count a request against the limit
        
        Args:
            identifier: Who is being limited (user id, email)
            config: Limit and window
        
        Returns:
            success=False without counting when the window is exhausted
        """
        key = self._key(identifier, config)
        
        with self._lock:
            now = self.clock()
            entry = self.store.get(key)
            if entry is None or now > entry.reset_time:
                entry = RateLimitEntry(count=0, reset_time=now + config.window_seconds)
            
            if entry.count >= config.max_requests:
                return RateLimitResult(
                    success=False,
                    limit=config.max_requests,
                    remaining=0,
                    reset_time=entry.reset_time
                )
            
            entry = self.store.increment(key, entry.reset_time)
        
        return RateLimitResult(
            success=True,
            limit=config.max_requests,
            remaining=config.max_requests - entry.count,
            reset_time=entry.reset_time
        )
    
    def status(self, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        """Current standing without counting a request"""
        with self._lock:
            now = self.clock()
            entry = self.store.get(self._key(identifier, config))
        
        if entry is None or now > entry.reset_time:
            return RateLimitResult(
                success=True,
                limit=config.max_requests,
                remaining=config.max_requests,
                reset_time=now + config.window_seconds
            )
        
        return RateLimitResult(
            success=entry.count < config.max_requests,
            limit=config.max_requests,
            remaining=max(0, config.max_requests - entry.count),
            reset_time=entry.reset_time
        )
    
    def reset(self, identifier: str, config: RateLimitConfig) -> None:
        with self._lock:
            self.store.delete(self._key(identifier, config))
    
    def sweep(self) -> int:
        with self._lock:
            return self.store.sweep(self.clock())
    
    def entry_count(self) -> int:
        with self._lock:
            return len(self.store)


async def run_sweeper(limiter: RateLimiter, interval: float) -> None:
    """Periodically drop expired entries until cancelled"""
    while True:
        await asyncio.sleep(interval)
        try:
            removed = limiter.sweep()
        except Exception:
            logger.exception("Rate limit sweep failed")
            continue
        if removed:
            logger.debug("Rate limit sweep removed %d entries", removed)
