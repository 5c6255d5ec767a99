"""
Per-user cache of rendered order-history views
"""
import time
from typing import Any, Callable, Dict, Optional, Tuple


class ViewCache:
    """TTL cache keyed by user id; writes to a user's orders invalidate it"""
    
    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
    
    def get(self, key: str) -> Optional[Any]:
        cached = self._entries.get(key)
        if cached is None:
            return None
        expires_at, value = cached
        if self.clock() >= expires_at:
            del self._entries[key]
            return None
        return value
    
    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self.clock() + self.ttl, value)
    
    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)
    
    def clear(self) -> None:
        self._entries.clear()
