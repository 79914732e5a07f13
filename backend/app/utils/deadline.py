"""Per-request deadline"""
import time
from typing import Optional

from app.exceptions import RequestTimedOut


class Deadline:
    """
    Monotonic deadline shared by every step of one request
    
    Args:
        seconds: Time budget, or None for no limit
    """
    
    def __init__(self, seconds: Optional[float] = None, clock=time.monotonic):
        self._clock = clock
        self._expires_at = None if seconds is None else clock() + seconds
    
    def remaining(self) -> Optional[float]:
        """Seconds left (never negative), or None when unbounded"""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())
    
    @property
    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at
    
    def check(self, operation: str) -> None:
        """Raise RequestTimedOut if the budget is spent before ``operation`` starts"""
        if self.expired:
            raise RequestTimedOut(detail=f"deadline elapsed before {operation}")
    
    @classmethod
    def unbounded(cls) -> "Deadline":
        return cls(None)
