"""
Simple Memory-based Rate Limiter for order creation.
Per-process only; a multi-worker deployment gets one window per worker.
"""
import threading
import time
from fastapi import Request, HTTPException
from typing import Dict, Tuple

# In-memory storage: {ip: (window_start, count)}
_rate_limit_store: Dict[str, Tuple[float, int]] = {}
_lock = threading.Lock()


def reset_rate_limits():
    with _lock:
        _rate_limit_store.clear()


def _evict_expired(now: float, window: int):
    """Drop clients whose window has lapsed. Caller holds _lock."""
    expired = [ip for ip, (start, _) in _rate_limit_store.items() if now - start > window]
    for ip in expired:
        del _rate_limit_store[ip]


def rate_limit(requests: int, window: int):
    """
    Dependency for rate limiting.
    Example: Depends(rate_limit(requests=5, window=60))
    """
    def limiter(request: Request):
        ip = request.client.host if request.client else "unknown"
        now = time.time()

        with _lock:
            _evict_expired(now, window)

            if ip not in _rate_limit_store:
                _rate_limit_store[ip] = (now, 1)
                return True

            last_ts, count = _rate_limit_store[ip]

            if count >= requests:
                raise HTTPException(
                    status_code=429,
                    detail=f"Rate limit exceeded. Try again in {int(window - (now - last_ts))} seconds."
                )

            _rate_limit_store[ip] = (last_ts, count + 1)
            return True

    return limiter
