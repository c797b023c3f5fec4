"""Enforcer that remembers earlier decisions."""

from __future__ import annotations

import threading
from typing import Any

from accessgate.management import Enforcer


class CachedEnforcer(Enforcer):
    """Enforcer that caches decisions for requests made only of strings.

    Cached decisions are kept until :meth:`invalidate_cache` is called, even
    if the policy changes in the meantime.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._cache: dict[str, bool] = {}
        self._cache_enabled = True
        self._cache_lock = threading.RLock()

    def enable_cache(self, enable_cache: bool) -> None:
        """Turn the decision cache on or off."""
        self._cache_enabled = enable_cache

    def enforce(self, *rvals: Any) -> bool:
        """Decide a request, using a cached decision where there is one."""
        if not self._cache_enabled or not all(isinstance(v, str) for v in rvals):
            return super().enforce(*rvals)

        key = "".join(f"{value}$$" for value in rvals)
        with self._cache_lock:
            if key in self._cache:
                return self._cache[key]

        decision = super().enforce(*rvals)
        with self._cache_lock:
            self._cache[key] = decision
        return decision

    def invalidate_cache(self) -> None:
        """Forget every cached decision."""
        with self._cache_lock:
            self._cache = {}