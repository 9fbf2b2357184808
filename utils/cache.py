import threading
import time


class NullCache:
    """Cache that never stores anything."""

    def get(self, key):
        return None

    def set(self, key, value):
        pass

    def invalidate(self, key=None):
        pass


class TTLCache:
    """In-process cache whose entries expire ``ttl`` seconds after being set."""

    def __init__(self, ttl=60, clock=time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl:
                del self._entries[key]
                return None
            return value

    def set(self, key, value):
        with self._lock:
            self._entries[key] = (value, self._clock())

    def invalidate(self, key=None):
        with self._lock:
            if key is None:
                self._entries.clear()
            elif callable(key):
                for k in [k for k in self._entries if key(k)]:
                    del self._entries[k]
            else:
                self._entries.pop(key, None)


def build_cache(ttl):
    if not ttl or ttl <= 0:
        return NullCache()
    return TTLCache(ttl=ttl)
