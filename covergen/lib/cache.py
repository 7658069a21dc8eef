# covergen/lib/cache.py
from __future__ import annotations

import hashlib
import json
import re
import sys
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from covergen.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class CachePreset:
    name: str
    ttl: int            # seconds
    max_size: int


CACHE_PRESETS: Dict[str, CachePreset] = {
    "ai_responses": CachePreset("ai_responses", ttl=3600, max_size=500),
    "images": CachePreset("images", ttl=1800, max_size=100),
    "templates": CachePreset("templates", ttl=86400, max_size=1000),
    "api": CachePreset("api", ttl=300, max_size=200),
}


class MemoryCache:
    """
    Process-local key/value store with per-entry TTL.

    Entries expire lazily: an expired entry is dropped when it is read and the
    read counts as a miss. `max_size` is advisory (reported in stats) and never
    evicts live entries.
    """

    def __init__(self, default_ttl: int = 3600, max_size: int = 1000, name: str = "default"):
        self.name = name
        self.default_ttl = default_ttl
        self.max_size = max_size
        self._store: Dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _expired(self, expires_at: float, now: Optional[float] = None) -> bool:
        return expires_at <= (now if now is not None else time.monotonic())

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            value, expires_at = entry
            if self._expired(expires_at):
                del self._store[key]
                self._evictions += 1
                self._misses += 1
                return None
            self._hits += 1
            return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        seconds = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._store[key] = (value, time.monotonic() + seconds)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False
            if self._expired(entry[1]):
                del self._store[key]
                self._evictions += 1
                return False
            return True

    def keys(self, pattern: Optional[str] = None) -> List[str]:
        now = time.monotonic()
        with self._lock:
            live = [k for k, (_, exp) in self._store.items() if not self._expired(exp, now)]
        if not pattern:
            return live
        rx = re.compile("^" + ".*".join(re.escape(p) for p in pattern.split("*")) + "$")
        return [k for k in live if rx.match(k)]

    def _memory_usage(self) -> int:
        total = 0
        for k, (v, _) in self._store.items():
            total += sys.getsizeof(k)
            try:
                total += len(json.dumps(v, default=str))
            except (TypeError, ValueError):
                total += sys.getsizeof(v)
        return total

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "hits": self._hits,
                "misses": self._misses,
                "entries": len(self._store),
                "hit_rate": (self._hits / lookups) if lookups else 0.0,
                "memory_usage": self._memory_usage(),
                "evictions": self._evictions,
                "max_size": self.max_size,
            }


class CacheKeyGenerator:
    @staticmethod
    def generate(params: Any, prefix: str = "cache", version: str = "v1", hashed: bool = True) -> str:
        payload = json.dumps(params, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
        body = hashlib.md5(payload.encode("utf-8")).hexdigest() if hashed else payload
        return f"{prefix}:{version}:{body}"

    @staticmethod
    def image_generation(provider: str, title: str, style: str, dimensions: Dict[str, int]) -> str:
        return CacheKeyGenerator.generate(
            {"provider": provider, "title": title, "style": style, "dimensions": dimensions},
            prefix="img",
        )

    @staticmethod
    def ai_response(kind: str, params: Dict[str, Any]) -> str:
        return CacheKeyGenerator.generate(params, prefix=f"ai:{kind}")

    @staticmethod
    def template(template_id: str) -> str:
        return f"template:v1:{template_id}"


class CacheFactory:
    _instances: Dict[str, MemoryCache] = {}
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls, preset: str | CachePreset) -> MemoryCache:
        p = CACHE_PRESETS[preset] if isinstance(preset, str) else preset
        with cls._lock:
            cache = cls._instances.get(p.name)
            if cache is None:
                cache = MemoryCache(default_ttl=p.ttl, max_size=p.max_size, name=p.name)
                cls._instances[p.name] = cache
                log.debug(f"created cache {p.name} ttl={p.ttl}s max={p.max_size}")
            return cache

    @classmethod
    def all(cls) -> Dict[str, MemoryCache]:
        for name in CACHE_PRESETS:
            cls.get_instance(name)
        return dict(cls._instances)

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            for cache in cls._instances.values():
                cache.clear()


