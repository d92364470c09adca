# utils/cache.py
"""
Analysis cache: in-process TTL map or Redis.

Both backends expose the same methods:
  get(key) -> value or None, set(key, value, ttl=None), delete(key)

Values are JSON-serializable dicts. Expired entries are treated as absent.
Backend errors never propagate: a failing cache behaves as an always-miss.
"""
import json
import logging
import threading
import time

import redis

from .config import Config

logger = logging.getLogger("utils.cache")


class MemoryCache:
    """Thread-safe dict cache with per-entry expiry."""

    def __init__(self, ttl=300, clock=time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expiry, value = entry
            if self._clock() >= expiry:
                # expired -> evict
                del self._entries[key]
                return None
            return value

    def set(self, key, value, ttl=None):
        ttl = self.ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)

    def delete(self, key):
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self):
        return len(self._entries)


class RedisCache:
    """
    Redis-backed cache. Values are stored as JSON with SETEX so Redis handles expiry.
    """

    def __init__(self, client, ttl=300, prefix="analysis:"):
        self.r = client
        self.ttl = ttl
        self.prefix = prefix

    def _key(self, key):
        return f"{self.prefix}{key}"

    def get(self, key):
        try:
            val = self.r.get(self._key(key))
        except redis.RedisError as e:
            logger.warning("Redis get failed for %s: %s", key, e)
            return None
        if not val:
            return None
        try:
            return json.loads(val)
        except ValueError:
            logger.warning("Discarding undecodable cache entry for %s", key)
            return None

    def set(self, key, value, ttl=None):
        ttl = self.ttl if ttl is None else ttl
        try:
            self.r.setex(self._key(key), int(ttl), json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.warning("Redis set failed for %s: %s", key, e)

    def delete(self, key):
        try:
            self.r.delete(self._key(key))
        except redis.RedisError as e:
            logger.warning("Redis delete failed for %s: %s", key, e)


def build_cache(backend=None, ttl=None):
    """
    Pick the cache backend once, at startup. An unreachable Redis falls back
    to the in-process cache (logged) instead of failing every request later.
    """
    backend = (backend or Config.CACHE_BACKEND).lower()
    ttl = Config.CACHE_TTL_SECONDS if ttl is None else ttl
    if backend == "memory":
        return MemoryCache(ttl=ttl)
    if backend != "redis":
        raise ValueError(f"Unknown cache backend: {backend}")

    client = redis.Redis(host=Config.REDIS_HOST or "127.0.0.1", port=Config.REDIS_PORT,
                         db=Config.REDIS_DB, socket_connect_timeout=2, socket_timeout=2)
    try:
        client.ping()
    except redis.RedisError as e:
        logger.warning("Redis unavailable (%s); using in-process cache", e)
        return MemoryCache(ttl=ttl)
    logger.info("Connected to Redis at %s:%s", Config.REDIS_HOST, Config.REDIS_PORT)
    return RedisCache(client, ttl=ttl)
