"""Key-value cache used for admin sessions, login counters and site config."""

from __future__ import annotations

import threading
import time
from typing import Protocol

import redis
from flask import current_app


def now() -> float:
    """Unix time in seconds; the single clock for TTL bookkeeping."""
    return time.time()


class KeyValueBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str, *, ttl: int | None = None, expire_at: float | None = None) -> None: ...

    def delete(self, key: str) -> None: ...


class RedisBackend:
    """Backend for ``redis://`` URLs."""

    def __init__(self, url: str):
        self.client = redis.from_url(url, decode_responses=True)

    def get(self, key: str) -> str | None:
        return self.client.get(key)

    def put(self, key: str, value: str, *, ttl: int | None = None, expire_at: float | None = None) -> None:
        if expire_at is not None:
            self.client.set(key, value, exat=int(expire_at))
        elif ttl is not None:
            self.client.set(key, value, ex=ttl)
        else:
            self.client.set(key, value)

    def delete(self, key: str) -> None:
        self.client.delete(key)


class MemoryBackend:
    """Process-local backend for ``memory://`` (development and tests)."""

    def __init__(self):
        self._items: dict[str, tuple[str, float | None]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            value, expires = item
            if expires is not None and now() >= expires:
                del self._items[key]
                return None
            return value

    def put(self, key: str, value: str, *, ttl: int | None = None, expire_at: float | None = None) -> None:
        if expire_at is None and ttl is not None:
            expire_at = now() + ttl
        with self._lock:
            self._items[key] = (value, expire_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


def create_backend(url: str) -> KeyValueBackend:
    if url.startswith('memory://'):
        return MemoryBackend()
    if url.startswith(('redis://', 'rediss://', 'unix://')):
        return RedisBackend(url)
    raise ValueError(f"Unsupported KV_URL scheme: {url.split('://', 1)[0]}")


class KeyValueStore:
    """Flask extension exposing the configured backend for the current app."""

    def init_app(self, app) -> None:
        app.extensions['kv'] = create_backend(app.config.get('KV_URL', 'memory://'))

    @property
    def backend(self) -> KeyValueBackend:
        return current_app.extensions['kv']

    def get(self, key: str) -> str | None:
        return self.backend.get(key)

    def put(self, key: str, value: str, *, ttl: int | None = None, expire_at: float | None = None) -> None:
        self.backend.put(key, value, ttl=ttl, expire_at=expire_at)

    def delete(self, key: str) -> None:
        self.backend.delete(key)


__all__ = ['KeyValueStore', 'RedisBackend', 'MemoryBackend', 'create_backend', 'now']
