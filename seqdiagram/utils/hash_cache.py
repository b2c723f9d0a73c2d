"""Content-addressed cache with bounded size and per-entry TTL.

Eviction follows insertion/update order rather than read order: the entry that
was written longest ago is dropped first once the cache is full.
"""
from __future__ import annotations

import hashlib
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from seqdiagram.schemas import Theme

T = TypeVar("T")

RENDER_KEY_SEPARATOR = "|"


def content_fingerprint(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def validation_cache_key(text: str) -> str:
    """Key for validation results; the raw, untrimmed text is hashed."""
    return content_fingerprint(text)


def render_cache_key(text: str, theme: Theme | str) -> str:
    """Key for rendered artifacts.

    Hex digests never contain the separator and theme identifiers come from a
    fixed set, so two different (text, theme) pairs cannot produce the same key.
    """
    theme_id = theme.value if isinstance(theme, Theme) else str(theme)
    return f"{content_fingerprint(text)}{RENDER_KEY_SEPARATOR}{theme_id}"


@dataclass
class CacheEntry(Generic[T]):
    key: str
    value: T
    created_at: float


class HashCache(Generic[T]):
    def __init__(
        self,
        max_size: int = 1000,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[T]] = OrderedDict()

    def _expired(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.created_at > self.ttl_seconds

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: T) -> None:
        if key in self._entries:
            # an update never evicts another entry
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
        self._entries[key] = CacheEntry(key=key, value=value, created_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def cleanup(self) -> int:
        """Drop expired entries. Returns how many entries were removed."""
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if self._expired(entry, now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not self._expired(entry, self._clock())
