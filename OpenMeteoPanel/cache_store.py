"""Timestamped JSON envelopes kept in a persistent key-value store."""
import json
import logging
import math
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from json_transport import ParseError, ProviderError


class StoreWriteError(ProviderError):
    """Raised by a store backend when a value cannot be persisted (disk full, permissions)."""
    pass


@dataclass
class CacheEnvelope:
    """A cached payload tagged with the time it was stored."""
    ts: int  # epoch milliseconds
    data: Any

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.ts

    def is_fresh(self, now_ms: int, ttl_ms: int) -> bool:
        """Fresh while strictly younger than the TTL."""
        return self.age_ms(now_ms) < ttl_ms


def _discard(path: str) -> None:
    """Remove a leftover temp file; the write error is what gets reported."""
    try:
        os.remove(path)
    except OSError:
        pass


class KeyValueStore(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text for key, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store text under key, overwriting any previous value.

        Raises:
            StoreWriteError: If the value cannot be persisted
        """
        pass


class FileKeyValueStore(KeyValueStore):
    """Store backed by one JSON file per key inside a cache directory."""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logging.warning(f"Could not read cache file {path}: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = f"{path}.tmp"
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError as e:
            _discard(tmp_path)
            raise StoreWriteError(f"Could not write cache file {path}: {e}") from e


class MemoryKeyValueStore(KeyValueStore):
    """
    In-memory store for tests and development.

    Set fail_writes to simulate a full or read-only store.
    """

    def __init__(self, fail_writes: bool = False):
        self.fail_writes = fail_writes
        self._values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StoreWriteError(f"Store full, cannot write {key}")
        self._values[key] = value


class CacheStore:
    """Reads and writes cache envelopes on top of a key-value store."""

    def __init__(self, backend: KeyValueStore, clock: Callable[[], float] = time.time):
        """
        Args:
            backend: Where envelopes are persisted
            clock: Returns the current time in seconds since the epoch
        """
        self.backend = backend
        self.clock = clock

    def now_ms(self) -> int:
        return int(self.clock() * 1000)

    def read(self, key: str) -> Optional[CacheEnvelope]:
        """
        Look up the envelope stored under key.

        Returns None when the key is absent or its contents cannot be decoded.
        """
        raw = self.backend.get(key)
        if raw is None:
            return None
        try:
            return self._decode(raw)
        except ParseError as e:
            logging.warning(f"Ignoring unreadable cache entry '{key}': {e}")
            return None

    def write(self, key: str, data: Any) -> Optional[StoreWriteError]:
        """
        Store data under key with the current timestamp.

        Writing is best-effort: a failure is logged and returned, never raised.
        """
        envelope = {"ts": self.now_ms(), "data": data}
        try:
            self.backend.set(key, json.dumps(envelope, ensure_ascii=False))
        except StoreWriteError as e:
            logging.warning(f"Cache write for '{key}' failed: {e}")
            return e
        logging.debug(f"Cached '{key}' at ts={envelope['ts']}")
        return None

    @staticmethod
    def _decode(raw: str) -> CacheEnvelope:
        try:
            parsed = json.loads(raw)
        except ValueError as e:
            raise ParseError(f"Invalid JSON: {e}") from e
        if not isinstance(parsed, dict) or "data" not in parsed:
            raise ParseError("Envelope is missing 'data'")
        ts = parsed.get("ts") or 0
        if isinstance(ts, bool) or not isinstance(ts, (int, float)) or not math.isfinite(ts):
            raise ParseError(f"Envelope has invalid 'ts': {ts!r}")
        return CacheEnvelope(ts=int(ts), data=parsed["data"])
