"""Fetch JSON documents through a persistent freshness cache."""
import asyncio
import logging
from typing import Any

from cache_store import CacheStore
from json_transport import JsonTransportBase


class CachedFetcher:
    """
    Wraps a JSON transport with a time-based cache.

    Prevents hammering the API by returning the stored envelope while it is
    fresh (default: 10 minutes) and only going to the network once it is
    stale. A stale envelope is never returned from here; falling back to old
    data is the caller's decision.
    """

    def __init__(
        self,
        transport: JsonTransportBase,
        store: CacheStore,
        cache_ttl_seconds: int = 600,  # 10 minutes default
    ):
        """
        Initialize fetcher.

        Args:
            transport: Transport used for network requests
            store: Cache store holding one envelope per key
            cache_ttl_seconds: How long a stored envelope is served without revalidation
        """
        self.transport = transport
        self.store = store
        self.cache_ttl_seconds = cache_ttl_seconds

    @property
    def ttl_ms(self) -> int:
        return int(self.cache_ttl_seconds * 1000)

    async def get(self, url: str, key: str, force: bool = False) -> Any:
        """
        Get the JSON document for url, using the cached copy under key if still fresh.

        Args:
            url: Endpoint to request
            key: Cache key the result is stored under
            force: Skip the freshness check and always hit the network

        Returns:
            The decoded JSON value (may be cached)

        Raises:
            NetworkError: If the request fails
            ParseError: If the response is not valid JSON
        """
        if not force:
            envelope = await asyncio.to_thread(self.store.read, key)
            if envelope is not None:
                now_ms = self.store.now_ms()
                cache_age = envelope.age_ms(now_ms) / 1000.0
                if envelope.is_fresh(now_ms, self.ttl_ms):
                    logging.debug(f"Using cached '{key}' (age: {cache_age:.1f}s, TTL: {self.cache_ttl_seconds}s)")
                    return envelope.data
                logging.info(f"Cache '{key}' expired (age: {cache_age:.1f}s >= TTL: {self.cache_ttl_seconds}s), fetching new data")
        else:
            logging.info(f"Forced refresh of '{key}', ignoring cache")

        data = await self.transport.get_json(url)
        await asyncio.to_thread(self.store.write, key, data)
        return data
