"""Shared fixtures: a controllable clock, in-memory cache and a counting transport."""
import pytest

from cache_store import CacheStore, MemoryKeyValueStore
from fetch_cache import CachedFetcher
from json_transport import JsonTransportBase, NetworkError
from page import Page
from panel_config import PanelConfig
from updater import WeatherUpdater

START_TIME = 1_700_000_000.0


class FakeClock:
    """Clock whose time only moves when told to."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MockTransport(JsonTransportBase):
    """Mock transport returning canned responses per URL and counting calls."""

    def __init__(self, responses=None, raise_error=None):
        self.responses = responses or {}
        self.raise_error = raise_error
        self.call_count = 0
        self.urls = []

    async def get_json(self, url):
        self.call_count += 1
        self.urls.append(url)
        if self.raise_error:
            raise self.raise_error
        for fragment, response in self.responses.items():
            if fragment in url:
                if isinstance(response, Exception):
                    raise response
                return response
        raise NetworkError(f"Network 404: no canned response for {url}", status_code=404)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemoryKeyValueStore()


@pytest.fixture
def store(backend, clock):
    return CacheStore(backend, clock=clock)


@pytest.fixture
def config():
    return PanelConfig(locale="en")


@pytest.fixture
def make_transport():
    """Factory for counting mock transports."""
    return MockTransport


@pytest.fixture
def make_updater(store, config):
    """Build an updater around a transport, page and the shared store."""
    def _make(transport, page=None, cache_ttl_seconds=600):
        fetcher = CachedFetcher(transport, store, cache_ttl_seconds=cache_ttl_seconds)
        return WeatherUpdater(fetcher, page or Page(), config)
    return _make
