"""JSON transport abstraction - allows swapping the HTTP backend in tests."""
from abc import ABC, abstractmethod
from typing import Any, Optional


class JsonTransportBase(ABC):
    """Abstract base class for fetching JSON documents over the network."""

    @abstractmethod
    async def get_json(self, url: str) -> Any:
        """
        Fetch and decode a JSON document, bypassing any intermediate cache.

        Returns:
            The decoded JSON value

        Raises:
            NetworkError: If the request fails or returns a non-success status
            ParseError: If the body is not valid JSON
        """
        pass


class ProviderError(Exception):
    """Base exception for failures while fetching panel data."""
    pass


class NetworkError(ProviderError):
    """Raised when a request fails or the server answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(ProviderError):
    """Raised when a response body or stored envelope cannot be decoded."""
    pass
