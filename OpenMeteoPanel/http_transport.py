"""requests-based JSON transport."""
import asyncio
import logging
from typing import Any

import requests

from json_transport import JsonTransportBase, NetworkError, ParseError


class RequestsTransport(JsonTransportBase):
    """
    JSON transport using requests.

    The blocking request runs in a worker thread so the event loop stays
    free while waiting on the network.
    """

    NO_CACHE_HEADERS = {
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
    }

    def __init__(self, timeout: int = 10):
        """
        Initialize transport.

        Args:
            timeout: HTTP request timeout in seconds
        """
        self.timeout = timeout

    async def get_json(self, url: str) -> Any:
        return await asyncio.to_thread(self._get_json_blocking, url)

    def _get_json_blocking(self, url: str) -> Any:
        try:
            logging.info(f"Making request: {url}")
            response = requests.get(url, headers=self.NO_CACHE_HEADERS, timeout=self.timeout)
            logging.info(f"API response status: {response.status_code}")
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise NetworkError(f"Network error: {str(e)}")

        if not response.ok:
            logging.error(f"API request failed with status {response.status_code}")
            raise NetworkError(
                f"Network {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Failed to parse API response: {e}")
            raise ParseError(f"Failed to parse response: {str(e)}")

        logging.debug(f"API response (truncated): {str(data)[:500]}...")
        return data
