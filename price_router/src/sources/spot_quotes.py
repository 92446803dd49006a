"""Index-based batch feeds: on-chain contract and HTTP mirror.

Both adapters return the raw quote batch unchanged; bounds checking and
decimal normalization belong to the engine.

The HTTP mirror expects a JSON body of the form::

    {"quotes": [250000000000, "6500000000000", 0, ...]}

where each quote is a non-negative integer or a decimal string of one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from web3.exceptions import Web3Exception

from ..errors import SourceError, SourceHTTPError
from .base import IndexBasedSource

if TYPE_CHECKING:
    from web3.contract import Contract

logger = logging.getLogger(__name__)


def _parse_quote(value: object) -> int:
    """Convert one raw quote to an unsigned integer.

    :param value: Quote as delivered by the upstream.
    :returns: Quote as int.
    :raises SourceError: If the value is not a non-negative integer.
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise SourceError(f"Quote {value!r} is not an integer")
    try:
        quote = int(value)
    except ValueError as e:
        raise SourceError(f"Quote {value!r} is not an integer") from e
    if quote < 0:
        raise SourceError(f"Quote {value!r} is negative")
    return quote


class SpotQuoteContractSource(IndexBasedSource):
    """Index-based source backed by an on-chain ``getSpotQuotes()`` contract.

    :ivar contract: web3 contract bound to the SpotQuoteFeed ABI.
    """

    def __init__(self, contract: Contract) -> None:
        self.contract = contract

    def get_spot_quotes(self) -> list[int]:
        try:
            raw = self.contract.functions.getSpotQuotes().call()
        except (Web3Exception, ValueError, OSError) as e:
            raise SourceError(
                f"getSpotQuotes() failed on {self.contract.address}: {e}"
            ) from e

        quotes = [_parse_quote(q) for q in raw]
        logger.debug(f"[{self.contract.address}] {len(quotes)} spot quotes")
        return quotes


class HttpSpotQuoteSource(IndexBasedSource):
    """Index-based source served by an HTTP endpoint.

    :ivar url: Endpoint returning the quote batch.
    :ivar timeout: Request timeout in seconds.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        url: str,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP source.

        :param url: Endpoint URL.
        :param timeout: Request timeout in seconds (default: 10).
        :param transport: Optional httpx transport override.
        """
        self.url = url
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.transport = transport

    def get_spot_quotes(self) -> list[int]:
        with httpx.Client(
            transport=self.transport,
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            follow_redirects=True,
        ) as client:
            try:
                response = client.get(self.url)
            except httpx.TimeoutException as e:
                raise SourceError(f"Request timeout: {e}") from e
            except httpx.RequestError as e:
                raise SourceError(f"Request failed: {e}") from e

        if not response.is_success:
            logger.debug(
                "HTTP GET %s failed with status %s: %s",
                self.url,
                response.status_code,
                response.text[:200],
            )
            raise SourceHTTPError(response.status_code, response.text[:200])

        try:
            raw = response.json()["quotes"]
        except (KeyError, TypeError, ValueError) as e:
            raise SourceError(f"Malformed quote batch from {self.url}: {e}") from e
        if not isinstance(raw, list):
            raise SourceError(f"Malformed quote batch from {self.url}: not a list")

        quotes = [_parse_quote(q) for q in raw]
        logger.debug(f"[{self.url}] {len(quotes)} spot quotes")
        return quotes
