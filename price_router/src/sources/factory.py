"""ContractSourceFactory: Builds upstream readers from configured addresses."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..OracleConfiguration import normalize_address
from .base import IndexBasedSource, RoundBasedSource, SourceFactory
from .chainlink import ChainlinkRoundSource
from .spot_quotes import HttpSpotQuoteSource, SpotQuoteContractSource

if TYPE_CHECKING:
    from ..ContractUtility import ContractUtility

logger = logging.getLogger(__name__)


class ContractSourceFactory(SourceFactory):
    """Source factory reading feeds through web3.

    Index-based sources whose address appears in ``quote_endpoints`` are
    served by their HTTP mirror instead of the contract.

    :ivar contract_utility: Web3 connection and ABI loader.
    :ivar quote_endpoints: Checksummed address to HTTP endpoint URL.
    :ivar http_timeout: Timeout for HTTP quote requests.
    """

    def __init__(
        self,
        contract_utility: ContractUtility,
        quote_endpoints: dict[str, str] | None = None,
        http_timeout: float | None = None,
    ) -> None:
        """Initialize the factory.

        :param contract_utility: Web3 connection and ABI loader.
        :param quote_endpoints: Optional address to URL mapping for HTTP mirrors.
        :param http_timeout: Optional HTTP request timeout in seconds.
        """
        self.contract_utility = contract_utility
        self.quote_endpoints = {
            normalize_address(address, "quote endpoint address"): url
            for address, url in (quote_endpoints or {}).items()
        }
        self.http_timeout = http_timeout

    def round_based(self, address: str) -> RoundBasedSource:
        contract = self.contract_utility.get_contract(address, "AggregatorV3Interface")
        return ChainlinkRoundSource(contract)

    def index_based(self, address: str) -> IndexBasedSource:
        url = self.quote_endpoints.get(normalize_address(address, "source address"))
        if url:
            logger.debug(f"Serving spot quotes for {address} from {url}")
            return HttpSpotQuoteSource(url, timeout=self.http_timeout)
        contract = self.contract_utility.get_contract(address, "SpotQuoteFeed")
        return SpotQuoteContractSource(contract)
