"""Chainlink-style round-based feed read through web3.

Binds a contract to the ``AggregatorV3Interface`` ABI and exposes the two
calls the engine consumes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from web3.exceptions import Web3Exception

from ..errors import SourceError
from .base import RoundBasedSource, RoundData

if TYPE_CHECKING:
    from web3.contract import Contract

logger = logging.getLogger(__name__)


class ChainlinkRoundSource(RoundBasedSource):
    """Round-based source backed by an on-chain aggregator contract.

    :ivar contract: web3 contract bound to AggregatorV3Interface.
    """

    def __init__(self, contract: Contract) -> None:
        self.contract = contract

    def decimals(self) -> int:
        try:
            decimals = self.contract.functions.decimals().call()
        except (Web3Exception, ValueError, OSError) as e:
            raise SourceError(f"decimals() failed on {self.contract.address}: {e}") from e
        logger.debug(f"[{self.contract.address}] decimals={decimals}")
        return int(decimals)

    def latest_round_data(self) -> RoundData:
        try:
            raw = self.contract.functions.latestRoundData().call()
        except (Web3Exception, ValueError, OSError) as e:
            raise SourceError(
                f"latestRoundData() failed on {self.contract.address}: {e}"
            ) from e

        try:
            round_data = RoundData(*(int(field) for field in raw))
        except (TypeError, ValueError) as e:
            raise SourceError(
                f"Malformed latestRoundData() from {self.contract.address}: {raw!r}"
            ) from e

        logger.debug(f"[{self.contract.address}] {round_data}")
        return round_data
