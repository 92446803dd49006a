"""
Upstream oracle read interfaces and their adapters.

Usage:
    from price_router.src.ContractUtility import ContractUtility
    from price_router.src.sources import ContractSourceFactory

    factory = ContractSourceFactory(ContractUtility("mainnet"))
    feed = factory.round_based("0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419")
    feed.latest_round_data()
"""

from .base import IndexBasedSource, RoundBasedSource, RoundData, SourceFactory
from .chainlink import ChainlinkRoundSource
from .factory import ContractSourceFactory
from .spot_quotes import HttpSpotQuoteSource, SpotQuoteContractSource

__all__ = [
    # Interfaces
    "IndexBasedSource",
    "RoundBasedSource",
    "RoundData",
    "SourceFactory",
    # Adapters
    "ChainlinkRoundSource",
    "ContractSourceFactory",
    "HttpSpotQuoteSource",
    "SpotQuoteContractSource",
]
