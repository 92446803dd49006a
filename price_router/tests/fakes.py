"""In-memory upstream sources and addresses shared by the tests."""

from web3 import Web3

from price_router.src.errors import SourceError
from price_router.src.sources import (
    IndexBasedSource,
    RoundBasedSource,
    RoundData,
    SourceFactory,
)

NOW = 1_700_000_000

ADMIN = "0x" + "ad" * 20
STRANGER = "0x" + "5e" * 20

WETH = "0x" + "11" * 20
WBTC = "0x" + "22" * 20
STETH = "0x" + "33" * 20
SOL = "0x" + "44" * 20

ETH_FEED = "0x" + "a1" * 20
BTC_FEED = "0x" + "a2" * 20
STETH_ETH_FEED = "0x" + "a3" * 20
QUOTE_FEED = "0x" + "b1" * 20


class FakeRoundSource(RoundBasedSource):
    """Round-based source with settable state."""

    def __init__(self, decimals: int, round_data: RoundData) -> None:
        self.decimals_value = decimals
        self.round_data = round_data
        self.error: Exception | None = None

    def decimals(self) -> int:
        return self.decimals_value

    def latest_round_data(self) -> RoundData:
        if self.error is not None:
            raise self.error
        return self.round_data


class FakeQuoteSource(IndexBasedSource):
    """Index-based source with a settable quote batch."""

    def __init__(self, quotes: list[int]) -> None:
        self.quotes = quotes
        self.error: Exception | None = None

    def get_spot_quotes(self) -> list[int]:
        if self.error is not None:
            raise self.error
        return list(self.quotes)


class FakeSourceFactory(SourceFactory):
    """Source factory serving in-memory sources by address."""

    def __init__(self) -> None:
        self.round_sources: dict[str, FakeRoundSource] = {}
        self.quote_sources: dict[str, FakeQuoteSource] = {}

    def add_round(
        self,
        address: str,
        answer: int,
        decimals: int = 8,
        updated_at: int = NOW,
        round_id: int = 1,
    ) -> FakeRoundSource:
        source = FakeRoundSource(
            decimals, RoundData(round_id, answer, updated_at, updated_at, round_id)
        )
        self.round_sources[Web3.to_checksum_address(address)] = source
        return source

    def add_quotes(self, address: str, quotes: list[int]) -> FakeQuoteSource:
        source = FakeQuoteSource(quotes)
        self.quote_sources[Web3.to_checksum_address(address)] = source
        return source

    def round_based(self, address: str) -> RoundBasedSource:
        try:
            return self.round_sources[Web3.to_checksum_address(address)]
        except KeyError:
            raise SourceError(f"No round-based source at {address}")

    def index_based(self, address: str) -> IndexBasedSource:
        try:
            return self.quote_sources[Web3.to_checksum_address(address)]
        except KeyError:
            raise SourceError(f"No index-based source at {address}")
