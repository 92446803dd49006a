"""PriceResolver: Resolves a registered asset to a single 18-decimal price.

Algorithm:
    1. Look up the asset's configuration (UnknownAsset if missing)
    2. Read an observation from the configured source:
       - round-based: latestRoundData(), valid only with non-zero round id,
         non-zero update time and a positive answer
       - index-based: quote at the configured index of getSpotQuotes(),
         timestamped "now" since the batch has no update time of its own
    3. Reject the observation if it is dated after "now" or is older than
       the configured timeout
    4. Scale the value from its native precision to 18 decimals
    5. If the price is relative to the base asset, resolve the base asset
       and multiply: base_price * value / 10**18
    6. A zero result at any step raises InvalidOracleResponse

Resolution is a pure read: it never writes to the registry and never
consults the reserved last-known-good slot.

.. code-block:: python

    >>> scale_price_by_digits(2000_00000000, 8)
    2000000000000000000000
    >>> scale_price_by_digits(10**20, 20)
    1000000000000000000
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from .errors import (
    InvalidConfiguration,
    InvalidOracleResponse,
    ResolutionCycleError,
    ScalingOverflow,
    SourceError,
    UnknownAsset,
)
from .OracleConfiguration import (
    BASE_ASSET,
    TARGET_DIGITS,
    UINT256_MAX,
    WAD,
    OracleConfiguration,
    SourceKind,
    normalize_address,
)
from .OracleRegistry import OracleRegistry
from .sources import SourceFactory

logger = logging.getLogger(__name__)


def scale_price_by_digits(value: int, from_decimals: int) -> int:
    """Rescale a fixed-point value from ``from_decimals`` to 18 decimals.

    Scaling down truncates digits below the 18th. Values are treated as
    unsigned 256-bit integers.

    :param value: Fixed-point value at ``from_decimals`` precision.
    :param from_decimals: Precision of ``value``.
    :returns: Value at 18-decimal precision.
    :raises ScalingOverflow: If value is negative or the result exceeds 2**256 - 1.
    :raises InvalidConfiguration: If from_decimals is negative.

    .. code-block:: python

        >>> scale_price_by_digits(1_500000, 6)
        1500000000000000000
    """
    if from_decimals < 0:
        raise InvalidConfiguration(f"Decimals must not be negative, got {from_decimals}")
    if value < 0 or value > UINT256_MAX:
        raise ScalingOverflow(f"Value {value} is outside the uint256 range")

    if from_decimals > TARGET_DIGITS:
        return value // 10 ** (from_decimals - TARGET_DIGITS)
    if from_decimals < TARGET_DIGITS:
        scaled = value * 10 ** (TARGET_DIGITS - from_decimals)
        if scaled > UINT256_MAX:
            raise ScalingOverflow(
                f"Scaling {value} from {from_decimals} to {TARGET_DIGITS} decimals "
                "overflows uint256"
            )
        return scaled
    return value


def mul_wad(a: int, b: int) -> int:
    """Multiply two 18-decimal values, truncating to 18 decimals.

    :raises ScalingOverflow: If the intermediate product exceeds 2**256 - 1.
    """
    product = a * b
    if product > UINT256_MAX:
        raise ScalingOverflow(f"{a} * {b} overflows uint256")
    return product // WAD


@dataclass(frozen=True)
class Observation:
    """A raw upstream reading before normalization.

    :ivar value: Raw value, or 0 if the source produced no valid reading.
    :ivar timestamp: Unix time of the reading, or 0 if none.
    :ivar decimals: Precision of ``value``.
    """

    value: int
    timestamp: int
    decimals: int

    @property
    def is_empty(self) -> bool:
        """Check if the source produced no usable reading."""
        return self.value == 0 or self.timestamp == 0


class PriceResolver:
    """Resolves asset prices from the configuration registry.

    :ivar registry: Source of per-asset configurations (read only).
    :ivar sources: Factory turning source addresses into upstream readers.
    :ivar base_asset: Asset that relative-to-base prices are composed with.

    .. code-block:: python

        >>> resolver = PriceResolver(registry, ContractSourceFactory(utility))
        >>> resolver.resolve("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2")
        2512340000000000000000
    """

    def __init__(
        self,
        registry: OracleRegistry,
        sources: SourceFactory,
        base_asset: str = BASE_ASSET,
    ) -> None:
        """Initialize the resolver.

        :param registry: Oracle configuration registry.
        :param sources: Factory for upstream readers.
        :param base_asset: Base asset for relative-to-base composition.
        """
        self.registry = registry
        self.sources = sources
        self.base_asset = normalize_address(base_asset, "base asset")

    def resolve(self, asset: str) -> int:
        """Resolve the absolute 18-decimal price of a registered asset.

        :param asset: Asset identifier.
        :returns: Price scaled by 10**18, always non-zero.
        :raises UnknownAsset: If no configuration is registered.
        :raises InvalidOracleResponse: If no fresh, non-zero price is available.
        :raises ScalingOverflow: If normalization leaves the uint256 range.
        """
        return self._resolve_registered(asset, ())

    def resolve_candidate(self, asset: str, config: OracleConfiguration) -> int:
        """Resolve a price through a configuration that is not committed.

        Used to prove a configuration live before registering it. The base
        asset, if needed, is still resolved from the registry.

        :param asset: Asset the configuration is meant for.
        :param config: Candidate configuration.
        :returns: Price scaled by 10**18, always non-zero.
        :raises InvalidOracleResponse: If the candidate yields no valid price.
        """
        key = normalize_address(asset, "asset")
        return self._price(key, config, ())

    def resolve_many(self, assets: list[str]) -> dict[str, int]:
        """Resolve several assets, failing on the first error.

        :param assets: Asset identifiers.
        :returns: Dict mapping checksummed asset to price.
        """
        prices: dict[str, int] = {}
        for asset in assets:
            price = self.resolve(asset)
            prices[normalize_address(asset, "asset")] = price
        return prices

    def _resolve_registered(self, asset: str, chain: tuple[str, ...]) -> int:
        try:
            key = normalize_address(asset, "asset")
        except InvalidConfiguration as e:
            raise UnknownAsset(asset) from e

        config = self.registry.get(key)
        if config is None:
            raise UnknownAsset(key)
        return self._price(key, config, chain)

    def _price(
        self, asset: str, config: OracleConfiguration, chain: tuple[str, ...]
    ) -> int:
        if asset in chain:
            raise ResolutionCycleError(asset, chain)

        now = int(time.time())
        observation = self._observe(asset, config, now)

        if observation.is_empty:
            raise InvalidOracleResponse(asset, "no valid observation")

        if observation.timestamp > now:
            raise InvalidOracleResponse(asset, "observation is in the future")

        age = now - observation.timestamp
        if age > config.timeout_seconds:
            raise InvalidOracleResponse(
                asset, f"observation is {age}s old (timeout {config.timeout_seconds}s)"
            )

        value = scale_price_by_digits(observation.value, observation.decimals)

        if value and config.is_relative_to_base:
            base_price = self._resolve_registered(self.base_asset, chain + (asset,))
            value = mul_wad(base_price, value)

        if value == 0:
            raise InvalidOracleResponse(asset, "price rounds to zero")

        logger.debug(f"{asset}: resolved {value} via {config.source_address}")
        return value

    def _observe(
        self, asset: str, config: OracleConfiguration, now: int
    ) -> Observation:
        try:
            if config.source_kind is SourceKind.ROUND_BASED:
                return self._observe_round_based(config)
            if config.source_kind is SourceKind.INDEX_BASED:
                return self._observe_index_based(config, now)
        except SourceError as e:
            logger.warning(f"{asset}: upstream read failed: {e}")
            raise InvalidOracleResponse(asset, str(e)) from e
        raise InvalidConfiguration(f"Unknown source kind {config.source_kind!r}")

    def _observe_round_based(self, config: OracleConfiguration) -> Observation:
        round_data = self.sources.round_based(config.source_address).latest_round_data()
        if (
            round_data.round_id != 0
            and round_data.updated_at != 0
            and round_data.answer > 0
        ):
            return Observation(
                round_data.answer, round_data.updated_at, config.native_decimals
            )
        return Observation(0, 0, config.native_decimals)

    def _observe_index_based(
        self, config: OracleConfiguration, now: int
    ) -> Observation:
        quotes = self.sources.index_based(config.source_address).get_spot_quotes()
        if config.index < len(quotes) and quotes[config.index] != 0:
            # The batch has no update time; a quote read now is always fresh.
            return Observation(quotes[config.index], now, config.quote_decimals)
        return Observation(0, 0, config.quote_decimals)
