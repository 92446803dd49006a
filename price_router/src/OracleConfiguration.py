"""OracleConfiguration: Per-asset description of where a price comes from.

An asset is priced by exactly one upstream source, which is either a
round-based feed (Chainlink ``latestRoundData``) or an index-based batch feed
(``getSpotQuotes``). The two kinds are a tagged union discriminated by
:class:`SourceKind`; fields that only make sense for one kind carry fixed
values for the other.

.. code-block:: python

    >>> config = OracleConfiguration.round_based(
    ...     "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419",
    ...     timeout_seconds=3600,
    ...     native_decimals=8,
    ... )
    >>> config.source_kind
    <SourceKind.ROUND_BASED: 'round_based'>
    >>> OracleConfiguration.index_based(
    ...     "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419", index=3, index_decimals=2
    ... ).timeout_seconds
    3600
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from web3 import Web3

from .errors import InvalidConfiguration

# Normalized fixed-point precision of every resolved price.
TARGET_DIGITS = 18
WAD = 10**TARGET_DIGITS

# Raw quotes of index-based feeds follow an 8-decimal spot price convention.
SPOT_QUOTE_DECIMALS = 8

# Index-based feeds carry no observation time, so their timeout is fixed.
INDEX_BASED_TIMEOUT_SECONDS = 3600

# Prices are unsigned 256-bit quantities.
UINT256_MAX = 2**256 - 1

# Canonical base asset that relative-to-base prices are expressed in (ETH).
BASE_ASSET = Web3.to_checksum_address("0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee")


class SourceKind(str, Enum):
    """Discriminator for the two upstream response shapes."""

    ROUND_BASED = "round_based"
    INDEX_BASED = "index_based"


def normalize_address(value: str, what: str = "address") -> str:
    """Return the checksummed form of an EVM address.

    :param value: Address in any hex casing.
    :param what: Name used in the error message.
    :returns: Checksummed address.
    :raises InvalidConfiguration: If value is not a 20-byte hex address.
    """
    try:
        return Web3.to_checksum_address(value)
    except (ValueError, TypeError) as e:
        raise InvalidConfiguration(f"Invalid {what} {value!r}: {e}") from e


@dataclass(frozen=True)
class OracleConfiguration:
    """Immutable oracle configuration for a single asset.

    :ivar source_address: Checksummed address of the upstream source.
    :ivar source_kind: Which upstream response shape to expect.
    :ivar timeout_seconds: Maximum accepted observation age.
    :ivar native_decimals: Precision of a round-based answer (18 for index-based).
    :ivar index_decimals: Decimal shift applied to index-based quotes.
    :ivar is_relative_to_base: Whether the value is denominated in the base asset.
    :ivar index: Position of the asset's quote in an index-based batch.
    """

    source_address: str
    source_kind: SourceKind
    timeout_seconds: int
    native_decimals: int = TARGET_DIGITS
    index_decimals: int = 0
    is_relative_to_base: bool = False
    index: int = 0

    def __post_init__(self) -> None:
        if not self.source_address:
            raise InvalidConfiguration("source_address must be set")
        if not isinstance(self.source_kind, SourceKind):
            raise InvalidConfiguration(f"Unknown source kind {self.source_kind!r}")
        if self.timeout_seconds < 0:
            raise InvalidConfiguration("timeout_seconds must not be negative")

        if self.source_kind is SourceKind.ROUND_BASED:
            if self.native_decimals <= 0:
                raise InvalidConfiguration(
                    "Round-based sources must report a non-zero decimal count"
                )
        else:
            if not 0 <= self.index_decimals <= SPOT_QUOTE_DECIMALS:
                raise InvalidConfiguration(
                    f"index_decimals must be between 0 and {SPOT_QUOTE_DECIMALS}"
                )
            if self.index < 0:
                raise InvalidConfiguration("index must not be negative")
            if self.is_relative_to_base:
                raise InvalidConfiguration(
                    "Index-based sources cannot be relative to the base asset"
                )

    @classmethod
    def round_based(
        cls,
        source_address: str,
        timeout_seconds: int,
        native_decimals: int,
        is_relative_to_base: bool = False,
    ) -> OracleConfiguration:
        """Build a configuration for a round-based feed.

        :param source_address: Feed address.
        :param timeout_seconds: Maximum accepted age of ``updatedAt``.
        :param native_decimals: Decimals reported by the feed.
        :param is_relative_to_base: Whether answers are base-asset amounts.
        :returns: New configuration.
        """
        return cls(
            source_address=normalize_address(source_address, "source address"),
            source_kind=SourceKind.ROUND_BASED,
            timeout_seconds=timeout_seconds,
            native_decimals=native_decimals,
            is_relative_to_base=is_relative_to_base,
        )

    @classmethod
    def index_based(
        cls,
        source_address: str,
        index: int,
        index_decimals: int,
    ) -> OracleConfiguration:
        """Build a configuration for an index-based batch feed.

        :param source_address: Batch feed address.
        :param index: Position of the asset's quote in the batch.
        :param index_decimals: Decimal shift for the asset's raw quote.
        :returns: New configuration with the fixed one-hour timeout.
        """
        return cls(
            source_address=normalize_address(source_address, "source address"),
            source_kind=SourceKind.INDEX_BASED,
            timeout_seconds=INDEX_BASED_TIMEOUT_SECONDS,
            native_decimals=TARGET_DIGITS,
            index_decimals=index_decimals,
            index=index,
        )

    @property
    def quote_decimals(self) -> int:
        """Precision of a raw index-based quote for this asset."""
        return SPOT_QUOTE_DECIMALS - self.index_decimals

    def describe(self) -> dict[str, object]:
        """Return the configuration as a flat dict for logs and notifications."""
        return {
            "source": self.source_address,
            "kind": self.source_kind.value,
            "timeout_seconds": self.timeout_seconds,
            "native_decimals": self.native_decimals,
            "index_decimals": self.index_decimals,
            "is_relative_to_base": self.is_relative_to_base,
            "index": self.index,
        }
