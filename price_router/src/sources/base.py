"""Upstream read interfaces consumed by the resolution engine.

The engine never talks to a chain or an HTTP endpoint directly. It asks a
:class:`SourceFactory` for the reader bound to a configured source address
and consumes one of two read interfaces:

- :class:`RoundBasedSource`: ``decimals()`` and ``latest_round_data()``
- :class:`IndexBasedSource`: ``get_spot_quotes()``

Adapters wrap transport failures in :class:`~price_router.src.errors.SourceError`.

.. code-block:: python

    class FixedFeed(RoundBasedSource):
        def decimals(self) -> int:
            return 8

        def latest_round_data(self) -> RoundData:
            return RoundData(1, 2000_00000000, 0, int(time.time()), 1)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple


class RoundData(NamedTuple):
    """Result of ``latestRoundData()`` on a round-based feed.

    Only ``round_id``, ``answer`` and ``updated_at`` are used for resolution.
    """

    round_id: int
    answer: int
    started_at: int
    updated_at: int
    answered_in_round: int


class RoundBasedSource(ABC):
    """Upstream oracle reporting one value per round with an update time."""

    @abstractmethod
    def decimals(self) -> int:
        """Get the fixed-point precision of the reported answer.

        :returns: Number of decimals.
        :raises SourceError: If the read fails.
        """
        pass

    @abstractmethod
    def latest_round_data(self) -> RoundData:
        """Get the latest round.

        :returns: RoundData for the most recent round.
        :raises SourceError: If the read fails.
        """
        pass


class IndexBasedSource(ABC):
    """Upstream oracle reporting a batch of quotes addressed by position."""

    @abstractmethod
    def get_spot_quotes(self) -> list[int]:
        """Get the full batch of raw 8-decimal spot quotes.

        :returns: Quotes in batch order.
        :raises SourceError: If the read fails.
        """
        pass


class SourceFactory(ABC):
    """Resolves a configured source address into a reader."""

    @abstractmethod
    def round_based(self, address: str) -> RoundBasedSource:
        """Get the round-based reader for an address.

        :param address: Checksummed source address.
        :returns: Reader bound to that address.
        """
        pass

    @abstractmethod
    def index_based(self, address: str) -> IndexBasedSource:
        """Get the index-based reader for an address.

        :param address: Checksummed source address.
        :returns: Reader bound to that address.
        """
        pass
