"""OracleAdmin: Validated registration of per-asset oracle configuration.

A registration is only committed after the candidate configuration has
produced a live price. If any step fails, the asset keeps its previous
configuration (or stays unregistered).

Sequence:
    1. Check the caller against the access-control gate
    2. Probe the source (round-based: decimals() must be non-zero)
    3. Trial-resolve a price through the candidate configuration
    4. Commit to the registry under the asset lock
    5. Notify subscribers once the lock is released
"""

from __future__ import annotations

import logging

from .AccessControl import AccessControl
from .errors import InvalidConfiguration, InvalidOracleResponse, PriceRouterError
from .OracleConfiguration import OracleConfiguration, normalize_address
from .OracleRegistry import OracleRegistry
from .PriceResolver import PriceResolver

logger = logging.getLogger(__name__)


class OracleAdmin:
    """Administration entry points for oracle registration.

    :ivar registry: Registry receiving committed configurations.
    :ivar resolver: Engine used for trial resolution.
    :ivar access_control: Gate checked before any upstream read.
    """

    def __init__(
        self,
        registry: OracleRegistry,
        resolver: PriceResolver,
        access_control: AccessControl,
    ) -> None:
        """Initialize the admin.

        :param registry: Oracle configuration registry.
        :param resolver: Resolver sharing the same registry.
        :param access_control: Access-control gate.
        """
        self.registry = registry
        self.resolver = resolver
        self.access_control = access_control

    def register_round_based_oracle(
        self,
        caller: str,
        asset: str,
        source_address: str,
        timeout_seconds: int,
        is_relative_to_base: bool = False,
    ) -> OracleConfiguration:
        """Register a round-based feed for an asset.

        :param caller: Principal performing the registration.
        :param asset: Asset to configure.
        :param source_address: Round-based feed address.
        :param timeout_seconds: Maximum accepted observation age.
        :param is_relative_to_base: Whether the feed reports base-asset amounts.
        :returns: The committed configuration.
        :raises Unauthorized: If the caller may not configure oracles.
        :raises InvalidConfiguration: If the feed reports zero decimals or the
            base asset is made relative to itself.
        :raises InvalidOracleResponse: If the feed yields no valid price.
        """
        self.access_control.require(caller)
        key = normalize_address(asset, "asset")
        source = normalize_address(source_address, "source address")

        if is_relative_to_base and key == self.resolver.base_asset:
            raise InvalidConfiguration(
                f"Base asset {key} cannot be priced relative to itself"
            )

        try:
            native_decimals = self.resolver.sources.round_based(source).decimals()
        except PriceRouterError as e:
            raise InvalidConfiguration(
                f"Could not read decimals from {source}: {e}"
            ) from e
        if native_decimals == 0:
            raise InvalidConfiguration(f"Source {source} reports zero decimals")

        candidate = OracleConfiguration.round_based(
            source,
            timeout_seconds=timeout_seconds,
            native_decimals=native_decimals,
            is_relative_to_base=is_relative_to_base,
        )
        return self._commit_if_live(key, candidate)

    def register_index_based_oracle(
        self,
        caller: str,
        asset: str,
        source_address: str,
        index: int,
        index_decimals: int,
    ) -> OracleConfiguration:
        """Register an index-based batch feed for an asset.

        The configuration uses the fixed one-hour timeout and is never
        relative to the base asset.

        :param caller: Principal performing the registration.
        :param asset: Asset to configure.
        :param source_address: Batch feed address.
        :param index: Position of the asset's quote in the batch.
        :param index_decimals: Decimal shift for the asset's raw quote.
        :returns: The committed configuration.
        :raises Unauthorized: If the caller may not configure oracles.
        :raises InvalidConfiguration: If index or index_decimals is out of range.
        :raises InvalidOracleResponse: If the batch yields no valid price.
        """
        self.access_control.require(caller)
        key = normalize_address(asset, "asset")

        candidate = OracleConfiguration.index_based(
            source_address, index=index, index_decimals=index_decimals
        )
        return self._commit_if_live(key, candidate)

    def _commit_if_live(
        self, asset: str, candidate: OracleConfiguration
    ) -> OracleConfiguration:
        with self.registry.lock(asset):
            try:
                price = self.resolver.resolve_candidate(asset, candidate)
            except InvalidOracleResponse as e:
                logger.warning(
                    f"Rejected oracle for {asset} ({candidate.source_address}): {e}"
                )
                raise

            event = self.registry.commit(asset, candidate, notify=False)

        self.registry.notify(event)
        logger.info(f"Registered oracle for {asset}, trial price {price}")
        return candidate
