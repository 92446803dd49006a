"""OracleRegistry: Owned store of the active oracle configuration per asset.

The registry starts empty. Each asset maps to at most one immutable
:class:`OracleConfiguration`; committing a new one replaces the old entry in
a single dict assignment, so readers see either the previous or the new
configuration and never a partial one. Registration holds the asset's lock
across its read-validate-write sequence and notifies listeners after
releasing it.

The registry does not check that a configuration produces a live price.
:class:`~price_router.src.OracleAdmin.OracleAdmin` is the only intended
writer; it trial-resolves every candidate before calling :meth:`commit`.
Tests commit directly to set up state.

.. code-block:: python

    >>> registry = OracleRegistry()
    >>> registry.get("0x1111111111111111111111111111111111111111") is None
    True
    >>> registry.subscribe(lambda event: print(event.asset))
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from .OracleConfiguration import OracleConfiguration, normalize_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OracleConfigurationChanged:
    """Notification emitted after a configuration is committed.

    :ivar asset: Checksummed asset identifier.
    :ivar config: The newly active configuration.
    :ivar previous: The replaced configuration, or None for a first registration.
    """

    asset: str
    config: OracleConfiguration
    previous: OracleConfiguration | None


Listener = Callable[[OracleConfigurationChanged], None]


class OracleRegistry:
    """Per-asset oracle configuration store.

    :ivar listeners: Callables notified after every commit.
    """

    def __init__(self) -> None:
        self._configs: dict[str, OracleConfiguration] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()
        # Reserved per-asset slot; resolution neither reads nor writes it.
        self._last_known_good: dict[str, int] = {}
        self.listeners: list[Listener] = []

    def get(self, asset: str) -> OracleConfiguration | None:
        """Get the active configuration for an asset.

        :param asset: Asset identifier (any hex casing).
        :returns: Active configuration, or None if the asset is not registered.
        :raises InvalidConfiguration: If asset is not a valid address.
        """
        return self._configs.get(normalize_address(asset, "asset"))

    def assets(self) -> list[str]:
        """Get all registered asset identifiers.

        :returns: Checksummed asset identifiers in registration order.
        """
        return list(self._configs)

    def lock(self, asset: str) -> threading.RLock:
        """Get the lock that serializes registration for an asset.

        :param asset: Asset identifier.
        :returns: Re-entrant lock dedicated to that asset.
        """
        key = normalize_address(asset, "asset")
        with self._guard:
            if key not in self._locks:
                self._locks[key] = threading.RLock()
            return self._locks[key]

    def commit(
        self, asset: str, config: OracleConfiguration, notify: bool = True
    ) -> OracleConfigurationChanged:
        """Make a configuration active for an asset, replacing any prior one.

        No liveness check happens here. Use
        :meth:`OracleAdmin.register_round_based_oracle` or
        :meth:`OracleAdmin.register_index_based_oracle` outside of tests.

        :param asset: Asset identifier.
        :param config: Configuration already proven live.
        :param notify: Deliver the event to listeners before returning. Pass
            False when holding the asset lock and call :meth:`notify` after
            releasing it.
        :returns: The change notification.
        """
        key = normalize_address(asset, "asset")
        with self.lock(key):
            previous = self._configs.get(key)
            self._configs[key] = config

        event = OracleConfigurationChanged(asset=key, config=config, previous=previous)
        logger.info(f"Oracle for {key} set: {config.describe()}")
        if notify:
            self.notify(event)
        return event

    def subscribe(self, listener: Listener) -> None:
        """Register a callable to receive change notifications.

        :param listener: Callable taking an OracleConfigurationChanged.
        """
        with self._guard:
            if listener not in self.listeners:
                self.listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Stop delivering change notifications to a listener.

        :param listener: Previously subscribed callable.
        """
        with self._guard:
            if listener in self.listeners:
                self.listeners.remove(listener)

    def last_known_good_price(self, asset: str) -> int | None:
        """Get the reserved last-known-good price slot for an asset.

        :param asset: Asset identifier.
        :returns: Stored value, or None. Nothing in this package stores one.
        """
        return self._last_known_good.get(normalize_address(asset, "asset"))

    def notify(self, event: OracleConfigurationChanged) -> None:
        """Deliver a change notification to every listener.

        A failing listener is logged and does not stop delivery to the rest.

        :param event: Event returned by :meth:`commit`.
        """
        with self._guard:
            listeners = list(self.listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(
                    f"Listener {listener!r} failed for {event.asset} update: {e}"
                )
