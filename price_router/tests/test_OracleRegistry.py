"""Unit tests for OracleRegistry and OracleConfiguration."""

import threading

import pytest

from fakes import ETH_FEED, QUOTE_FEED, SOL, WETH
from price_router.src.errors import InvalidConfiguration
from price_router.src.OracleConfiguration import (
    BASE_ASSET,
    OracleConfiguration,
    SourceKind,
)
from price_router.src.OracleRegistry import OracleConfigurationChanged, OracleRegistry


def eth_config(timeout: int = 3600) -> OracleConfiguration:
    return OracleConfiguration.round_based(ETH_FEED, timeout, 8)


class TestOracleConfiguration:
    """Test configuration construction and validation."""

    def test_round_based_defaults(self) -> None:
        config = eth_config()
        assert config.source_kind is SourceKind.ROUND_BASED
        assert config.index == 0
        assert config.index_decimals == 0
        assert config.is_relative_to_base is False

    def test_source_address_checksummed(self) -> None:
        config = OracleConfiguration.round_based("0x" + "ab" * 20, 60, 8)
        assert config.source_address != "0x" + "ab" * 20
        assert config.source_address.lower() == "0x" + "ab" * 20

    def test_index_based_fixed_fields(self) -> None:
        config = OracleConfiguration.index_based(QUOTE_FEED, index=2, index_decimals=3)
        assert config.timeout_seconds == 3600
        assert config.native_decimals == 18
        assert config.quote_decimals == 5
        assert config.is_relative_to_base is False

    def test_immutable(self) -> None:
        config = eth_config()
        with pytest.raises(AttributeError):
            config.timeout_seconds = 1  # type: ignore[misc]

    def test_invalid_values(self) -> None:
        with pytest.raises(InvalidConfiguration):
            OracleConfiguration.round_based(ETH_FEED, 3600, 0)
        with pytest.raises(InvalidConfiguration):
            OracleConfiguration.round_based(ETH_FEED, -1, 8)
        with pytest.raises(InvalidConfiguration):
            OracleConfiguration.round_based("feed", 3600, 8)
        with pytest.raises(InvalidConfiguration):
            OracleConfiguration.index_based(QUOTE_FEED, 0, -1)
        with pytest.raises(InvalidConfiguration):
            OracleConfiguration(
                source_address="",
                source_kind=SourceKind.ROUND_BASED,
                timeout_seconds=60,
            )

    def test_index_based_cannot_be_relative(self) -> None:
        with pytest.raises(InvalidConfiguration, match="relative"):
            OracleConfiguration(
                source_address=QUOTE_FEED,
                source_kind=SourceKind.INDEX_BASED,
                timeout_seconds=3600,
                is_relative_to_base=True,
            )

    def test_unknown_kind(self) -> None:
        with pytest.raises(InvalidConfiguration, match="Unknown source kind"):
            OracleConfiguration(
                source_address=ETH_FEED,
                source_kind="perp",  # type: ignore[arg-type]
                timeout_seconds=60,
            )

    def test_describe(self) -> None:
        described = eth_config().describe()
        assert described["kind"] == "round_based"
        assert described["native_decimals"] == 8

    def test_base_asset_is_checksummed(self) -> None:
        assert BASE_ASSET.lower() == "0x" + "ee" * 20


class TestOracleRegistry:
    """Test the per-asset store."""

    def test_starts_empty(self) -> None:
        registry = OracleRegistry()
        assert registry.assets() == []
        assert registry.get(WETH) is None

    def test_commit_and_get(self) -> None:
        registry = OracleRegistry()
        config = eth_config()
        registry.commit(WETH, config)

        assert registry.get(WETH) is config
        assert registry.assets() == [WETH]

    def test_lookup_ignores_case(self) -> None:
        registry = OracleRegistry()
        config = eth_config()
        registry.commit(BASE_ASSET.lower(), config)

        assert registry.get(BASE_ASSET) is config
        assert registry.assets() == [BASE_ASSET]

    def test_replace(self) -> None:
        registry = OracleRegistry()
        first, second = eth_config(60), eth_config(120)
        registry.commit(WETH, first)
        event = registry.commit(WETH, second)

        assert registry.get(WETH) is second
        assert event.previous is first
        assert len(registry.assets()) == 1

    def test_invalid_asset(self) -> None:
        registry = OracleRegistry()
        with pytest.raises(InvalidConfiguration):
            registry.commit("weth", eth_config())

    def test_last_known_good_is_unset(self) -> None:
        registry = OracleRegistry()
        registry.commit(WETH, eth_config())
        assert registry.last_known_good_price(WETH) is None


class TestOracleRegistryLocks:
    """Test per-asset locking."""

    def test_same_lock_per_asset(self) -> None:
        registry = OracleRegistry()
        assert registry.lock(BASE_ASSET) is registry.lock(BASE_ASSET.lower())

    def test_distinct_locks_per_asset(self) -> None:
        registry = OracleRegistry()
        assert registry.lock(WETH) is not registry.lock(SOL)

    def test_commit_waits_for_registration_lock(self) -> None:
        """A commit for an asset blocks while another holder owns its lock."""
        registry = OracleRegistry()
        committed = threading.Event()

        def commit() -> None:
            registry.commit(WETH, eth_config())
            committed.set()

        with registry.lock(WETH):
            worker = threading.Thread(target=commit)
            worker.start()
            assert not committed.wait(0.1)
            assert registry.get(WETH) is None

        worker.join(timeout=5)
        assert committed.is_set()
        assert registry.get(WETH) is not None

    def test_other_assets_do_not_contend(self) -> None:
        registry = OracleRegistry()
        committed = threading.Event()

        def commit() -> None:
            registry.commit(SOL, eth_config())
            committed.set()

        with registry.lock(WETH):
            worker = threading.Thread(target=commit)
            worker.start()
            assert committed.wait(5)

        worker.join(timeout=5)


class TestOracleRegistryListeners:
    """Test change notifications."""

    def test_listener_receives_event(self) -> None:
        registry = OracleRegistry()
        events: list[OracleConfigurationChanged] = []
        registry.subscribe(events.append)

        config = eth_config()
        registry.commit(WETH, config)

        assert events == [OracleConfigurationChanged(WETH, config, None)]

    def test_subscribe_idempotent(self) -> None:
        registry = OracleRegistry()
        events: list[OracleConfigurationChanged] = []
        registry.subscribe(events.append)
        registry.subscribe(events.append)

        registry.commit(WETH, eth_config())
        assert len(events) == 1

    def test_unsubscribe(self) -> None:
        registry = OracleRegistry()
        events: list[OracleConfigurationChanged] = []
        registry.subscribe(events.append)
        registry.unsubscribe(events.append)
        registry.unsubscribe(events.append)  # Should not raise

        registry.commit(WETH, eth_config())
        assert events == []

    def test_deferred_notification(self) -> None:
        registry = OracleRegistry()
        events: list[OracleConfigurationChanged] = []
        registry.subscribe(events.append)

        event = registry.commit(WETH, eth_config(), notify=False)
        assert events == []

        registry.notify(event)
        assert events == [event]

    def test_failing_listener_does_not_undo_commit(self) -> None:
        registry = OracleRegistry()
        events: list[OracleConfigurationChanged] = []

        def broken(event: OracleConfigurationChanged) -> None:
            raise RuntimeError("boom")

        registry.subscribe(broken)
        registry.subscribe(events.append)
        config = eth_config()
        registry.commit(WETH, config)

        assert registry.get(WETH) is config
        assert len(events) == 1
