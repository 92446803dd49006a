"""Shared fixtures: in-memory upstream sources and a wired resolver."""

from unittest.mock import patch

import pytest

from fakes import ADMIN, NOW, FakeSourceFactory
from price_router.src.AccessControl import AllowListAccessControl
from price_router.src.OracleAdmin import OracleAdmin
from price_router.src.OracleRegistry import OracleRegistry
from price_router.src.PriceResolver import PriceResolver


@pytest.fixture
def frozen_time():
    """Pin the resolver's wall clock to NOW."""
    with patch("price_router.src.PriceResolver.time.time") as mock_time:
        mock_time.return_value = float(NOW)
        yield mock_time


@pytest.fixture
def sources() -> FakeSourceFactory:
    return FakeSourceFactory()


@pytest.fixture
def registry() -> OracleRegistry:
    return OracleRegistry()


@pytest.fixture
def resolver(registry, sources) -> PriceResolver:
    return PriceResolver(registry, sources)


@pytest.fixture
def admin(registry, resolver) -> OracleAdmin:
    return OracleAdmin(registry, resolver, AllowListAccessControl([ADMIN]))
