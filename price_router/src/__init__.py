"""
Price Router - Single-source price resolution module

This module resolves a registered asset to one 18-decimal price:
- OracleConfiguration: Per-asset source description (round-based or index-based)
- OracleRegistry: Owned per-asset configuration store with change notifications
- PriceResolver: Staleness checks, decimal normalization and base-asset composition
- OracleAdmin: Validate-then-commit registration behind an access-control gate
- sources: Upstream read interfaces and web3/HTTP adapters
"""

from .AccessControl import AccessControl, AllowListAccessControl
from .errors import (
    InvalidConfiguration,
    InvalidOracleResponse,
    PriceRouterError,
    ResolutionCycleError,
    ScalingOverflow,
    SourceError,
    Unauthorized,
    UnknownAsset,
)
from .OracleAdmin import OracleAdmin
from .OracleConfiguration import (
    BASE_ASSET,
    INDEX_BASED_TIMEOUT_SECONDS,
    WAD,
    OracleConfiguration,
    SourceKind,
)
from .OracleRegistry import OracleConfigurationChanged, OracleRegistry
from .PriceResolver import PriceResolver, scale_price_by_digits

__all__ = [
    "AccessControl",
    "AllowListAccessControl",
    "BASE_ASSET",
    "INDEX_BASED_TIMEOUT_SECONDS",
    "InvalidConfiguration",
    "InvalidOracleResponse",
    "OracleAdmin",
    "OracleConfiguration",
    "OracleConfigurationChanged",
    "OracleRegistry",
    "PriceResolver",
    "PriceRouterError",
    "ResolutionCycleError",
    "ScalingOverflow",
    "SourceError",
    "SourceKind",
    "Unauthorized",
    "UnknownAsset",
    "WAD",
    "scale_price_by_digits",
]
