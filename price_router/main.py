#!/usr/bin/env python3
"""Price Router.

Registers per-asset oracle configurations from a JSON file, proving each one
live against its upstream source, then resolves the requested assets to
18-decimal prices and prints them as JSON.

Configure via CLI args or env vars. See the epilog of --help.
"""

import argparse
import json
import logging
import os
import sys

from .src.AccessControl import AllowListAccessControl
from .src.ContractUtility import NETWORKS, ContractUtility
from .src.errors import PriceRouterError
from .src.OracleAdmin import OracleAdmin
from .src.OracleConfiguration import TARGET_DIGITS, WAD, OracleConfiguration
from .src.OracleRegistry import OracleRegistry
from .src.PriceResolver import PriceResolver
from .src.sources import ContractSourceFactory

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def parse_quote_endpoints(endpoint_str: str | None) -> dict[str, str]:
    """Parse comma-separated HTTP quote endpoints into a dictionary.

    Format: address1=url1,address2=url2
    Example: 0xabc...=https://quotes.example.com/batch

    :param endpoint_str: Comma-separated endpoint string.
    :returns: Dict mapping source addresses to endpoint URLs.
    """
    if not endpoint_str:
        return {}

    endpoints = {}
    for item in endpoint_str.split(","):
        item = item.strip()
        if "=" in item:
            address, url = item.split("=", 1)
            endpoints[address.strip()] = url.strip()
    return endpoints


def load_oracle_config(path: str) -> dict:
    """Load the registration file.

    Format::

        {
          "admins": ["0x..."],
          "oracles": [
            {"kind": "round_based", "asset": "0x...", "source": "0x...",
             "timeout_seconds": 3600, "relative_to_base": false},
            {"kind": "index_based", "asset": "0x...", "source": "0x...",
             "index": 0, "index_decimals": 0}
          ]
        }

    :param path: Path to the JSON file.
    :returns: Parsed configuration.
    :raises ValueError: If the file lacks admins or oracles.
    """
    with open(path, "r") as file:
        config = json.load(file)

    if not isinstance(config, dict):
        raise ValueError(f"{path}: top level must be a JSON object")
    if not config.get("admins"):
        raise ValueError(f"{path}: at least one admin address is required")
    if not isinstance(config.get("oracles"), list):
        raise ValueError(f"{path}: 'oracles' must be a list")
    for position, entry in enumerate(config["oracles"]):
        if not isinstance(entry, dict):
            raise ValueError(f"{path}: oracle entry {position} must be an object")
    return config


def _int_field(entry: dict, key: str, default: int | None = None) -> int:
    """Read an integer field of an oracle entry.

    :raises ValueError: If the field is missing (without a default) or not an integer.
    """
    value = entry.get(key, default)
    message = f"Oracle entry for {entry.get('asset')}: {key} must be an integer, got {value!r}"
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(message)
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(message) from e


def register_from_config(admin: OracleAdmin, config: dict) -> list[OracleConfiguration]:
    """Register every oracle listed in a loaded configuration.

    Absolute prices are registered before relative-to-base ones so the base
    asset is live when relative registrations are trial-resolved.

    :param admin: OracleAdmin to register through.
    :param config: Output of load_oracle_config().
    :returns: Committed configurations in registration order.
    :raises ValueError: If an entry has an unknown kind or a malformed field.
    """
    caller = config.get("caller") or config["admins"][0]
    entries = sorted(config["oracles"], key=lambda e: bool(e.get("relative_to_base")))

    registered = []
    for entry in entries:
        kind = entry.get("kind")
        if kind == "round_based":
            registered.append(
                admin.register_round_based_oracle(
                    caller,
                    entry["asset"],
                    entry["source"],
                    timeout_seconds=_int_field(entry, "timeout_seconds"),
                    is_relative_to_base=bool(entry.get("relative_to_base", False)),
                )
            )
        elif kind == "index_based":
            registered.append(
                admin.register_index_based_oracle(
                    caller,
                    entry["asset"],
                    entry["source"],
                    index=_int_field(entry, "index"),
                    index_decimals=_int_field(entry, "index_decimals", 0),
                )
            )
        else:
            raise ValueError(f"Unknown oracle kind {kind!r} for {entry.get('asset')}")
    return registered


def format_price(price: int) -> str:
    """Render an 18-decimal price as a plain decimal string, without rounding."""
    whole, fraction = divmod(price, WAD)
    if not fraction:
        return str(whole)
    return f"{whole}.{fraction:0{TARGET_DIGITS}d}".rstrip("0")


def main() -> None:
    """Main entry point for the Price Router CLI."""
    parser = argparse.ArgumentParser(
        description="Price Router: single-source 18-decimal asset prices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Networks:
  {', '.join(NETWORKS)} (or any RPC URL)

Examples:
  # Register the oracles in oracles.json and resolve two assets
  python -m price_router.main --config oracles.json \\
      --assets 0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2,0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599

  # Serve one index-based feed from its HTTP mirror
  python -m price_router.main --config oracles.json --assets 0x... \\
      --quote-endpoints 0xFeed...=https://quotes.example.com/batch

Environment variables (CLI args take precedence):
  NETWORK, RPC_URL, ORACLE_CONFIG, ASSETS, QUOTE_ENDPOINTS, HTTP_TIMEOUT
""",
    )

    parser.add_argument(
        "--network",
        type=str,
        help="Network to connect to (mainnet, sepolia, arbitrum, localnet)",
        default=os.environ.get("NETWORK") or "mainnet",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to the oracle registration JSON file",
        default=os.environ.get("ORACLE_CONFIG"),
    )

    parser.add_argument(
        "--assets",
        type=str,
        help="Comma-separated asset addresses to resolve (default: all registered)",
        default=os.environ.get("ASSETS"),
    )

    parser.add_argument(
        "--quote-endpoints",
        dest="quote_endpoints",
        type=str,
        help="Comma-separated HTTP mirrors for index-based feeds (address=url,...)",
        default=os.environ.get("QUOTE_ENDPOINTS"),
    )

    parser.add_argument(
        "--http-timeout",
        dest="http_timeout",
        type=float,
        help="Timeout for HTTP quote requests in seconds (default: 10.0)",
        default=float(os.environ.get("HTTP_TIMEOUT") or "10.0"),
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.config:
        parser.error("--config (or ORACLE_CONFIG) is required")

    if args.http_timeout <= 0:
        parser.error("--http-timeout must be positive")

    try:
        config = load_oracle_config(args.config)
    except (OSError, ValueError) as e:
        parser.error(f"Cannot load {args.config}: {e}")

    contract_utility = ContractUtility(args.network)
    registry = OracleRegistry()
    resolver = PriceResolver(
        registry,
        ContractSourceFactory(
            contract_utility,
            quote_endpoints=parse_quote_endpoints(args.quote_endpoints),
            http_timeout=args.http_timeout,
        ),
    )
    admin = OracleAdmin(registry, resolver, AllowListAccessControl(config["admins"]))

    # Log configuration
    logger.info("=" * 60)
    logger.info("Price Router")
    logger.info("=" * 60)
    logger.info(f"Network:           {args.network} ({contract_utility.network})")
    logger.info(f"Config:            {args.config}")
    logger.info(f"Oracles:           {len(config['oracles'])}")
    logger.info("=" * 60)

    try:
        register_from_config(admin, config)

        assets = [a.strip() for a in (args.assets or "").split(",") if a.strip()]
        prices = resolver.resolve_many(assets or registry.assets())
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        return
    except (PriceRouterError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)

    print(json.dumps({asset: format_price(price) for asset, price in prices.items()}, indent=2))


if __name__ == "__main__":
    main()
