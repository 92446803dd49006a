"""Typed failures raised by registration and price resolution.

Every failure is local to a single call. Nothing here is retried and no
failure falls back to a previously resolved value; the caller decides.
"""

from __future__ import annotations


class PriceRouterError(Exception):
    """Base exception for all price router errors."""

    pass


class UnknownAsset(PriceRouterError):
    """Raised when no oracle configuration is registered for an asset.

    :ivar asset: The asset identifier that was requested.
    """

    def __init__(self, asset: str):
        """Initialize the error.

        :param asset: Requested asset identifier.
        """
        self.asset = asset
        super().__init__(f"No oracle configured for asset {asset}")


class InvalidOracleResponse(PriceRouterError):
    """Raised when a configured source cannot produce a fresh, non-zero price.

    Covers stale observations, zero or negative answers, out-of-range batch
    indices and upstream read failures.

    :ivar asset: Asset whose resolution failed.
    """

    def __init__(self, asset: str, reason: str | None = None):
        """Initialize the error.

        :param asset: Asset whose resolution failed.
        :param reason: Optional human-readable detail.
        """
        self.asset = asset
        self.reason = reason
        message = f"Invalid oracle response for asset {asset}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ResolutionCycleError(InvalidOracleResponse):
    """Raised when relative-to-base composition re-enters an asset.

    :ivar chain: Assets already being resolved, in resolution order.
    """

    def __init__(self, asset: str, chain: tuple[str, ...]):
        """Initialize the error.

        :param asset: Asset that was re-entered.
        :param chain: Resolution chain leading to the re-entry.
        """
        self.chain = chain
        path = " -> ".join(chain + (asset,))
        super().__init__(asset, f"resolution cycle {path}")


class InvalidConfiguration(PriceRouterError):
    """Raised when an oracle configuration or its registration probe is invalid."""

    pass


class ScalingOverflow(PriceRouterError):
    """Raised when fixed-point arithmetic leaves the unsigned 256-bit range."""

    pass


class Unauthorized(PriceRouterError):
    """Raised when a caller may not modify oracle configuration.

    :ivar caller: The rejected principal.
    """

    def __init__(self, caller: str):
        """Initialize the error.

        :param caller: The rejected principal.
        """
        self.caller = caller
        super().__init__(f"Caller {caller} is not allowed to configure oracles")


class SourceError(PriceRouterError):
    """Raised by upstream adapters when a read fails or returns garbage."""

    pass


class SourceHTTPError(SourceError):
    """Raised when an HTTP quote endpoint answers with a non-2xx status.

    :ivar status_code: HTTP status code from the failed request.
    """

    def __init__(self, status_code: int, message: str):
        """Initialize the HTTP error.

        :param status_code: HTTP status code.
        :param message: Error message from response.
        """
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")
