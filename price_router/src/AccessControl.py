"""AccessControl: Gate deciding who may change oracle configuration."""

from abc import abstractmethod

from .errors import InvalidConfiguration, Unauthorized
from .OracleConfiguration import normalize_address


class AccessControl:
    """Abstract base class for access-control gates.

    Implementations decide whether a principal may register or replace an
    asset's oracle configuration.
    """

    @abstractmethod
    def is_authorized(self, caller: str) -> bool:
        """Check whether a caller may configure oracles.

        :param caller: Principal attempting the change.
        :returns: True if the change is allowed.
        """
        pass

    def require(self, caller: str) -> None:
        """Raise unless the caller is authorized.

        :param caller: Principal attempting the change.
        :raises Unauthorized: If the caller is not authorized.
        """
        if not self.is_authorized(caller):
            raise Unauthorized(caller)


class AllowListAccessControl(AccessControl):
    """Access control backed by a fixed set of admin addresses.

    :ivar admins: Checksummed admin addresses.
    """

    def __init__(self, admins: list[str]) -> None:
        """Initialize the allow list.

        :param admins: Admin addresses in any hex casing.
        """
        self.admins = {normalize_address(a, "admin address") for a in admins}

    def is_authorized(self, caller: str) -> bool:
        try:
            return normalize_address(caller, "caller") in self.admins
        except InvalidConfiguration:
            return False
