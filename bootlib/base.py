"""Base class for linux-bootstrap modules."""

from .config import RunConfiguration
from .distro import DistributionProfile, PackageFamily
from .errors import UnsupportedFamilyError
from .gateway import ExecutionGateway


class BaseModule:
    """
    Base class for capability providers.

    A module applies one configuration step. It must be idempotent and
    must route every host change through the execution gateway. Read-only
    probes (does the account exist, what does a file contain) may touch
    the host directly.
    """

    name = ""

    def __init__(self):
        self.gateway: ExecutionGateway = None

    def apply(
        self,
        config: RunConfiguration,
        profile: DistributionProfile,
        gateway: ExecutionGateway,
    ) -> None:
        raise NotImplementedError

    def log(self, msg: str) -> None:
        """
        Log an informational message through the gateway's logger.

        Args:
            msg: Message to log
        """
        self.gateway.logger.info(msg)

    def require_family(self, profile: DistributionProfile) -> PackageFamily:
        """
        Return the profile's package family, failing if it is UNKNOWN.

        Raises:
            UnsupportedFamilyError: no concrete family was resolved
        """
        if profile.family is PackageFamily.UNKNOWN:
            raise UnsupportedFamilyError(
                f"Unsupported package manager: {profile.family.label} (distribution {profile.id})",
                module=self.name,
            )
        return profile.family
