"""Cross-distro baseline package installation."""

from typing import List, Sequence

from .base import BaseModule
from .config import RunConfiguration
from .distro import DistributionProfile, PackageFamily
from .gateway import Action, ExecutionGateway, command


def _get_refresh_cmd(family: PackageFamily) -> List[str]:
    """Get the package list refresh command, if the family has a separate one."""
    return {
        PackageFamily.APT: ["apt", "update", "-y"],
        PackageFamily.DNF: [],
        PackageFamily.PACMAN: [],
    }[family]


def _get_install_cmd(family: PackageFamily) -> List[str]:
    """Get the install command for a package family."""
    return {
        PackageFamily.APT: ["apt", "install", "-y"],
        PackageFamily.DNF: ["dnf", "install", "-y"],
        PackageFamily.PACMAN: ["pacman", "-Sy", "--noconfirm"],
    }[family]


def install_actions(family: PackageFamily, packages: Sequence[str]) -> List[Action]:
    """
    Build the actions that install packages for a family.

    Pacman refreshes and installs in one step; APT refreshes first.
    """
    actions = []
    refresh = _get_refresh_cmd(family)
    if refresh:
        actions.append(command(*refresh))
    if packages:
        actions.append(command(*_get_install_cmd(family), *packages))
    return actions


class PackagesModule(BaseModule):
    """Installs the baseline toolset for the resolved package family."""

    name = "packages"

    def apply(
        self,
        config: RunConfiguration,
        profile: DistributionProfile,
        gateway: ExecutionGateway,
    ) -> None:
        self.gateway = gateway
        family = self.require_family(profile)
        packages = config.manifest.packages.get(family, ())

        if not packages:
            self.log(f"No baseline packages configured for {family.label}")
        else:
            self.log(f"Packages to ensure: {', '.join(packages)}")

        for action in install_actions(family, packages):
            gateway.require(action)
