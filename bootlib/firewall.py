"""Host firewall setup: allow SSH, then enable the firewall."""

from typing import List

from .base import BaseModule
from .config import RunConfiguration
from .distro import DistributionProfile, PackageFamily
from .gateway import Action, ExecutionGateway, command
from .packages import install_actions
from .services import systemctl


def firewall_actions(family: PackageFamily) -> List[Action]:
    """Actions that open SSH and enable the family's firewall."""
    ufw = [
        command("ufw", "allow", "OpenSSH"),
        command("ufw", "--force", "enable"),
    ]
    if family is PackageFamily.APT:
        return ufw
    if family is PackageFamily.DNF:
        return [
            systemctl("enable", "--now", "firewalld"),
            command("firewall-cmd", "--permanent", "--add-service=ssh"),
            command("firewall-cmd", "--reload"),
        ]
    if family is PackageFamily.PACMAN:
        return install_actions(family, ["ufw"]) + ufw
    return []


class FirewallModule(BaseModule):
    """Opens SSH in the host firewall and turns the firewall on."""

    name = "firewall"

    def apply(
        self,
        config: RunConfiguration,
        profile: DistributionProfile,
        gateway: ExecutionGateway,
    ) -> None:
        self.gateway = gateway
        family = self.require_family(profile)
        for action in firewall_actions(family):
            gateway.require(action)
        self.log(f"Firewall enabled with SSH allowed ({family.label}).")
