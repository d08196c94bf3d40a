"""Operational account creation."""

import pwd

from .base import BaseModule
from .config import RunConfiguration
from .distro import DistributionProfile
from .gateway import ExecutionGateway, command, make_dir


def account_exists(name: str) -> bool:
    """Check the passwd database for an account."""
    try:
        pwd.getpwnam(name)
    except KeyError:
        return False
    return True


class UsersModule(BaseModule):
    """
    Creates the operational account and its ~/.ssh directory.

    Installing a public key is left to the operator.
    """

    name = "users"

    def apply(
        self,
        config: RunConfiguration,
        profile: DistributionProfile,
        gateway: ExecutionGateway,
    ) -> None:
        self.gateway = gateway
        manifest = config.manifest
        user = manifest.user_name

        if account_exists(user):
            self.log(f"User {user} already exists")
            return

        ssh_dir = manifest.user_home / ".ssh"
        gateway.require(command("useradd", "-m", "-d", str(manifest.user_home), "-s", manifest.user_shell, user))
        gateway.require(make_dir(ssh_dir, mode=0o700, owner=user))
        self.log(
            f"User '{user}' created (remember to add public key in {ssh_dir / 'authorized_keys'})"
        )
