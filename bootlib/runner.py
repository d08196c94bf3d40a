"""Module registry and sequential runner."""

from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from .base import BaseModule
from .config import RunConfiguration
from .distro import DistributionProfile
from .errors import BootstrapError
from .firewall import FirewallModule
from .gateway import ExecutionGateway
from .packages import PackagesModule
from .security import HardeningModule, SshModule
from .users import UsersModule


class ModuleId(Enum):
    PACKAGES = "packages"
    USERS = "users"
    HARDENING = "hardening"
    SSH = "ssh"
    FIREWALL = "firewall"


# Canonical order used by --all
ALL_MODULES = tuple(m.value for m in ModuleId)

MODULES: Dict[ModuleId, Callable[[], BaseModule]] = {
    ModuleId.PACKAGES: PackagesModule,
    ModuleId.USERS: UsersModule,
    ModuleId.HARDENING: HardeningModule,
    ModuleId.SSH: SshModule,
    ModuleId.FIREWALL: FirewallModule,
}


def parse_module_list(value: str) -> List[str]:
    """Split a comma-separated module list, dropping blanks. Order and duplicates are kept."""
    return [name.strip() for name in value.split(",") if name.strip()]


def lookup(name: str) -> Optional[ModuleId]:
    """Resolve a module name, or None if it is not a known module."""
    try:
        return ModuleId(name.strip().lower())
    except ValueError:
        return None


def run_all(
    names: Sequence[str],
    config: RunConfiguration,
    profile: DistributionProfile,
    gateway: ExecutionGateway,
    registry: Mapping[ModuleId, Callable[[], BaseModule]] = MODULES,
) -> List[str]:
    """
    Run modules one at a time in the given order.

    Unknown names are logged and skipped. The first error stops the run;
    it is re-raised with the failing module's name attached. Modules that
    already ran are not rolled back.

    Returns:
        Names of the modules that ran
    """
    completed = []
    for name in names:
        module_id = lookup(name)
        if module_id is None:
            gateway.logger.info(f"Unknown module: {name} (skipped)")
            continue

        gateway.logger.info(f"==> Module: {module_id.value}")
        module = registry[module_id]()
        try:
            module.apply(config, profile, gateway)
        except BootstrapError as e:
            if e.module is None:
                e.module = module_id.value
            raise
        except Exception as e:
            raise BootstrapError(f"{type(e).__name__}: {e}", module=module_id.value) from e
        completed.append(module_id.value)

    return completed
