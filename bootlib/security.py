"""Security hardening routines: kernel parameters and SSH lockdown."""

import re
from typing import Dict

from .base import BaseModule
from .config import RunConfiguration
from .distro import DistributionProfile
from .errors import ActionExecutionError, ConfigError
from .files import read_file, render_template
from .gateway import ExecutionGateway, command, copy, write
from .services import reload_service

SYSCTL_HEADER = "# Kernel hardening - managed by linux-bootstrap"

# "key = value", optionally prefixed with "-" (ignore errors); slashes are
# an accepted alternative to dots in keys
_SYSCTL_LINE = re.compile(r"^\s*-?\s*([A-Za-z0-9_.\-/]+)\s*=")

_PERMIT_ROOT_LOGIN = re.compile(r"^#?PermitRootLogin.*$", re.MULTILINE)

# Directives after the first Match line only apply to that block
_MATCH_BLOCK = re.compile(r"^\s*Match\b", re.MULTILINE)


def _sysctl_key(key: str) -> str:
    return key.strip().replace("/", ".")


def upsert_sysctl(existing: str, settings: Dict[str, str]) -> str:
    """
    Merge sysctl settings into drop-in file content.

    Lines setting a managed key are replaced, every other line is kept.
    Applying the same settings twice yields the same content.

    Args:
        existing: Current file content ("" if absent)
        settings: Keys and values to enforce

    Returns:
        New file content
    """
    managed = {_sysctl_key(k) for k in settings}
    preserved = []
    for line in existing.splitlines():
        if line.strip() == SYSCTL_HEADER:
            continue
        match = _SYSCTL_LINE.match(line)
        if match and _sysctl_key(match.group(1)) in managed:
            continue
        preserved.append(line)

    return render_template(
        "sysctl.conf.j2",
        {"header": SYSCTL_HEADER, "preserved": preserved, "settings": settings},
    )


def disable_root_login(content: str) -> str:
    """
    Set PermitRootLogin to no, replacing commented or active directives.

    When the directive is absent it is inserted ahead of the first Match
    block so that it stays global.
    """
    if _PERMIT_ROOT_LOGIN.search(content):
        return _PERMIT_ROOT_LOGIN.sub("PermitRootLogin no", content)
    match = _MATCH_BLOCK.search(content)
    if match:
        return content[:match.start()] + "PermitRootLogin no\n" + content[match.start():]
    if content and not content.endswith("\n"):
        content += "\n"
    return content + "PermitRootLogin no\n"


class HardeningModule(BaseModule):
    """Enforces kernel parameters through a sysctl drop-in file."""

    name = "hardening"

    def apply(
        self,
        config: RunConfiguration,
        profile: DistributionProfile,
        gateway: ExecutionGateway,
    ) -> None:
        self.gateway = gateway
        dropin = config.manifest.sysctl_dropin
        settings = config.manifest.sysctl

        current = read_file(dropin)
        content = upsert_sysctl(current, settings)

        if content == current:
            self.log(f"Sysctl drop-in {dropin} already up to date")
        else:
            keys = ", ".join(settings)
            gateway.require(write(dropin, content, mode=0o644, label=f"Set {keys} in {dropin}"))

        gateway.require(command("sysctl", "--system"))
        self.log("Basic hardening applied (sysctl).")


class SshModule(BaseModule):
    """Disables root login over SSH and reloads the daemon."""

    name = "ssh"

    def apply(
        self,
        config: RunConfiguration,
        profile: DistributionProfile,
        gateway: ExecutionGateway,
    ) -> None:
        self.gateway = gateway
        manifest = config.manifest
        sshd_config = manifest.sshd_config

        if not sshd_config.is_file():
            raise ConfigError(f"SSH config {sshd_config} not found")

        current = read_file(sshd_config)
        content = disable_root_login(current)
        if current and content == current:
            self.log(f"SSH config {sshd_config} already up to date")
            return

        gateway.require(copy(sshd_config, manifest.sshd_backup))
        gateway.require(write(sshd_config, content, label=f"Set PermitRootLogin no in {sshd_config}"))

        validate = command("sshd", "-t", "-f", str(sshd_config))
        result = gateway.execute(validate)
        if not result.succeeded:
            self.log(f"Validation failed, restoring {sshd_config} from {manifest.sshd_backup}")
            gateway.require(copy(
                manifest.sshd_backup, sshd_config,
                label=f"Restore {sshd_config} from {manifest.sshd_backup}",
            ))
            raise ActionExecutionError(validate.label, result.output)

        service = reload_service(gateway, manifest.ssh_services)
        self.log(f"SSHD configured and reloaded ({service}).")
