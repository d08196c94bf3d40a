"""Run configuration and the TOML provisioning manifest."""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from .distro import PackageFamily, parse_family
from .errors import ConfigError
from .paths import (
    DEFAULT_MANIFEST,
    HOME_ROOT,
    LOG_FILE,
    OS_RELEASE,
    SSHD_CONFIG,
    SSHD_CONFIG_BACKUP,
    SYSCTL_DROPIN,
)

DEFAULT_PACKAGES: Dict[PackageFamily, Tuple[str, ...]] = {
    PackageFamily.APT: ("curl", "git", "vim", "ufw"),
    PackageFamily.DNF: ("curl", "git", "vim", "firewalld"),
    PackageFamily.PACMAN: ("curl", "git", "vim"),
}

DEFAULT_SYSCTL: Dict[str, str] = {"net.ipv4.ip_forward": "0"}

# Recognized keys per manifest section; [packages] keys are family names
MANIFEST_KEYS: Dict[str, Tuple[str, ...]] = {
    "distro": ("os_release", "family"),
    "packages": (),
    "users": ("name", "shell", "home_root"),
    "hardening": ("dropin", "sysctl"),
    "ssh": ("config", "backup", "services"),
}


@dataclass(frozen=True)
class Manifest:
    """Domain data consumed by the modules (package lists, paths, names)."""

    os_release: Path = OS_RELEASE
    family_override: Optional[str] = None
    packages: Dict[PackageFamily, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_PACKAGES)
    )
    user_name: str = "deploy"
    user_shell: str = "/bin/bash"
    home_root: Path = HOME_ROOT
    sysctl_dropin: Path = SYSCTL_DROPIN
    sysctl: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SYSCTL))
    sshd_config: Path = SSHD_CONFIG
    sshd_backup: Path = SSHD_CONFIG_BACKUP
    ssh_services: Tuple[str, ...] = ("sshd", "ssh")

    @property
    def user_home(self) -> Path:
        return self.home_root / self.user_name


@dataclass(frozen=True)
class RunConfiguration:
    """Everything a run needs, built once by the entry point."""

    dry_run: bool = False
    verbose: bool = False
    force: bool = False
    modules: Tuple[str, ...] = ()
    log_file: Path = LOG_FILE
    manifest: Manifest = field(default_factory=Manifest)


def _section(data: dict, name: str) -> dict:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table")
    allowed = MANIFEST_KEYS[name]
    unknown = [key for key in section if allowed and key not in allowed]
    if unknown:
        raise ConfigError(f"Unknown key(s) in [{name}]: {', '.join(unknown)}")
    return section


def _string(section: dict, key: str, where: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{where}.{key} must be a non-empty string")
    return value


def _string_list(value, where: str, allow_empty: bool = True) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ConfigError(f"{where} must be a list of non-empty strings")
    if not value and not allow_empty:
        raise ConfigError(f"{where} must not be empty")
    return tuple(value)


def parse_manifest(data: dict) -> Manifest:
    """
    Build a Manifest from parsed TOML, filling gaps with defaults.

    Raises:
        ConfigError: unknown section or key, or a value has the wrong type
    """
    defaults = Manifest()
    unknown = [name for name in data if name not in MANIFEST_KEYS]
    if unknown:
        raise ConfigError(f"Unknown manifest section(s): {', '.join(unknown)}")

    distro = _section(data, "distro")
    family_override = distro.get("family")
    if family_override is not None:
        if not isinstance(family_override, str):
            raise ConfigError("distro.family must be a string")
        parse_family(family_override)

    packages = dict(defaults.packages)
    for name, value in _section(data, "packages").items():
        family = parse_family(name)
        packages[family] = _string_list(value, f"packages.{name}")

    users = _section(data, "users")
    hardening = _section(data, "hardening")
    sysctl = hardening.get("sysctl", defaults.sysctl)
    if not isinstance(sysctl, dict) or not sysctl:
        raise ConfigError("hardening.sysctl must be a non-empty table")
    for key, value in sysctl.items():
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise ConfigError(f"hardening.sysctl.{key} must be a string or integer")

    ssh = _section(data, "ssh")
    services = ssh.get("services", list(defaults.ssh_services))

    return Manifest(
        os_release=Path(_string(distro, "os_release", "distro", str(defaults.os_release))),
        family_override=family_override,
        packages=packages,
        user_name=_string(users, "name", "users", defaults.user_name),
        user_shell=_string(users, "shell", "users", defaults.user_shell),
        home_root=Path(_string(users, "home_root", "users", str(defaults.home_root))),
        sysctl_dropin=Path(_string(hardening, "dropin", "hardening", str(defaults.sysctl_dropin))),
        sysctl={str(k): str(v) for k, v in sysctl.items()},
        sshd_config=Path(_string(ssh, "config", "ssh", str(defaults.sshd_config))),
        sshd_backup=Path(_string(ssh, "backup", "ssh", str(defaults.sshd_backup))),
        ssh_services=_string_list(services, "ssh.services", allow_empty=False),
    )


def load_manifest(path: Optional[Union[str, Path]] = None) -> Manifest:
    """
    Load the provisioning manifest.

    Args:
        path: Explicit manifest path; None uses configs/bootstrap.toml if present

    Raises:
        ConfigError: explicit path missing, invalid TOML or bad values
    """
    if path is None:
        if not DEFAULT_MANIFEST.exists():
            return Manifest()
        path = DEFAULT_MANIFEST

    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Manifest {path} not found")
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}")

    return parse_manifest(data)
