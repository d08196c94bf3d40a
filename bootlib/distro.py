"""Distribution detection from os-release metadata."""

import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import ConfigError, DetectionError
from .paths import OS_RELEASE


class PackageFamily(Enum):
    APT = "apt"
    DNF = "dnf"
    PACMAN = "pacman"
    UNKNOWN = ""

    @property
    def label(self) -> str:
        return self.value or "unknown"


FAMILY_BY_ID: Dict[str, PackageFamily] = {
    "debian": PackageFamily.APT,
    "ubuntu": PackageFamily.APT,
    "rhel": PackageFamily.DNF,
    "centos": PackageFamily.DNF,
    "fedora": PackageFamily.DNF,
    "rocky": PackageFamily.DNF,
    "almalinux": PackageFamily.DNF,
    "arch": PackageFamily.PACMAN,
}


@dataclass(frozen=True)
class DistributionProfile:
    id: str
    family: PackageFamily
    name: str = ""


def family_for(distro_id: str) -> PackageFamily:
    """Map a distribution id to its package family (UNKNOWN if not in the table)."""
    return FAMILY_BY_ID.get(distro_id.strip().lower(), PackageFamily.UNKNOWN)


def parse_family(value: str) -> PackageFamily:
    """Parse a family name such as "apt" (used for manifest overrides)."""
    try:
        family = PackageFamily(value.strip().lower())
    except ValueError:
        family = None
    if family is None or family is PackageFamily.UNKNOWN:
        choices = ", ".join(f.value for f in PackageFamily if f.value)
        raise ConfigError(f"Invalid package family '{value}' (expected one of: {choices})")
    return family


def parse_os_release(content: str) -> Dict[str, str]:
    """
    Parse os-release content into a dict.

    Values follow shell quoting rules; comments and malformed lines are skipped.
    """
    fields = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value.strip("\"'")]
        fields[key.strip()] = " ".join(parts)
    return fields


def resolve(
    os_release: Union[str, Path] = OS_RELEASE,
    override: Optional[str] = None,
) -> DistributionProfile:
    """
    Detect the running distribution.

    Args:
        os_release: Path to the os-release file
        override: Package family name that replaces the table lookup

    Returns:
        DistributionProfile; family is UNKNOWN for ids outside the table

    Raises:
        DetectionError: os-release is missing or has no ID
    """
    os_release = Path(os_release)
    try:
        content = os_release.read_text()
    except FileNotFoundError:
        raise DetectionError(f"Unable to detect distribution ({os_release} not found).")
    except OSError as e:
        raise DetectionError(f"Unable to detect distribution ({os_release}: {e}).")

    fields = parse_os_release(content)
    distro_id = fields.get("ID", "").strip().lower()
    if not distro_id:
        raise DetectionError(f"Unable to detect distribution (no ID in {os_release}).")

    family = parse_family(override) if override else family_for(distro_id)
    name = fields.get("PRETTY_NAME") or fields.get("NAME") or distro_id
    return DistributionProfile(id=distro_id, family=family, name=name)
