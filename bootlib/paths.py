"""Centralized path constants for linux-bootstrap.

Host paths here are defaults only; the provisioning manifest can
override every one of them.
"""

from pathlib import Path

# Project paths (relative to this file's location)
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
CONFIGS_DIR = PROJECT_ROOT / "configs"
DEFAULT_MANIFEST = CONFIGS_DIR / "bootstrap.toml"
TEMPLATES_DIR = Path(__file__).parent / "templates"

# Log destination, relative to the working directory
LOG_FILE = Path("logs/linux-bootstrap.log")

# OS identity
OS_RELEASE = Path("/etc/os-release")

# System paths - users
HOME_ROOT = Path("/home")

# System paths - kernel parameters
SYSCTL_DROPIN = Path("/etc/sysctl.d/99-custom.conf")

# System paths - ssh
SSHD_CONFIG = Path("/etc/ssh/sshd_config")
SSHD_CONFIG_BACKUP = Path("/etc/ssh/sshd_config.bak")
