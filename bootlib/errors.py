"""Error taxonomy for linux-bootstrap.

Every error is terminal: the entry point logs it and exits with status 1.
"""

from typing import Optional


class BootstrapError(Exception):
    """Base class for all run-aborting errors."""

    def __init__(self, message: str, module: Optional[str] = None):
        super().__init__(message)
        self.module = module


class UsageError(BootstrapError):
    """Bad or missing command line flags or module selection."""


class ConfigError(BootstrapError):
    """The provisioning manifest is missing, malformed or has bad values."""


class PrivilegeError(BootstrapError):
    """Not running with root privileges."""


class DetectionError(BootstrapError):
    """The OS identity source is absent or unreadable."""


class UnsupportedFamilyError(BootstrapError):
    """A module needs a concrete package family but none was resolved."""


class ActionExecutionError(BootstrapError):
    """An action performed through the execution gateway failed."""

    def __init__(self, label: str, output: str = "", module: Optional[str] = None):
        message = f"Action failed: {label}"
        last_line = output.strip().splitlines()[-1] if output.strip() else ""
        if last_line:
            message += f" ({last_line})"
        super().__init__(message, module=module)
        self.label = label
        self.output = output


class InterruptedRunError(BootstrapError):
    """The run was interrupted by a signal (SIGINT or SIGTERM)."""
