"""linux-bootstrap - modular, idempotent provisioning for fresh Linux hosts."""

from .config import Manifest, RunConfiguration, load_manifest
from .distro import DistributionProfile, PackageFamily, resolve
from .errors import (
    ActionExecutionError,
    BootstrapError,
    ConfigError,
    DetectionError,
    InterruptedRunError,
    PrivilegeError,
    UnsupportedFamilyError,
    UsageError,
)
from .gateway import Action, ActionKind, ExecutionGateway, ExecutionResult
from .log import RunLogger, Severity
from .runner import ALL_MODULES, MODULES, ModuleId, run_all

__all__ = [
    "Manifest",
    "RunConfiguration",
    "load_manifest",
    "DistributionProfile",
    "PackageFamily",
    "resolve",
    "ActionExecutionError",
    "BootstrapError",
    "ConfigError",
    "DetectionError",
    "InterruptedRunError",
    "PrivilegeError",
    "UnsupportedFamilyError",
    "UsageError",
    "Action",
    "ActionKind",
    "ExecutionGateway",
    "ExecutionResult",
    "RunLogger",
    "Severity",
    "ALL_MODULES",
    "MODULES",
    "ModuleId",
    "run_all",
]
