"""Systemd service actions."""

from typing import Sequence

from .errors import ActionExecutionError
from .gateway import Action, ExecutionGateway, command


def systemctl(*args: str) -> Action:
    """Build a systemctl action."""
    return command("systemctl", *args)


def reload_service(gateway: ExecutionGateway, candidates: Sequence[str]) -> str:
    """
    Reload a service whose unit name varies by distribution.

    Each candidate is tried in order until one reloads; only the last
    candidate's failure is fatal.

    Args:
        gateway: Execution gateway
        candidates: Unit names to try (e.g. ["sshd", "ssh"])

    Returns:
        The unit name that was reloaded
    """
    if not candidates:
        raise ValueError("reload_service needs at least one service name")

    *fallbacks, last = candidates
    for service in fallbacks:
        result = gateway.execute(systemctl("reload", service))
        if result.succeeded:
            return service
        gateway.logger.info(f"Reload of {service} failed, trying next unit name")

    result = gateway.execute(systemctl("reload", last))
    if not result.succeeded:
        raise ActionExecutionError(f"systemctl reload {' or '.join(candidates)}", result.output)
    return last
