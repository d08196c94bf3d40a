"""Execution gateway: the single path for every host-mutating action.

Providers never touch the host directly. They build an Action and hand it
to ExecutionGateway, which either performs it or, in dry-run mode, only
logs what would have been done.
"""

import shlex
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .errors import ActionExecutionError
from .files import copy_file, ensure_dir, write_file
from .log import RunLogger


class ActionKind(Enum):
    COMMAND = "command"
    WRITE_FILE = "write_file"
    COPY_FILE = "copy_file"
    ENSURE_DIR = "ensure_dir"


@dataclass(frozen=True)
class Action:
    """One externally-mutating operation."""

    kind: ActionKind
    label: str
    argv: Tuple[str, ...] = ()
    path: Optional[Path] = None
    source: Optional[Path] = None
    content: str = ""
    mode: Optional[int] = None
    owner: Optional[str] = None


@dataclass(frozen=True)
class ExecutionResult:
    succeeded: bool
    output: str = ""
    simulated: bool = False
    changed: bool = True


def command(*argv: str, label: Optional[str] = None) -> Action:
    """Build a COMMAND action; the label defaults to the quoted command line."""
    return Action(ActionKind.COMMAND, label or shlex.join(argv), argv=tuple(argv))


def write(path: Union[str, Path], content: str, mode: Optional[int] = None,
          label: Optional[str] = None) -> Action:
    path = Path(path)
    return Action(
        ActionKind.WRITE_FILE,
        label or f"Write {path}",
        path=path,
        content=content,
        mode=mode,
    )


def copy(source: Union[str, Path], dest: Union[str, Path], label: Optional[str] = None) -> Action:
    source, dest = Path(source), Path(dest)
    return Action(ActionKind.COPY_FILE, label or f"Copy {source} to {dest}", path=dest, source=source)


def make_dir(path: Union[str, Path], mode: Optional[int] = None, owner: Optional[str] = None,
             label: Optional[str] = None) -> Action:
    path = Path(path)
    if label is None:
        label = f"Create directory {path}"
        if mode is not None:
            label += f" (mode {oct(mode)[2:]})"
    return Action(ActionKind.ENSURE_DIR, label, path=path, mode=mode, owner=owner)


def _run_command(argv: Sequence[str]) -> ExecutionResult:
    """Run a command, capturing stdout and stderr together."""
    try:
        result = subprocess.run(
            list(argv),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as e:
        return ExecutionResult(False, f"{argv[0]}: {e.strerror or e}")
    output = result.stdout or ""
    if result.returncode != 0:
        output += f"exit status {result.returncode}\n"
    return ExecutionResult(result.returncode == 0, output)


def perform_action(action: Action) -> ExecutionResult:
    """
    Perform an action for real.

    Failures are returned as an unsuccessful result, never raised.
    """
    if action.kind is ActionKind.COMMAND:
        return _run_command(action.argv)

    try:
        if action.kind is ActionKind.WRITE_FILE:
            changed = write_file(action.path, action.content, mode=action.mode)
        elif action.kind is ActionKind.COPY_FILE:
            changed = copy_file(action.source, action.path)
        elif action.kind is ActionKind.ENSURE_DIR:
            changed = ensure_dir(action.path, owner=action.owner, mode=action.mode)
        else:
            return ExecutionResult(False, f"unsupported action kind: {action.kind}")
    except (OSError, LookupError) as e:
        return ExecutionResult(False, str(e))

    if not changed:
        return ExecutionResult(True, f"{action.path} already up to date\n", changed=False)
    return ExecutionResult(True)


class ExecutionGateway:
    """
    Mediates every host-mutating action.

    In dry-run mode no action reaches the performer: each one is logged as
    "DRY-RUN: <label>" and reported as a simulated success.
    """

    def __init__(
        self,
        logger: RunLogger,
        dry_run: bool = False,
        performer: Optional[Callable[[Action], ExecutionResult]] = None,
    ):
        self.logger = logger
        self.dry_run = dry_run
        self._performer = performer
        self.simulated: List[str] = []
        self.performed = 0
        self.changes: List[str] = []

    def execute(self, action: Action) -> ExecutionResult:
        """Perform or simulate one action and log the outcome."""
        if self.dry_run:
            self.simulated.append(action.label)
            self.logger.info(f"DRY-RUN: {action.label}", console=True)
            return ExecutionResult(True, simulated=True)

        self.logger.info(f"Running: {action.label}")
        performer = self._performer or perform_action
        self.performed += 1
        result = performer(action)
        for line in result.output.splitlines():
            self.logger.info(line)
        if result.succeeded and result.changed:
            self.changes.append(action.label)
        return result

    def require(self, action: Action) -> ExecutionResult:
        """Like execute(), but a failed action raises ActionExecutionError."""
        result = self.execute(action)
        if not result.succeeded:
            raise ActionExecutionError(action.label, result.output)
        return result
