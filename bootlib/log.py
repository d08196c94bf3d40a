"""Append-only run log for linux-bootstrap.

Every entry is written to the log file as

    [<ISO-8601 timestamp>] [<LEVEL>] <message>

and mirrored to stdout when verbose mode is on. Logging never raises to
the caller: if the log file cannot be opened a warning goes to stderr and
the run continues with in-memory entries only.
"""

import sys
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from logging import ERROR, INFO, FileHandler, Formatter, Logger, LogRecord
from pathlib import Path
from typing import List, Optional, Union

from .paths import LOG_FILE

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


class Severity(Enum):
    INFO = INFO
    ERROR = ERROR


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    severity: Severity
    message: str


class IsoFormatter(Formatter):
    """Formatter that stamps records with a local ISO-8601 time (seconds)."""

    def formatTime(self, record: LogRecord, datefmt: Optional[str] = None) -> str:
        created = datetime.fromtimestamp(record.created).astimezone()
        return created.isoformat(timespec="seconds")


class RunLogger:
    """Process-wide log sink, one per run."""

    def __init__(self, log_file: Union[str, Path] = LOG_FILE, verbose: bool = False):
        self.log_file = Path(log_file)
        self.verbose = verbose
        self.entries: List[LogEntry] = []

        self._logger = Logger(f"bootlib.run[{self.log_file}]", level=INFO)
        self._logger.propagate = False
        self._handler = self._open_handler()

    def _open_handler(self) -> Optional[FileHandler]:
        """Create the log directory and attach a file handler to it."""
        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = FileHandler(self.log_file, encoding="utf-8")
        except OSError as e:
            print(f"WARNING: cannot write log file {self.log_file}: {e}", file=sys.stderr)
            return None
        handler.setFormatter(IsoFormatter(LOG_FORMAT))
        self._logger.addHandler(handler)
        return handler

    @property
    def persistent(self) -> bool:
        """True if entries reach the log file."""
        return self._handler is not None

    def record(self, severity: Severity, message: str, console: bool = False) -> None:
        """
        Append an entry to the log.

        Args:
            severity: Entry severity
            message: Entry text
            console: Echo to stdout even when not in verbose mode
        """
        self.entries.append(LogEntry(datetime.now().astimezone(), severity, message))
        self._logger.log(severity.value, message)
        if self.verbose or console:
            print(message)

    def info(self, message: str, console: bool = False) -> None:
        self.record(Severity.INFO, message, console=console)

    def error(self, message: str) -> None:
        self.record(Severity.ERROR, message)

    def messages(self, severity: Optional[Severity] = None) -> List[str]:
        """Messages logged so far, optionally filtered by severity."""
        return [e.message for e in self.entries if severity is None or e.severity == severity]

    def close(self) -> None:
        """Flush and detach the file handler."""
        if self._handler is not None:
            self._logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
