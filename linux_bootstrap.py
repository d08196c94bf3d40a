#!/usr/bin/env python3
"""
linux-bootstrap - modular, idempotent provisioning for fresh Linux hosts.

Detects the distribution, then applies the selected modules in order:
packages, users, hardening, ssh, firewall. Every change is logged to
logs/linux-bootstrap.log; --dry-run logs what would change instead.

Usage:
    sudo ./linux_bootstrap.py --modules=packages,users
    sudo ./linux_bootstrap.py --all --verbose
    sudo ./linux_bootstrap.py --all --dry-run
    sudo ./linux_bootstrap.py --all --config=configs/bootstrap.toml
"""

import argparse
import os
import signal
import sys
import threading
from pathlib import Path
from typing import Callable, List, Optional

# Add bootlib to path
sys.path.insert(0, str(Path(__file__).parent))

from bootlib.config import RunConfiguration, load_manifest
from bootlib.distro import DistributionProfile, resolve
from bootlib.errors import BootstrapError, InterruptedRunError, PrivilegeError, UsageError
from bootlib.gateway import ExecutionGateway
from bootlib.log import RunLogger
from bootlib.paths import LOG_FILE
from bootlib.runner import ALL_MODULES, parse_module_list, run_all


class UsageParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting."""

    def error(self, message: str) -> None:
        raise UsageError(message)


def build_parser() -> UsageParser:
    parser = UsageParser(
        prog="linux-bootstrap",
        description="linux-bootstrap - modular, idempotent provisioning for fresh Linux hosts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
        add_help=False,
    )
    parser.add_argument(
        "-h", "--help",
        action="store_true",
        help="Display this help message",
    )
    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Simulate actions (do not change anything)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose mode",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Accepted for compatibility; no module uses it yet",
    )
    parser.add_argument(
        "--modules",
        metavar="LIST",
        type=parse_module_list,
        default=[],
        help=f"Comma-separated modules to run. Ex: {','.join(ALL_MODULES)}",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Run all available modules",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        type=Path,
        help="Provisioning manifest (TOML); defaults to configs/bootstrap.toml",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        type=Path,
        default=LOG_FILE,
        help=f"Log destination (default: {LOG_FILE})",
    )
    return parser


def build_config(args: argparse.Namespace) -> RunConfiguration:
    """Turn parsed flags into the run configuration."""
    modules = ALL_MODULES if args.all else tuple(args.modules)
    return RunConfiguration(
        dry_run=args.dry_run,
        verbose=args.verbose,
        force=args.force,
        modules=tuple(modules),
        log_file=args.log_file,
        manifest=load_manifest(args.config),
    )


def ensure_root() -> None:
    """Fail unless running as root."""
    if os.geteuid() != 0:
        raise PrivilegeError("This script must be run as root (or via sudo).")


class Bootstrap:
    """Main orchestration class: preconditions, detection, modules, summary."""

    def __init__(self, config: RunConfiguration, logger: RunLogger):
        self.config = config
        self.logger = logger
        self.gateway = ExecutionGateway(logger, dry_run=config.dry_run)
        self.profile: Optional[DistributionProfile] = None

    def log(self, msg: str, console: bool = False) -> None:
        self.logger.info(msg, console=console)

    def detect_distro(self) -> DistributionProfile:
        manifest = self.config.manifest
        self.profile = resolve(manifest.os_release, override=manifest.family_override)
        self.log(
            f"Detected distribution: {self.profile.id} "
            f"(package manager: {self.profile.family.label})"
        )
        return self.profile

    def run(self) -> List[str]:
        """
        Run the selected modules.

        Returns:
            Names of the modules that ran

        Raises:
            BootstrapError: on the first failure
        """
        ensure_root()
        self.detect_distro()
        if not self.config.modules:
            raise UsageError("No modules selected (use --modules=LIST or --all)")

        if self.config.force:
            self.log("--force given; no module currently changes behavior for it")

        completed = run_all(self.config.modules, self.config, self.profile, self.gateway)
        self.summarize()
        self.log(f"Installation completed. See {self.config.log_file} for details.", console=True)
        return completed

    def summarize(self) -> None:
        """Log the changes made, or the dry-run notice."""
        if self.config.dry_run:
            self.log(
                f"Dry-run complete - no changes were made "
                f"({len(self.gateway.simulated)} actions simulated)",
                console=True,
            )
        elif self.gateway.changes:
            self.log(f"Changes made: {len(self.gateway.changes)}")
            for change in self.gateway.changes:
                self.log(f"  - {change}")
        else:
            self.log("No changes needed - system is up to date")


def report_error(logger: RunLogger, error: BootstrapError) -> None:
    """Log a fatal error, naming the module it happened in."""
    message = str(error)
    if error.module:
        message = f"Module {error.module} failed: {message}"
    logger.error(message)
    print(f"Error: {message}", file=sys.stderr)
    print(f"Interrupted or failed. Check {logger.log_file}", file=sys.stderr)


def _raise_interrupted(signum: int, frame) -> None:
    raise InterruptedRunError(f"Interrupted by {signal.Signals(signum).name}")


def _install_sigterm_handler() -> Callable[[], None]:
    """Route SIGTERM into InterruptedRunError; returns a restore function."""
    if threading.current_thread() is not threading.main_thread():
        return lambda: None
    previous = signal.signal(signal.SIGTERM, _raise_interrupted)
    return lambda: signal.signal(signal.SIGTERM, previous)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        logger = RunLogger(LOG_FILE)
        report_error(logger, e)
        parser.print_usage(sys.stderr)
        logger.close()
        return 1

    if args.help:
        parser.print_help()
        return 0

    logger = RunLogger(args.log_file, verbose=args.verbose)
    restore_sigterm = _install_sigterm_handler()
    try:
        config = build_config(args)
        Bootstrap(config, logger).run()
        return 0
    except UsageError as e:
        report_error(logger, e)
        parser.print_help()
        return 1
    except BootstrapError as e:
        report_error(logger, e)
        return 1
    except KeyboardInterrupt:
        report_error(logger, InterruptedRunError("Interrupted by SIGINT"))
        return 1
    except Exception as e:
        report_error(logger, BootstrapError(f"Unexpected failure: {e}"))
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        restore_sigterm()
        logger.close()


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
