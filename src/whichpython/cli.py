"""Command-line interface: ``whichpython list | interpreter | active``."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from . import (
    __version__,
    enumerate_conda_environments,
    enumerate_environments,
    enumerate_in_directories,
    from_interpreter_checked,
    get_active_conda_environment,
)
from .config import DiscoveryConfig, load_config
from .discovery import CancellationToken, OperationCancelled, PythonEnvironment
from .errors import InterpreterError

logger = logging.getLogger(__name__)

SECURITY_NOTE = (
    "Note: discovery launches candidate interpreters found on PATH and in the "
    "given directories to query their version and library paths."
)


def format_environment(environment: PythonEnvironment, home_only: bool = False) -> str:
    """One output line for ``list``."""
    if home_only:
        return str(environment.home) if environment.home else "??"
    return str(environment)


@contextmanager
def _cancel_on_interrupt(cancellation: CancellationToken) -> Iterator[None]:
    """Turn the first Ctrl-C into cancellation between candidates.

    A second Ctrl-C raises ``KeyboardInterrupt`` as usual.
    """

    def handle_interrupt(signum, frame):
        logger.debug("Interrupted, cancelling discovery")
        cancellation.cancel()
        signal.signal(signal.SIGINT, signal.default_int_handler)

    try:
        previous = signal.signal(signal.SIGINT, handle_interrupt)
    except ValueError:
        # Handlers can only be installed from the main thread
        previous = None
    try:
        yield
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)


def _list(args: argparse.Namespace, config: DiscoveryConfig) -> int:
    cancellation = CancellationToken()
    if args.dir:
        environments = enumerate_in_directories(
            args.dir, masks=args.mask, cancellation=cancellation, config=config
        )
    elif args.conda:
        environments = enumerate_conda_environments(cancellation, config)
    else:
        environments = enumerate_environments(cancellation, config)

    try:
        with _cancel_on_interrupt(cancellation):
            for environment in environments:
                print(format_environment(environment, args.home_only))
    except (KeyboardInterrupt, OperationCancelled):
        return 130
    return 0


def _interpreter(args: argparse.Namespace, config: DiscoveryConfig) -> int:
    try:
        environment = from_interpreter_checked(args.path, config)
    except InterpreterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"ver: {environment.version_string(3) or ''}")
    print(f"exe: {environment.interpreter_path}")
    print(f"home: {environment.home or ''}")
    print(f"dll: {environment.dynamic_library_path or ''}")
    return 0


def _active(args: argparse.Namespace, config: DiscoveryConfig) -> int:
    environment = get_active_conda_environment(config)
    if environment is None:
        print("No active conda environment", file=sys.stderr)
        return 1
    print(f"{environment.name} @ {environment.home}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whichpython",
        description="Find installed Python environments",
        epilog=SECURITY_NOTE,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log discovery details to stderr"
    )
    parser.add_argument("--config", type=Path, help="Path to a config.toml file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List discovered environments")
    list_parser.add_argument(
        "--home-only",
        action="store_true",
        help="Only print home directory for each environment",
    )
    list_parser.add_argument(
        "--conda", action="store_true", help="Only list conda environments"
    )
    list_parser.add_argument(
        "--dir",
        action="append",
        type=Path,
        help="Search this directory instead of the default sources (repeatable)",
    )
    list_parser.add_argument(
        "--mask",
        action="append",
        help="File name glob used with --dir (repeatable)",
    )
    list_parser.set_defaults(handler=_list)

    interpreter_parser = subparsers.add_parser(
        "interpreter", help="Check one interpreter and print its details"
    )
    interpreter_parser.add_argument("path", type=Path, help="Python executable")
    interpreter_parser.set_defaults(handler=_interpreter)

    active_parser = subparsers.add_parser(
        "active", help="Print the active conda environment"
    )
    active_parser.set_defaults(handler=_active)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = load_config(args.config)
    logger.debug("Configuration loaded from %s", config.source or "defaults")
    return args.handler(args, config)


if __name__ == "__main__":
    sys.exit(main())
