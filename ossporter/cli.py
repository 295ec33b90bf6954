"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from .commands import handle_check, handle_extract, handle_push, handle_update
from .config import get_default_config_path, load_config
from .config_commands import (
    handle_config_add,
    handle_config_init,
    handle_config_list,
    handle_config_remove,
    handle_config_show,
    handle_config_validate,
)
from .errors import ConfigNotFoundError, PorterError
from .models import HistoryMode

log = logging.getLogger(__name__)

_RECOVERABLE = (PorterError, OSError, EOFError)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``oss-porter`` command."""
    parser = argparse.ArgumentParser(
        prog="oss-porter",
        description="Extract and sync projects from internal to public Git repositories.",
    )
    parser.add_argument("-c", "--config", metavar="FILE", help="Path to config file")
    commands = parser.add_subparsers(dest="command", required=True)

    config = commands.add_parser("config", help="Manage configuration")
    actions = config.add_subparsers(dest="action", required=True)
    actions.add_parser("init", help="Create a default configuration file if one doesn't exist")
    actions.add_parser("list", help="List all configured projects")
    show = actions.add_parser("show", help="Show details for a specific project")
    show.add_argument("project_id")
    actions.add_parser("validate", help="Validate the configuration file")
    actions.add_parser("add", help="Add a new project definition (interactively)")
    remove = actions.add_parser("remove", help="Remove a project definition")
    remove.add_argument("project_id")

    extract = commands.add_parser("extract", help="Extract a project to its public location")
    extract.add_argument("project_id")
    extract.add_argument(
        "--mode",
        choices=["clean-slate", "preserve"],
        help="Specify history mode (overrides config)",
    )

    check = commands.add_parser(
        "check", help="Run checks (secrets, dependencies, license) on an extracted project"
    )
    check.add_argument("project_id")

    push = commands.add_parser("push", help="Push an extracted project to its public remote")
    push.add_argument("project_id")
    push.add_argument(
        "-f", "--force", action="store_true", help="Skip confirmation prompt before pushing"
    )

    update = commands.add_parser("update", help="Interactively sync new internal commits")
    update.add_argument("project_id")
    return parser


def _configure_logging() -> None:
    level = os.environ.get("OSS_PORTER_LOG", "ERROR").upper()
    logging.basicConfig(level=getattr(logging, level, logging.ERROR))


def _run_config_mutation(args: argparse.Namespace) -> int:
    try:
        if args.action == "init":
            handle_config_init()
        elif args.action == "add":
            handle_config_add(args.config)
        else:
            handle_config_remove(args.project_id, args.config)
    except _RECOVERABLE as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def _config_location(override: str | None) -> str:
    if override is not None:
        return override
    try:
        return str(get_default_config_path())
    except PorterError:
        return "default location"


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    _configure_logging()
    args = build_parser().parse_args(argv)

    if args.command == "config" and args.action in ("init", "add", "remove"):
        return _run_config_mutation(args)

    try:
        config_file = load_config(args.config)
    except ConfigNotFoundError as exc:
        print(f"Error: Configuration file not found at {exc.path}", file=sys.stderr)
        print(
            "Please run `oss-porter config init` to create a default configuration file,",
            file=sys.stderr,
        )
        print("or specify a different path using the --config option.", file=sys.stderr)
        return 1
    except PorterError as exc:
        print(f"Error loading configuration: {exc}", file=sys.stderr)
        return 1
    log.info(
        "Loaded config with %d projects from %s",
        len(config_file.projects),
        _config_location(args.config),
    )

    try:
        if args.command == "config":
            if args.action == "list":
                handle_config_list(config_file)
            elif args.action == "show":
                handle_config_show(config_file, args.project_id)
            else:
                handle_config_validate(config_file)
        elif args.command == "extract":
            mode = HistoryMode.from_cli(args.mode) if args.mode is not None else None
            handle_extract(args.project_id, mode, config_file)
        elif args.command == "check":
            handle_check(args.project_id, config_file)
        elif args.command == "push":
            handle_push(args.project_id, args.force, config_file)
        else:
            handle_update(args.project_id, config_file)
    except _RECOVERABLE as exc:
        print(f"\nOperation failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())