"""Helpers for running external commands."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from .errors import GitCommandError, PorterIOError, ToolNotFoundError

log = logging.getLogger(__name__)


def _describe_status(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status: {returncode}"


def run_command_capture(
    cmd_name: str, args: Sequence[str], cwd: Path | str
) -> subprocess.CompletedProcess[bytes]:
    """Run a command in ``cwd`` capturing its output; raise if it fails."""
    cwd = Path(cwd)
    cmd_str = f"{cmd_name} {' '.join(args)}"
    log.debug("Running command: '%s' in directory: %s", cmd_str, cwd)

    try:
        completed = subprocess.run(
            [cmd_name, *args], cwd=cwd, capture_output=True, check=False
        )
    except OSError as exc:
        raise PorterIOError(exc, cwd) from exc

    if completed.returncode != 0:
        stdout = completed.stdout.decode("utf-8", errors="replace")
        stderr = completed.stderr.decode("utf-8", errors="replace")
        log.error("Command failed: %s", cmd_str)
        log.error("Stderr: %s", stderr)
        log.error("Stdout: %s", stdout)
        raise GitCommandError(
            cmd=cmd_str,
            cwd=cwd,
            status=_describe_status(completed.returncode),
            stdout=stdout,
            stderr=stderr,
        )
    log.debug("Command successful: %s", cmd_str)
    return completed


def run_git_command(
    args: Sequence[str], cwd: Path | str
) -> subprocess.CompletedProcess[bytes]:
    """Run ``git`` with ``args`` in ``cwd``."""
    return run_command_capture("git", args, cwd)


def check_tool_exists(tool_name: str) -> None:
    """Raise unless ``tool_name --version`` starts and succeeds."""
    try:
        completed = subprocess.run(
            [tool_name, "--version"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ToolNotFoundError(tool_name) from exc
    except OSError as exc:
        raise PorterIOError(exc, Path(tool_name)) from exc
    if completed.returncode != 0:
        raise ToolNotFoundError(f"Tool '{tool_name}' command check failed.")