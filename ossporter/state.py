"""The sync-state file kept inside the internal project directory."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

import tomli_w

from .errors import PorterIOError, TomlParseError, TomlSerializeError
from .models import ProjectConfig
from .utils import run_git_command

log = logging.getLogger(__name__)

STATE_FILE_NAME = ".oss_porter_state.toml"
_STATE_KEY = "last_synced_internal_commit"


def get_internal_state_file_path(config: ProjectConfig) -> Path:
    """Path of the state file inside the internal project subdirectory."""
    return config.internal_repo_path / config.project_subdir / STATE_FILE_NAME


def read_last_synced_commit(config: ProjectConfig) -> str | None:
    """Return the last synced commit hash, or None if none is recorded."""
    state_path = get_internal_state_file_path(config)
    log.debug("Reading sync state from: %s", state_path)

    if not state_path.exists():
        log.info("Sync state file not found at %s. Assuming no prior sync.", state_path)
        return None

    try:
        content = state_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PorterIOError(exc, state_path) from exc

    if not content.strip():
        log.warning("Sync state file %s is empty. Assuming no prior sync.", state_path)
        return None

    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise TomlParseError(exc, state_path) from exc

    commit = data.get(_STATE_KEY)
    if commit is not None and not isinstance(commit, str):
        raise TomlParseError(
            ValueError(f"invalid type for `{_STATE_KEY}`: expected a string"), state_path
        )
    if commit is not None and not commit.strip():
        log.warning("Sync state file contains empty commit hash. Assuming no prior sync.")
        return None
    return commit


def write_last_synced_commit(config: ProjectConfig, commit_hash: str | None) -> None:
    """Overwrite the state file with ``commit_hash``; does not commit it."""
    state_path = get_internal_state_file_path(config)
    log.debug("Writing sync state %r to: %s", commit_hash, state_path)

    data = {} if commit_hash is None else {_STATE_KEY: commit_hash}
    try:
        text = tomli_w.dumps(data)
    except (TypeError, ValueError) as exc:
        raise TomlSerializeError(str(exc)) from exc

    parent = state_path.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PorterIOError(exc, parent) from exc

    try:
        state_path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise PorterIOError(exc, state_path) from exc


def commit_state_file_change(config: ProjectConfig, commit_hash: str | None) -> None:
    """Commit the state file in the internal repository if it changed."""
    project_dir = config.internal_repo_path / config.project_subdir
    message = f"chore(oss-porter): Update sync state to {commit_hash or '<none>'}"

    log.info("Committing state file change in internal repo: %s", project_dir)

    status = run_git_command(["status", "--porcelain", STATE_FILE_NAME], project_dir)
    if not status.stdout.decode("utf-8", errors="replace").strip():
        log.info("State file %s not modified, skipping commit.", STATE_FILE_NAME)
        return

    run_git_command(["add", STATE_FILE_NAME], project_dir)
    run_git_command(["commit", "-m", message], project_dir)
    log.info("Successfully committed state file update in internal repository.")