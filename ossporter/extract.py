"""Extracting a project from the internal repository into a public one."""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path

from .errors import (
    FsError,
    GitOperationError,
    OutputPathExistsError,
    PathNotFoundError,
    PorterError,
    PorterIOError,
    TempDirError,
)
from .models import ExtractionResult, ProjectConfig
from .state import STATE_FILE_NAME
from .utils import check_tool_exists, run_command_capture, run_git_command

log = logging.getLogger(__name__)

_SECRET_PATTERNS = (
    re.compile(r"""(?i)(api_?key|secret|password)\s*[:=]\s*['"]\S+['"]"""),
    re.compile(r"([A-Za-z0-9+/]{40,})"),
)
_SKIPPED_COMPONENTS = frozenset({"target", ".git"})
_GITIGNORE_CONTENT = "/target\nCargo.lock\n"


def _walk_files(directory: Path) -> Iterator[Path]:
    for root, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for name in sorted(filenames):
            yield Path(root) / name


def _text_lines(content: str) -> list[str]:
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def scan_secrets_basic(directory: Path | str) -> list[str]:
    """Scan text files under ``directory`` for naive secret patterns.

    Returns one finding per matching line, as "file:line".
    """
    directory = Path(directory)
    log.info("Starting basic secret scan in %s", directory)
    findings: list[str] = []

    for path in _walk_files(directory):
        if not path.is_file():
            continue
        if _SKIPPED_COMPONENTS.intersection(path.parts):
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        for number, line in enumerate(_text_lines(content), start=1):
            if any(pattern.search(line) for pattern in _SECRET_PATTERNS):
                finding = f"Potential secret found in {path}:{number}"
                log.warning("%s", finding)
                findings.append(finding)

    log.info(
        "Basic secret scan completed. Found %d potential issues.", len(findings)
    )
    return findings


def add_license_file(license_id: str | None, output_path: Path | str) -> None:
    """Write a placeholder ``LICENSE-<ID>`` file unless a licence file exists."""
    if license_id is None:
        return
    output_path = Path(output_path)
    license_path = output_path / f"LICENSE-{license_id.upper()}"
    generic_path = output_path / "LICENSE"

    if license_path.exists() or generic_path.exists():
        log.info("License file already exists, skipping creation.")
        return

    log.info("Adding license file for %s (placeholder)", license_id)
    try:
        license_path.write_text(
            f"Placeholder for {license_id} License Text.", encoding="utf-8"
        )
    except OSError as exc:
        raise PorterIOError(exc, license_path) from exc
    log.info("Created license file: %s", license_path)


def ensure_gitignore(output_path: Path | str) -> None:
    """Create a basic ``.gitignore`` if there is none."""
    gitignore_path = Path(output_path) / ".gitignore"
    if gitignore_path.exists():
        log.info(".gitignore file already exists.")
        return
    log.info("Creating basic .gitignore file.")
    try:
        gitignore_path.write_text(_GITIGNORE_CONTENT, encoding="utf-8")
    except OSError as exc:
        raise PorterIOError(exc, gitignore_path) from exc


def _prepare_output_dir(output_path: Path) -> None:
    if output_path.exists():
        try:
            has_content = any(True for _ in output_path.iterdir())
        except OSError as exc:
            raise PorterIOError(exc, output_path) from exc
        if has_content:
            raise OutputPathExistsError(output_path)
        return
    try:
        output_path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PorterIOError(exc, output_path) from exc
    log.info("Created output directory: %s", output_path)


def _copy_contents(source: Path, destination: Path) -> None:
    try:
        shutil.copytree(source, destination, dirs_exist_ok=True)
    except (shutil.Error, OSError) as exc:
        raise FsError(str(exc)) from exc


def _move_contents(source: Path, destination: Path) -> None:
    try:
        for child in sorted(source.iterdir()):
            target = destination / child.name
            if target.exists():
                raise FsError(f"Path '{target}' already exists")
            shutil.move(str(child), str(target))
    except (shutil.Error, OSError) as exc:
        raise FsError(str(exc)) from exc


def _remove_state_file(output_path: Path) -> bool:
    state_file = output_path / STATE_FILE_NAME
    if not state_file.exists():
        return False
    try:
        state_file.unlink()
    except OSError as exc:
        raise PorterIOError(exc, state_file) from exc
    return True


def extract_clean_slate(project_id: str, config: ProjectConfig) -> ExtractionResult:
    """Copy the project files and start a fresh git history."""
    log.info("Starting clean slate extraction for project: %s", project_id)
    messages: list[str] = []
    output_path = config.output_path

    source_path = config.internal_repo_path / config.project_subdir
    if not source_path.exists():
        raise PathNotFoundError(source_path)
    _prepare_output_dir(output_path)

    log.info("Copying files from %s to %s", source_path, output_path)
    _copy_contents(source_path, output_path)
    messages.append(f"Copied project files from {source_path}")

    if (output_path / STATE_FILE_NAME).exists():
        log.info(
            "Removing internal state file '%s' from clean slate output.",
            STATE_FILE_NAME,
        )
        _remove_state_file(output_path)

    log.info("Initializing Git repository in %s", output_path)
    run_git_command(["init"], output_path)
    messages.append("Initialized Git repository.")

    add_license_file(config.license, output_path)
    ensure_gitignore(output_path)

    secrets_found = scan_secrets_basic(output_path)
    if secrets_found:
        messages.append(
            f"Warning: {len(secrets_found)} potential secrets found during basic scan."
        )

    log.info("Staging files for initial commit.")
    run_git_command(["add", "."], output_path)
    commit_message = f"Initial commit of open source project '{project_id}'"
    log.info("Creating initial commit.")
    run_git_command(["commit", "-m", commit_message], output_path)
    messages.append("Created initial Git commit.")

    log.info("Clean slate extraction completed for project: %s", project_id)
    return ExtractionResult(
        project_id=project_id,
        output_path=output_path,
        messages=messages,
        secrets_found=secrets_found,
    )


def extract_preserve_history(
    project_id: str, config: ProjectConfig
) -> ExtractionResult:
    """Extract the project keeping its history, filtered with git-filter-repo."""
    log.info("Starting history preservation extraction for project: %s", project_id)
    messages: list[str] = []
    output_path = config.output_path

    check_tool_exists("git")
    check_tool_exists("git-filter-repo")
    messages.append("Checked prerequisites (git, git-filter-repo).")

    repo_path = config.internal_repo_path
    subdir = config.project_subdir
    if not (repo_path / ".git").exists():
        raise GitOperationError(
            f"Internal repo path '{repo_path}' does not appear to be a git repository root."
        )
    if not (repo_path / subdir).exists():
        raise PathNotFoundError(repo_path / subdir)
    _prepare_output_dir(output_path)

    try:
        temp_dir = tempfile.TemporaryDirectory()
    except OSError as exc:
        raise TempDirError(exc) from exc

    with temp_dir as temp_name:
        clone_path = Path(temp_name)
        log.info("Creating temporary clone of %s in %s", repo_path, clone_path)
        run_git_command(["clone", "--no-local", str(repo_path), "."], clone_path)
        messages.append(f"Created temporary clone in {clone_path}")

        subdir_arg = str(subdir)
        log.info("Running git-filter-repo for subdir '%s'", subdir_arg)
        run_command_capture(
            "git-filter-repo", ["--path", subdir_arg, "--force"], clone_path
        )
        messages.append(f"Ran git-filter-repo on path '{subdir_arg}'")

        log.info("Moving filtered repository contents to %s", output_path)
        _move_contents(clone_path, output_path)
        messages.append(f"Moved filtered content to {output_path}")

    if (output_path / STATE_FILE_NAME).exists():
        log.warning(
            "Removing internal state file '%s' found in output path after filtering.",
            STATE_FILE_NAME,
        )
        _remove_state_file(output_path)
        try:
            run_git_command(["rev-parse", "--verify", "HEAD"], output_path)
        except PorterError:
            log.info(
                "Output repository is empty after filtering, "
                "removal of state file doesn't need commit."
            )
        else:
            log.info(
                "Committing removal of internal state file from output repository."
            )
            run_git_command(["add", STATE_FILE_NAME], output_path)
            run_git_command(
                ["commit", "-m", "chore: Remove internal sync state file"],
                output_path,
            )
            messages.append(
                f"Committed removal of internal state file '{STATE_FILE_NAME}' from output."
            )

    log.info("Running post-filtering checks in %s", output_path)
    try:
        run_git_command(["remote", "rm", "origin"], output_path)
    except PorterError as exc:
        log.warning("Could not remove 'origin' remote (might not exist): %s", exc)
    else:
        messages.append("Removed original 'origin' remote.")

    add_license_file(config.license, output_path)
    ensure_gitignore(output_path)

    status = run_git_command(["status", "--porcelain"], output_path)
    if status.stdout.decode("utf-8", errors="replace").strip():
        log.info(
            "Detected changes after filtering (likely license/gitignore), "
            "creating cleanup commit."
        )
        run_git_command(["add", "LICENSE*", ".gitignore"], output_path)
        run_git_command(
            [
                "commit",
                "-m",
                "chore: Add license and/or gitignore after history filtering",
            ],
            output_path,
        )
        messages.append("Created cleanup commit for license/gitignore.")
    else:
        log.info("No changes detected after filtering, no cleanup commit needed.")

    secrets_found = scan_secrets_basic(output_path)
    if secrets_found:
        messages.append(
            f"Warning: {len(secrets_found)} potential secrets found during basic "
            "scan of final code state."
        )

    log.info("History preservation extraction completed for project: %s", project_id)
    return ExtractionResult(
        project_id=project_id,
        output_path=output_path,
        messages=messages,
        secrets_found=secrets_found,
    )