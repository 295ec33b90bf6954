"""Reviewing and applying new internal commits to the public repository."""

from __future__ import annotations

import enum
import logging
import subprocess
from collections import deque
from dataclasses import dataclass

from .errors import GitOperationError, PorterError, PorterIOError
from .models import ProjectConfig
from .utils import run_git_command

log = logging.getLogger(__name__)

_CONFLICT_MARKERS = ("Patch failed to apply", "conflict", "git am --continue")


@dataclass(frozen=True)
class CommitInfo:
    """A commit identified by its hash and subject line."""

    hash: str
    subject: str


class ApplyStatus(enum.Enum):
    """How applying a commit to the output repository went."""

    SUCCESS = "success"
    CONFLICT = "conflict"
    FAILURE = "failure"


@dataclass(frozen=True)
class ApplyResult:
    """Result of applying a commit; ``stderr`` is set for failures."""

    status: ApplyStatus
    stderr: str = ""


def parse_log_output(stdout: str) -> deque[CommitInfo]:
    """Parse ``hash NUL subject`` lines (newest first) into oldest-first commits."""
    commits: deque[CommitInfo] = deque()
    for line in reversed(stdout.strip().splitlines()):
        if not line:
            continue
        commit_hash, sep, subject = line.partition("\x00")
        if sep:
            commits.append(CommitInfo(hash=commit_hash, subject=subject))
        else:
            log.warning("Could not parse commit log line: %s", line)
    return commits


def is_conflict_output(stdout: str, stderr: str) -> bool:
    """Whether ``git am`` output indicates a conflict the user must resolve."""
    return any(marker in stdout or marker in stderr for marker in _CONFLICT_MARKERS)


def get_internal_commits_since(
    config: ProjectConfig, since_ref: str | None
) -> deque[CommitInfo]:
    """Fetch the internal repo and list commits touching the project subdir."""
    internal_repo = config.internal_repo_path
    subdir = str(config.project_subdir)

    log.info("Fetching updates for internal repository: %s", internal_repo)
    try:
        run_git_command(["fetch", "origin"], internal_repo)
    except PorterError as exc:
        log.warning(
            "Failed to fetch internal repo (continuing with local state): %s", exc
        )
    else:
        log.info("Fetch successful.")

    if since_ref is None:
        raise GitOperationError(
            "Cannot determine update range: no previous sync commit reference provided."
        )

    commit_range = f"{since_ref}..origin/{config.internal_branch}"
    log.info(
        "Looking for commits in range '%s' affecting subdir '%s'", commit_range, subdir
    )
    output = run_git_command(
        [
            "log",
            commit_range,
            "--no-merges",
            "--first-parent",
            "--pretty=format:%H%x00%s",
            "--",
            subdir,
        ],
        internal_repo,
    )
    commits = parse_log_output(output.stdout.decode("utf-8", errors="replace"))
    log.info("Found %d new candidate commits.", len(commits))
    return commits


def get_commit_diff_relative(config: ProjectConfig, commit_hash: str) -> str:
    """Diff of ``commit_hash`` against its parent, limited to the project subdir."""
    log.debug("Getting relative diff for commit %s", commit_hash)
    output = run_git_command(
        [
            "diff",
            "--color=always",
            f"{commit_hash}~..{commit_hash}",
            "--relative",
            str(config.project_subdir),
        ],
        config.internal_repo_path,
    )
    return output.stdout.decode("utf-8", errors="replace")


def apply_commit_to_output(config: ProjectConfig, commit_hash: str) -> ApplyResult:
    """Apply one internal commit to the output repo via format-patch and ``git am``."""
    subdir = str(config.project_subdir)
    output_path = config.output_path

    log.info(
        "Generating patch for commit %s from internal repo relative to subdir '%s'",
        commit_hash,
        subdir,
    )
    patch = run_git_command(
        ["format-patch", "--stdout", "-1", commit_hash, "--relative", "--", subdir],
        config.internal_repo_path,
    ).stdout

    if not patch:
        log.warning(
            "Generated empty patch for commit %s. This might mean changes were outside "
            "the subdirectory '%s' or only involved merges/empty changes. "
            "Skipping application.",
            commit_hash,
            subdir,
        )
        return ApplyResult(ApplyStatus.SUCCESS)

    log.info("Applying patch for commit %s to output repo %s", commit_hash, output_path)
    try:
        applied = subprocess.run(
            ["git", "am", "--keep-cr", "--committer-date-is-author-date", "--3way"],
            cwd=output_path,
            input=patch,
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        raise PorterIOError(exc, output_path) from exc

    if applied.returncode == 0:
        log.info("Successfully applied patch for commit %s using 'git am'.", commit_hash)
        return ApplyResult(ApplyStatus.SUCCESS)

    stdout = applied.stdout.decode("utf-8", errors="replace")
    stderr = applied.stderr.decode("utf-8", errors="replace")
    log.error(
        "'git am' failed for commit %s. Status: %s", commit_hash, applied.returncode
    )
    log.error("Stderr: %s", stderr)
    log.error("Stdout: %s", stdout)

    if is_conflict_output(stdout, stderr):
        log.warning("'git am' resulted in conflicts for commit %s.", commit_hash)
        return ApplyResult(ApplyStatus.CONFLICT)

    log.error("'git am' failed for commit %s with unexpected error.", commit_hash)
    log.warning("Attempting to abort failed 'git am' session...")
    try:
        run_git_command(["am", "--abort"], output_path)
    except PorterError as exc:
        log.warning("Failed to abort 'git am' session: %s", exc)
    else:
        log.info("Successfully aborted failed 'git am' session.")
    return ApplyResult(ApplyStatus.FAILURE, stderr)


def abort_apply_session(config: ProjectConfig) -> None:
    """Abort any am, cherry-pick, rebase or merge in progress in the output repo."""
    output_path = config.output_path
    log.warning(
        "Aborting any ongoing apply/merge/rebase operation in %s", output_path
    )
    for operation in ("am", "cherry-pick", "rebase", "merge"):
        run_git_command([operation, "--abort", "--quiet"], output_path)
    log.info("Any potential apply/merge/rebase operation aborted.")