"""Pushing the public repository to its remote."""

from __future__ import annotations

import logging

from .errors import ConfigError, GitOperationError, PorterError
from .models import ProjectConfig
from .utils import run_git_command

log = logging.getLogger(__name__)


def push_to_remote(project_id: str, config: ProjectConfig) -> None:
    """Push the configured public branch of the output repository to ``origin``.

    Adds ``origin`` if it is missing; refuses to push if it points elsewhere.
    """
    log.info("Attempting to push project '%s' to remote.", project_id)
    output_path = config.output_path
    target_branch = config.public_branch
    log.info("Configured public branch: %s", target_branch)

    if not (output_path / ".git").exists():
        raise GitOperationError(
            f"Output path '{output_path}' is not a Git repository. Cannot push."
        )

    public_url = config.public_repo_url
    if public_url is None:
        raise ConfigError(
            f"Project '{project_id}' does not have 'public_repo_url' configured. "
            "Cannot push."
        )
    log.info("Target remote URL: %s", public_url)

    try:
        remotes = run_git_command(["remote", "-v"], output_path)
    except PorterError as exc:
        log.error("Failed to check git remotes: %s", exc)
        raise

    origin_exists = False
    for line in remotes.stdout.decode("utf-8", errors="replace").splitlines():
        parts = line.split()
        if len(parts) < 2 or parts[0] != "origin":
            continue
        origin_exists = True
        if parts[1] != public_url:
            log.warning(
                "Git remote 'origin' in '%s' points to '%s' instead of the configured '%s'.",
                output_path,
                parts[1],
                public_url,
            )
            raise GitOperationError(
                f"Git remote 'origin' in '{output_path}' exists but points to the wrong "
                f"URL ('{parts[1]}'). Expected '{public_url}'. Please fix manually."
            )

    if origin_exists:
        log.info("Remote 'origin' already exists and points to the correct URL.")
    else:
        log.info("Adding remote 'origin' with URL: %s", public_url)
        run_git_command(["remote", "add", "origin", public_url], output_path)

    log.info(
        "Attempting to push local branch '%s' to remote 'origin/%s'",
        target_branch,
        target_branch,
    )
    pushed = run_git_command(
        ["push", "-u", "origin", f"{target_branch}:{target_branch}"], output_path
    )
    push_stderr = pushed.stderr.decode("utf-8", errors="replace")
    if push_stderr.strip():
        log.info("Git push stderr:\n%s", push_stderr)

    log.info(
        "Successfully pushed branch '%s' for project '%s' to %s",
        target_branch,
        project_id,
        public_url,
    )