"""The project sub-commands: extract, check, push and update."""

from __future__ import annotations

import enum
import logging
import sys

from .check import check_project
from .errors import PorterError
from .extract import extract_clean_slate, extract_preserve_history
from .models import ConfigFile, HistoryMode, ProjectConfig
from .prompts import confirm, select
from .remote import push_to_remote
from .state import (
    STATE_FILE_NAME,
    commit_state_file_change,
    get_internal_state_file_path,
    read_last_synced_commit,
    write_last_synced_commit,
)
from .update import (
    ApplyStatus,
    CommitInfo,
    apply_commit_to_output,
    get_commit_diff_relative,
    get_internal_commits_since,
)

log = logging.getLogger(__name__)


class _Choice(enum.IntEnum):
    YES = 0
    SKIP_ALWAYS = 1
    SKIP_FOR_NOW = 2
    APPLY_ALL = 3
    QUIT = 4


_REVIEW_ITEMS = (
    "Yes",
    "No (skip always)",
    "Skip for now",
    "Apply ALL remaining",
    "Quit update",
)


def _err(message: str) -> None:
    print(message, file=sys.stderr)


def _project(config_file: ConfigFile, project_id: str) -> ProjectConfig:
    project = config_file.projects.get(project_id)
    if project is None:
        raise PorterError(f"Project '{project_id}' not found in configuration.")
    return project


def handle_extract(
    project_id: str, mode_override: HistoryMode | None, config_file: ConfigFile
) -> None:
    """Extract a project to its public location and report the outcome."""
    log.info("Attempting extraction for project: %s", project_id)
    project = _project(config_file, project_id)

    history_mode = mode_override if mode_override is not None else project.history_mode
    log.info("Using history mode: %s", history_mode)

    if history_mode is HistoryMode.PRESERVE:
        print("\nWARNING: History preservation mode ('preserve') uses 'git-filter-repo'.")
        print(" - This rewrites history and operates on a temporary clone.")
        print(" - Ensure 'git-filter-repo' is installed and accessible.")
        print(
            " - Review the resulting repository carefully for any unintentionally "
            "exposed history or secrets."
        )
        result = extract_preserve_history(project_id, project)
    else:
        result = extract_clean_slate(project_id, project)

    print(f"\nExtraction successful for project '{result.project_id}'!")
    print(f"Mode: {history_mode}")
    print(f"Output location: {result.output_path}")
    print("Messages:")
    for message in result.messages:
        print(f"- {message}")
    if result.secrets_found:
        print("\nWARNING: Potential secrets found during scan of FINAL code state:")
        for finding in result.secrets_found:
            print(f"- {finding}")
        print(
            "Please review the code AND HISTORY in the output directory carefully "
            "before publishing."
        )


def handle_check(project_id: str, config_file: ConfigFile) -> None:
    """Run the pre-publication checks and print a report."""
    log.info("Running checks for project: %s", project_id)
    project = _project(config_file, project_id)

    if not project.output_path.exists():
        raise PorterError(
            f"Output path '{project.output_path}' for project '{project_id}' does not "
            "exist. Have you extracted it yet?"
        )

    result = check_project(project_id, project)
    print(f"\nCheck Results for project '{result.project_id}':")
    print("---------------------------------")

    if not result.secrets_found:
        print("[✓] Basic Secret Scan: No obvious secrets found.")
    else:
        print(
            f"[!] Basic Secret Scan: Found {len(result.secrets_found)} potential secrets:"
        )
        for finding in result.secrets_found:
            print(f"  - {finding}")

    if not result.internal_deps_found:
        print(
            "[✓] Dependency Check: No path dependencies pointing outside the project found."
        )
    else:
        print(
            f"[!] Dependency Check: Found {len(result.internal_deps_found)} potential "
            "internal path dependencies:"
        )
        for finding in result.internal_deps_found:
            print(f"  - {finding}")
        print(
            "    These must be resolved (replaced with public crates or vendored) "
            "before publishing."
        )

    if result.license_ok:
        print("[✓] License Check: Found a file starting with 'LICENSE' or 'COPYING'.")
    else:
        print("[!] License Check: No file starting with 'LICENSE' or 'COPYING' found.")
        print("    Ensure you add an appropriate open source license file.")
    print("---------------------------------")


def handle_push(project_id: str, force: bool, config_file: ConfigFile) -> None:
    """Push the output repository after confirmation unless ``force`` is set."""
    log.info("Handling push command for project: %s", project_id)
    project = _project(config_file, project_id)

    public_url = project.public_repo_url
    if public_url is None:
        _err(
            f"Error: Project '{project_id}' does not have 'public_repo_url' configured. "
            "Cannot push."
        )
        return

    if not project.output_path.exists():
        raise PorterError(
            f"Output path '{project.output_path}' for project '{project_id}' does not "
            "exist. Cannot push."
        )

    if force:
        print("--force specified, skipping confirmation prompt.")
    else:
        prompt = (
            f"Are you sure you want to push project '{project_id}' from "
            f"'{project.output_path}' to remote '{public_url}'?"
        )
        if not confirm(prompt):
            print("Push cancelled by user.")
            return

    print("Attempting push...")
    push_to_remote(project_id, project)
    print(f"\nSuccessfully pushed project '{project_id}' to {public_url}")


def _report_missing_state(project_id: str, project: ProjectConfig) -> None:
    _err(
        f"Error: No previous sync state found for project '{project_id}' in the "
        "internal repository."
    )
    _err(
        f"       Please ensure '{STATE_FILE_NAME}' exists within "
        f"'{project.internal_repo_path / project.project_subdir}' and contains the "
        "hash of the last commit synced."
    )
    _err(
        "       If this is the first sync after an initial extract, manually create "
        "the state file"
    )
    _err(
        "       with the initial commit hash from the internal repo that corresponds "
        "to the extract point."
    )


def _report_conflict(project_id: str, project: ProjectConfig, commit_hash: str) -> None:
    _err(f"\nError: Patch application conflict detected for commit {commit_hash}.")
    _err(
        "The 'git am' command failed. Please resolve the conflicts manually in the "
        "output directory:"
    )
    _err(f"  cd {project.output_path}")
    _err("  # (Review conflicts with 'git status', 'git diff', edit files, 'git add .')")
    _err("  git am --continue")
    _err(
        f"Once resolved, re-run 'oss-porter update {project_id}' to process "
        "remaining commits."
    )
    _err("To abort the conflicting patch application: git am --abort")


def handle_update(project_id: str, config_file: ConfigFile) -> None:
    """Review new internal commits one by one and apply the chosen ones."""
    print(f"\nStarting interactive update for project: {project_id}")
    project = _project(config_file, project_id)

    last_synced = read_last_synced_commit(project)
    if last_synced is None:
        _report_missing_state(project_id, project)
        raise PorterError("Missing initial sync state.")
    print(f"Last synced internal commit: {last_synced}")

    queue = get_internal_commits_since(project, last_synced)
    if not queue:
        print(f"Project is up-to-date. No new commits found since {last_synced}.")
        return
    print(f"Found {len(queue)} new candidate commits to review.")

    applied = last_synced
    apply_all = False
    user_quit = False
    skipped: list[CommitInfo] = []

    while queue:
        commit = queue.popleft()
        print(f"\n--- Reviewing Commit: {commit.hash} ---")
        print(f"Subject: {commit.subject}")

        if apply_all:
            print("Applying non-interactively (Apply All mode)...")
            choice = _Choice.YES
        else:
            try:
                diff = get_commit_diff_relative(project, commit.hash)
            except PorterError as exc:
                _err(f"Error getting diff for commit {commit.hash}: {exc}")
                if confirm("Failed to get diff. Skip this commit?"):
                    skipped.append(commit)
                    continue
                user_quit = True
                break
            print(diff)
            if not diff.strip():
                log.warning(
                    "Commit %s produced an empty diff relative to '%s'. "
                    "Check pathspec logic or commit content.",
                    commit.hash,
                    project.project_subdir,
                )
            choice = _Choice(
                select(
                    f"Apply commit {commit.hash} to '{project.output_path}'?",
                    _REVIEW_ITEMS,
                    default=0,
                )
            )

        if choice is _Choice.YES:
            result = apply_commit_to_output(project, commit.hash)
            if result.status is ApplyStatus.SUCCESS:
                applied = commit.hash
            elif result.status is ApplyStatus.CONFLICT:
                _report_conflict(project_id, project, commit.hash)
                user_quit = True
                break
            else:
                _err(
                    f"\nError: Failed to apply patch for commit {commit.hash} "
                    "(non-conflict error):"
                )
                _err(result.stderr)
                _err(
                    "Update process aborted. The failed 'git am' session may have "
                    "been automatically aborted."
                )
                user_quit = True
                break
        elif choice is _Choice.SKIP_ALWAYS:
            print(f"Skipping commit {commit.hash} permanently for this session.")
            skipped.append(commit)
        elif choice is _Choice.SKIP_FOR_NOW:
            print(f"Skipping commit {commit.hash} for now.")
            queue.append(commit)
        elif choice is _Choice.APPLY_ALL:
            print("Entering non-interactive 'Apply All' mode...")
            apply_all = True
            queue.appendleft(commit)
        else:
            print("Quitting update process as requested.")
            user_quit = True
            break

    print("\n---------------------------------")
    if user_quit:
        print("Update process exited or was aborted.")
    elif apply_all:
        print("Update process finished (Apply All mode completed).")
        print("[WARN] Commits were applied non-interactively. Please review changes carefully.")
    else:
        print("Update process finished reviewing commits.")

    if skipped:
        print("Explicitly skipped commits (will need review on next run):")
        for commit in skipped:
            print(f" - {commit.hash} {commit.subject}")

    print(f"Last successfully synced internal commit is now: {applied}")
    write_last_synced_commit(project, applied)

    if confirm(
        f"Commit this sync state update ({applied}) to the internal repository "
        f"'{project.internal_repo_path}'?"
    ):
        try:
            commit_state_file_change(project, applied)
        except PorterError as exc:
            _err(f"Error committing state file to internal repo: {exc}")
        else:
            print("State file committed successfully.")
    else:
        print("Skipped committing state file update to internal repository.")
        print(
            "Reminder: Commit the change in "
            f"'{get_internal_state_file_path(project)}' manually."
        )

    print("\nUpdate interaction complete.")
    if not user_quit:
        print(
            f"Please review changes in '{project.output_path}', build/test, and run checks."
        )
        print(f"When ready, push changes using 'oss-porter push {project_id}' or git.")