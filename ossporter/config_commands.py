"""The ``config`` sub-commands: init, list, show, validate, add and remove."""

from __future__ import annotations

import logging
import sys
from collections.abc import Container
from pathlib import Path

from .config import get_default_config_path, load_config, save_config
from .errors import ConfigNotFoundError, PorterError, PorterIOError
from .models import DEFAULT_BRANCH, ConfigFile, HistoryMode, ProjectConfig
from .prompts import ask_text, confirm, select

log = logging.getLogger(__name__)

DEFAULT_CONFIG_CONTENT = """\
# oss-porter Configuration File
# Define global settings and projects to manage.

[settings]
# default_license = "MIT"  # Optional: Set a default license (e.g., "MIT", "Apache-2.0")
# secrets_scan_level = "basic" # Optional: Set default scan level ("none", "basic", "aggressive")

#[projects]
# Example project definition (uncomment and modify):
# [projects.my_cool_library]
# internal_repo_path = "/path/to/your/internal/monorepo_or_project" # REQUIRED: Absolute or relative path to the source Git repo root
# project_subdir = "path/relative/to/repo/root/of/the/project" # REQUIRED: Subdirectory within the repo to extract (use "." if it's the whole repo)
# output_path = "/path/to/where/you/want/the/public_version"    # REQUIRED: Directory where the clean OSS version will be created
# public_repo_url = "git@example.com:your-username/my_cool_library.git" # Optional: URL for the public remote repo
# history_mode = "clean_slate" # Optional: "clean_slate" (default) or "preserve" (requires git-filter-repo)
# license = "MIT" # Optional: License for this specific project (overrides default_license)
# internal_branch = "main" # Default, can be omitted
# public_branch = "main"   # Default, can be omitted
"""

_HISTORY_MODE_ITEMS = (
    "clean-slate (Recommended Default)",
    "preserve (Requires git-filter-repo)",
)


def _err(message: str) -> None:
    print(message, file=sys.stderr)


def is_git_repo(path: Path | str) -> bool:
    """Whether ``path`` looks like the root of a git repository."""
    return (Path(path) / ".git").is_dir()


def validate_project_id(value: str, existing: Container[str]) -> str:
    """Return the trimmed project id, or raise ``ValueError``."""
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("Project ID cannot be empty.")
    if any(ch.isspace() or ch == "." for ch in trimmed):
        raise ValueError("Project ID should not contain whitespace or periods.")
    if trimmed in existing:
        raise ValueError(f"Project ID '{trimmed}' already exists in the configuration.")
    return trimmed


def validate_repo_path(value: str) -> Path:
    """Return the repository path if it is absolute and holds a ``.git`` directory."""
    path = Path(value.strip())
    if not path.is_absolute():
        raise ValueError("Please provide an absolute path.")
    if not is_git_repo(path):
        raise ValueError(f"Path '{path}' does not seem to contain a .git directory.")
    return path


def validate_subdir(value: str, repo_path: Path | str) -> Path:
    """Return the subdirectory if it is ``.`` or an existing directory in the repo."""
    trimmed = value.strip()
    if trimmed == ".":
        return Path(trimmed)
    repo_path = Path(repo_path)
    candidate = repo_path / trimmed
    if not candidate.exists():
        raise ValueError(
            f"Subdirectory '{trimmed}' does not exist within '{repo_path}'."
        )
    if not candidate.is_dir():
        raise ValueError(
            f"Path '{trimmed}' within '{repo_path}' is not a directory."
        )
    return Path(trimmed)


def validate_output_path(value: str) -> Path:
    """Return the output path if it is absolute and not an existing non-directory."""
    path = Path(value.strip())
    if not path.is_absolute():
        raise ValueError("Please provide an absolute path.")
    if path.exists() and not path.is_dir():
        raise ValueError(f"Output path '{path}' exists but is not a directory.")
    return path


def validate_branch(value: str) -> str:
    """Return the trimmed branch name, or raise ``ValueError`` if it is empty."""
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("Branch name cannot be empty.")
    return trimmed


def handle_config_init(config_path: Path | str | None = None) -> Path:
    """Write the default configuration file unless one already exists."""
    path = Path(config_path) if config_path is not None else get_default_config_path()
    print(f"Checking for configuration file in home directory at: {path}")

    if path.exists():
        print("Configuration file already exists. No action taken.")
        return path

    parent = path.parent
    if not parent.exists():
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PorterIOError(exc, parent) from exc
        log.info("Ensured config directory exists: %s", parent)

    try:
        path.write_text(DEFAULT_CONFIG_CONTENT, encoding="utf-8")
    except OSError as exc:
        raise PorterIOError(exc, path) from exc

    print(f"Successfully created default configuration file at: {path}")
    print("Please edit this file to define your projects.")
    return path


def handle_config_list(config: ConfigFile) -> None:
    """Print the ids of all configured projects."""
    print("Configured Projects:")
    if not config.projects:
        print("  (No projects configured)")
        return
    for project_id in config.projects:
        print(f"- {project_id}")


def handle_config_show(config: ConfigFile, project_id: str) -> None:
    """Print the configuration of one project."""
    project = config.projects.get(project_id)
    if project is None:
        _err(f"Error: Project '{project_id}' not found in configuration.")
        return
    print(project.describe())


def handle_config_validate(config: ConfigFile) -> None:
    """Report that the configuration loaded; parsing already validated it."""
    print("Configuration loaded successfully.")


def handle_config_add(config_path_override: Path | str | None = None) -> None:
    """Interactively define a new project and save it to the configuration."""
    print("Adding a new project configuration interactively.")

    try:
        config = load_config(config_path_override)
    except ConfigNotFoundError:
        print("No existing config file found. Creating new one.")
        config = ConfigFile()
    except PorterError as exc:
        _err(f"Error loading existing configuration: {exc}")
        _err("Cannot proceed with adding project.")
        raise

    project_id = validate_project_id(
        ask_text(
            "Project ID (e.g., 'my-library')",
            validate=lambda v: validate_project_id(v, config.projects),
        ),
        config.projects,
    )
    internal_repo_path = validate_repo_path(
        ask_text(
            "Internal Git Repo Path (absolute path to the repo root)",
            validate=validate_repo_path,
        )
    )
    project_subdir = validate_subdir(
        ask_text(
            "Project Subdirectory (relative path within the repo, use '.' for repo root)",
            validate=lambda v: validate_subdir(v, internal_repo_path),
        ),
        internal_repo_path,
    )
    output_path = validate_output_path(
        ask_text(
            "Output Path (absolute path for the clean OSS version)",
            validate=validate_output_path,
        )
    )
    mode_index = select("History Mode", _HISTORY_MODE_ITEMS, default=0)
    history_mode = HistoryMode.CLEAN_SLATE if mode_index == 0 else HistoryMode.PRESERVE

    internal_branch = validate_branch(
        ask_text(
            "Internal Branch to track",
            validate=validate_branch,
            default=DEFAULT_BRANCH,
        )
    )
    public_branch = validate_branch(
        ask_text(
            "Public Branch to push to",
            validate=validate_branch,
            default=DEFAULT_BRANCH,
        )
    )

    public_repo_url = ask_text(
        "Public Repo URL (Optional, e.g., git@example.com:org/repo.git)",
        allow_empty=True,
    ).strip() or None
    license_id = ask_text(
        "License (Optional, SPDX ID like 'MIT' or 'Apache-2.0')",
        allow_empty=True,
    ).strip() or None

    project = ProjectConfig(
        internal_repo_path=internal_repo_path,
        project_subdir=project_subdir,
        output_path=output_path,
        public_repo_url=public_repo_url,
        history_mode=history_mode,
        license=license_id,
        internal_branch=internal_branch,
        public_branch=public_branch,
    )

    print("\n--- New project configuration ---")
    print(project.describe())
    print("---------------------------------")

    if confirm("Save this project configuration?"):
        config.projects[project_id] = project
        save_config(config, config_path_override)
        print(f"Project '{project_id}' added to configuration.")
    else:
        print("Project addition cancelled.")


def handle_config_remove(
    project_id: str, config_path_override: Path | str | None = None
) -> None:
    """Remove a project from the configuration after confirmation."""
    print(f"Attempting to remove project '{project_id}' from configuration.")

    try:
        config = load_config(config_path_override)
    except ConfigNotFoundError as exc:
        _err(f"Error: Configuration file not found at {exc.path}. Cannot remove project.")
        raise
    except PorterError as exc:
        _err(f"Error loading configuration: {exc}")
        raise

    project = config.projects.get(project_id)
    if project is None:
        _err(f"Error: Project '{project_id}' not found in the configuration.")
        raise PorterError(f"Project '{project_id}' not found")

    print(f"\n--- Configuration for project '{project_id}' ---")
    print(project.describe())
    print("------------------------------------------")

    if confirm(
        f"Are you sure you want to remove project '{project_id}' from the configuration?",
        default=False,
    ):
        del config.projects[project_id]
        save_config(config, config_path_override)
        print(f"Project '{project_id}' removed from configuration.")
    else:
        print("Removal cancelled.")