"""Configuration and result data types."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_BRANCH = "main"


class HistoryMode(enum.Enum):
    """How project history is carried into the public repository."""

    CLEAN_SLATE = "clean_slate"
    PRESERVE = "preserve"

    @classmethod
    def from_cli(cls, value: str) -> HistoryMode:
        """Parse the command-line spelling ("clean-slate" or "preserve")."""
        choices = {"clean-slate": cls.CLEAN_SLATE, "preserve": cls.PRESERVE}
        try:
            return choices[value]
        except KeyError:
            raise ValueError(
                f"invalid history mode '{value}' (choose from {', '.join(choices)})"
            ) from None

    def __str__(self) -> str:
        return "".join(part.capitalize() for part in self.value.split("_"))


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"invalid type for `{key}`: expected a string")
    return value


def _required_path(data: dict[str, Any], key: str) -> Path:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"invalid type for `{key}`: expected a path string")
    return Path(value)


def _debug_str(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _debug_option(value: str | None) -> str:
    if value is None:
        return "None"
    return f"Some(\n        {_debug_str(value)},\n    )"


@dataclass
class GlobalConfig:
    """Settings that apply to every project."""

    default_license: str | None = None
    secrets_scan_level: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GlobalConfig:
        if not isinstance(data, dict):
            raise ValueError("invalid type for `settings`: expected a table")
        return cls(
            default_license=_optional_str(data, "default_license"),
            secrets_scan_level=_optional_str(data, "secrets_scan_level"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.default_license is not None:
            result["default_license"] = self.default_license
        if self.secrets_scan_level is not None:
            result["secrets_scan_level"] = self.secrets_scan_level
        return result


@dataclass
class ProjectConfig:
    """Definition of a single project to extract and keep in sync."""

    internal_repo_path: Path
    project_subdir: Path
    output_path: Path
    public_repo_url: str | None = None
    history_mode: HistoryMode = HistoryMode.CLEAN_SLATE
    license: str | None = None
    internal_branch: str = DEFAULT_BRANCH
    public_branch: str = DEFAULT_BRANCH

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectConfig:
        if not isinstance(data, dict):
            raise ValueError("invalid type for project: expected a table")
        mode_value = data.get("history_mode", HistoryMode.CLEAN_SLATE.value)
        try:
            history_mode = HistoryMode(mode_value)
        except ValueError:
            raise ValueError(
                f"unknown variant `{mode_value}` for `history_mode`, "
                "expected `clean_slate` or `preserve`"
            ) from None
        internal_branch = _optional_str(data, "internal_branch")
        public_branch = _optional_str(data, "public_branch")
        return cls(
            internal_repo_path=_required_path(data, "internal_repo_path"),
            project_subdir=_required_path(data, "project_subdir"),
            output_path=_required_path(data, "output_path"),
            public_repo_url=_optional_str(data, "public_repo_url"),
            history_mode=history_mode,
            license=_optional_str(data, "license"),
            internal_branch=DEFAULT_BRANCH if internal_branch is None else internal_branch,
            public_branch=DEFAULT_BRANCH if public_branch is None else public_branch,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "internal_repo_path": str(self.internal_repo_path),
            "project_subdir": str(self.project_subdir),
            "output_path": str(self.output_path),
        }
        if self.public_repo_url is not None:
            result["public_repo_url"] = self.public_repo_url
        result["history_mode"] = self.history_mode.value
        if self.license is not None:
            result["license"] = self.license
        result["internal_branch"] = self.internal_branch
        result["public_branch"] = self.public_branch
        return result

    def describe(self) -> str:
        """Multi-line, field-by-field rendering for review by a user."""
        lines = [
            ("internal_repo_path", _debug_str(str(self.internal_repo_path))),
            ("project_subdir", _debug_str(str(self.project_subdir))),
            ("output_path", _debug_str(str(self.output_path))),
            ("public_repo_url", _debug_option(self.public_repo_url)),
            ("history_mode", str(self.history_mode)),
            ("license", _debug_option(self.license)),
            ("internal_branch", _debug_str(self.internal_branch)),
            ("public_branch", _debug_str(self.public_branch)),
        ]
        body = "".join(f"    {name}: {value},\n" for name, value in lines)
        return f"ProjectConfig {{\n{body}}}"


@dataclass
class ConfigFile:
    """The whole configuration: global settings plus projects by id."""

    settings: GlobalConfig = field(default_factory=GlobalConfig)
    projects: dict[str, ProjectConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConfigFile:
        settings = GlobalConfig.from_dict(data.get("settings", {}))
        raw_projects = data.get("projects", {})
        if not isinstance(raw_projects, dict):
            raise ValueError("invalid type for `projects`: expected a table")
        projects = {}
        for project_id, raw in raw_projects.items():
            try:
                projects[project_id] = ProjectConfig.from_dict(raw)
            except ValueError as exc:
                raise ValueError(f"project '{project_id}': {exc}") from exc
        return cls(settings=settings, projects=projects)

    def to_dict(self) -> dict[str, Any]:
        return {
            "settings": self.settings.to_dict(),
            "projects": {pid: proj.to_dict() for pid, proj in self.projects.items()},
        }


@dataclass
class ExtractionResult:
    """Outcome of an extraction run."""

    project_id: str
    output_path: Path
    messages: list[str] = field(default_factory=list)
    secrets_found: list[str] = field(default_factory=list)


@dataclass
class CheckResult:
    """Outcome of the pre-publication checks."""

    project_id: str
    secrets_found: list[str] = field(default_factory=list)
    internal_deps_found: list[str] = field(default_factory=list)
    license_ok: bool = False