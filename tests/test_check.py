from pathlib import Path

import pytest

from ossporter.check import check_internal_dependencies, check_project
from ossporter.errors import ConfigError, PathNotFoundError
from ossporter.models import ProjectConfig


def _config(output: Path) -> ProjectConfig:
    return ProjectConfig(
        internal_repo_path=output.parent / "internal",
        project_subdir=Path("."),
        output_path=output,
    )


@pytest.fixture
def project(tmp_path: Path) -> Path:
    out = tmp_path / "out"
    out.mkdir()
    return out


def test_no_manifest_gives_no_findings(project):
    assert check_internal_dependencies(project) == []


def test_dependency_outside_is_reported(tmp_path, project):
    (tmp_path / "sibling").mkdir()
    (project / "Cargo.toml").write_text(
        '[package]\nname = "x"\n\n[dependencies]\nsib = { path = "../sibling" }\n'
    )
    findings = check_internal_dependencies(project)
    assert len(findings) == 1
    assert "'sib'" in findings[0]
    assert "[dependencies]" in findings[0]
    assert "../sibling" in findings[0]


def test_dependency_inside_is_fine(project):
    (project / "crates" / "inner").mkdir(parents=True)
    (project / "Cargo.toml").write_text(
        '[package]\nname = "x"\n\n[dev-dependencies]\ninner = { path = "crates/inner" }\n'
    )
    assert check_internal_dependencies(project) == []


def test_missing_dependency_path_is_reported(project):
    (project / "Cargo.toml").write_text(
        '[package]\nname = "x"\n\n[build-dependencies]\ngone = { path = "nowhere" }\n'
    )
    findings = check_internal_dependencies(project)
    assert len(findings) == 1
    assert "could not be canonicalized" in findings[0]
    assert "[build-dependencies]" in findings[0]


def test_version_dependencies_are_ignored(project):
    (project / "Cargo.toml").write_text(
        '[package]\nname = "x"\n\n[dependencies]\nserde = "1"\nlog = { version = "0.4" }\n'
    )
    assert check_internal_dependencies(project) == []


def test_sections_are_checked_in_order(tmp_path, project):
    (tmp_path / "a").mkdir()
    (project / "Cargo.toml").write_text(
        '[package]\nname = "x"\n'
        '[build-dependencies]\nb = { path = "../a" }\n'
        '[dependencies]\nd = { path = "../a" }\n'
    )
    findings = check_internal_dependencies(project)
    assert len(findings) == 2
    assert "[dependencies]" in findings[0]
    assert "[build-dependencies]" in findings[1]


def test_invalid_manifest_raises(project):
    (project / "Cargo.toml").write_text("[package\nname = ")
    with pytest.raises(ConfigError):
        check_internal_dependencies(project)


def test_check_project_missing_output(tmp_path):
    with pytest.raises(PathNotFoundError):
        check_project("demo", _config(tmp_path / "missing"))


@pytest.mark.parametrize("name", ["LICENSE", "LICENSE-MIT", "license.txt", "COPYING"])
def test_check_project_detects_license(project, name):
    (project / name).write_text("text")
    result = check_project("demo", _config(project))
    assert result.license_ok is True
    assert result.project_id == "demo"


def test_check_project_without_license(project):
    (project / "README.md").write_text("hello")
    result = check_project("demo", _config(project))
    assert result.license_ok is False
    assert result.secrets_found == []
    assert result.internal_deps_found == []


def test_check_project_reports_secrets_and_deps(tmp_path, project):
    (tmp_path / "sibling").mkdir()
    (project / "settings.py").write_text('password = "placeholder"\n')
    (project / "Cargo.toml").write_text(
        '[package]\nname = "x"\n[dependencies]\nsib = { path = "../sibling" }\n'
    )
    result = check_project("demo", _config(project))
    assert len(result.secrets_found) == 1
    assert result.secrets_found[0].endswith("settings.py:1")
    assert len(result.internal_deps_found) == 1