import tomllib
from pathlib import Path

import pytest
import tomli_w

from ossporter.models import (
    CheckResult,
    ConfigFile,
    ExtractionResult,
    GlobalConfig,
    HistoryMode,
    ProjectConfig,
)


def _minimal():
    return {
        "internal_repo_path": "/repo",
        "project_subdir": "libs/thing",
        "output_path": "/out/thing",
    }


def test_project_defaults():
    project = ProjectConfig.from_dict(_minimal())
    assert project.history_mode is HistoryMode.CLEAN_SLATE
    assert project.internal_branch == "main"
    assert project.public_branch == "main"
    assert project.public_repo_url is None
    assert project.license is None
    assert project.internal_repo_path == Path("/repo")


def test_project_missing_field():
    data = _minimal()
    del data["output_path"]
    with pytest.raises(ValueError, match="output_path"):
        ProjectConfig.from_dict(data)


def test_project_bad_history_mode():
    data = _minimal() | {"history_mode": "sometimes"}
    with pytest.raises(ValueError, match="history_mode"):
        ProjectConfig.from_dict(data)


def test_project_bad_type():
    data = _minimal() | {"license": 5}
    with pytest.raises(ValueError):
        ProjectConfig.from_dict(data)


def test_project_round_trip():
    data = _minimal() | {
        "public_repo_url": "https://example.com/org/thing.git",
        "history_mode": "preserve",
        "license": "MIT",
        "internal_branch": "develop",
        "public_branch": "release",
    }
    project = ProjectConfig.from_dict(data)
    assert project.history_mode is HistoryMode.PRESERVE
    assert ProjectConfig.from_dict(project.to_dict()) == project
    assert project.to_dict() == data


def test_to_dict_omits_none():
    out = ProjectConfig.from_dict(_minimal()).to_dict()
    assert "public_repo_url" not in out
    assert "license" not in out
    assert out["history_mode"] == "clean_slate"


def test_history_mode_from_cli():
    assert HistoryMode.from_cli("clean-slate") is HistoryMode.CLEAN_SLATE
    assert HistoryMode.from_cli("preserve") is HistoryMode.PRESERVE
    with pytest.raises(ValueError):
        HistoryMode.from_cli("clean_slate_x")


def test_history_mode_str():
    assert str(HistoryMode.from_cli("clean-slate")) == "CleanSlate"
    assert str(HistoryMode.from_cli("preserve")) == "Preserve"


def test_describe_lists_every_field():
    project = ProjectConfig.from_dict(_minimal() | {"license": "MIT"})
    text = project.describe()
    assert text.startswith("ProjectConfig {\n")
    assert text.endswith("}")
    for name in (
        "internal_repo_path",
        "project_subdir",
        "output_path",
        "public_repo_url",
        "history_mode",
        "license",
        "internal_branch",
        "public_branch",
    ):
        assert f"    {name}: " in text
    assert "history_mode: CleanSlate," in text
    assert '"MIT"' in text


def test_global_config_round_trip():
    settings = GlobalConfig(default_license="MIT", secrets_scan_level="basic")
    assert GlobalConfig.from_dict(settings.to_dict()) == settings
    assert GlobalConfig().to_dict() == {}


def test_config_file_toml_round_trip():
    config = ConfigFile(
        settings=GlobalConfig(default_license="Apache-2.0"),
        projects={"alpha": ProjectConfig.from_dict(_minimal())},
    )
    text = tomli_w.dumps(config.to_dict())
    assert ConfigFile.from_dict(tomllib.loads(text)) == config


def test_config_file_empty():
    config = ConfigFile.from_dict({})
    assert config.projects == {}
    assert config.settings == GlobalConfig()


def test_config_file_reports_project_id():
    with pytest.raises(ValueError, match="beta"):
        ConfigFile.from_dict({"projects": {"beta": {"project_subdir": "x"}}})


def test_result_defaults():
    extraction = ExtractionResult(project_id="p", output_path=Path("/o"))
    assert extraction.messages == [] and extraction.secrets_found == []
    check = CheckResult(project_id="p")
    assert check.license_ok is False
    assert check.internal_deps_found == []