import subprocess
from pathlib import Path
from unittest import mock

import pytest

from ossporter.errors import (
    GitOperationError,
    OutputPathExistsError,
    PathNotFoundError,
    ToolNotFoundError,
)
from ossporter.extract import (
    add_license_file,
    ensure_gitignore,
    extract_clean_slate,
    extract_preserve_history,
    scan_secrets_basic,
)
from ossporter.models import ProjectConfig
from ossporter.state import STATE_FILE_NAME
from ossporter.utils import run_git_command


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    global_config = tmp_path / "gitconfig"
    global_config.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Tester")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "tester@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Tester")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "tester@example.com")


def _config(tmp_path, license_id=None):
    return ProjectConfig(
        internal_repo_path=tmp_path / "internal",
        project_subdir=Path("proj"),
        output_path=tmp_path / "out",
        license=license_id,
    )


def test_scan_finds_password_assignment(tmp_path):
    target = tmp_path / "settings.py"
    target.write_text('name = "demo"\npassword = "password"\n')
    assert scan_secrets_basic(tmp_path) == [f"Potential secret found in {target}:2"]


def test_scan_finds_long_base64_like_string(tmp_path):
    target = tmp_path / "data.txt"
    target.write_text("short abc\n" + "Q" * 45 + "\n")
    findings = scan_secrets_basic(tmp_path)
    assert findings == [f"Potential secret found in {target}:2"]


def test_scan_reports_one_finding_per_line(tmp_path):
    target = tmp_path / "both.cfg"
    target.write_text('api_key = "' + "Z" * 50 + '"\n')
    assert len(scan_secrets_basic(tmp_path)) == 1


def test_scan_ignores_target_and_git_directories(tmp_path):
    for name in ("target", ".git"):
        sub = tmp_path / name
        sub.mkdir()
        (sub / "file.txt").write_text('secret = "secret"\n')
    assert scan_secrets_basic(tmp_path) == []


def test_scan_skips_non_utf8_files(tmp_path):
    (tmp_path / "blob.bin").write_bytes(b"\xff\xfe" + b"A" * 60)
    assert scan_secrets_basic(tmp_path) == []


def test_scan_clean_directory_is_empty(tmp_path):
    (tmp_path / "main.rs").write_text("fn main() {}\n")
    assert scan_secrets_basic(tmp_path) == []


def test_add_license_file_none_creates_nothing(tmp_path):
    add_license_file(None, tmp_path)
    assert list(tmp_path.iterdir()) == []


def test_add_license_file_creates_placeholder(tmp_path):
    add_license_file("custom", tmp_path)
    created = tmp_path / "LICENSE-CUSTOM"
    assert created.read_text() == "Placeholder for custom License Text."


def test_add_license_file_respects_existing_generic_license(tmp_path):
    (tmp_path / "LICENSE").write_text("existing")
    add_license_file("custom", tmp_path)
    assert sorted(p.name for p in tmp_path.iterdir()) == ["LICENSE"]


def test_ensure_gitignore_creates_default(tmp_path):
    ensure_gitignore(tmp_path)
    assert (tmp_path / ".gitignore").read_text() == "/target\nCargo.lock\n"


def test_ensure_gitignore_keeps_existing(tmp_path):
    (tmp_path / ".gitignore").write_text("*.log\n")
    ensure_gitignore(tmp_path)
    assert (tmp_path / ".gitignore").read_text() == "*.log\n"


def test_clean_slate_missing_source_raises(tmp_path):
    config = _config(tmp_path)
    with pytest.raises(PathNotFoundError) as info:
        extract_clean_slate("demo", config)
    assert info.value.path == tmp_path / "internal" / "proj"


def test_clean_slate_non_empty_output_raises(tmp_path):
    config = _config(tmp_path)
    (tmp_path / "internal" / "proj").mkdir(parents=True)
    config.output_path.mkdir()
    (config.output_path / "existing.txt").write_text("x")
    with pytest.raises(OutputPathExistsError) as info:
        extract_clean_slate("demo", config)
    assert info.value.path == config.output_path


def test_clean_slate_extracts_and_commits(tmp_path, git_env):
    config = _config(tmp_path, license_id="custom")
    internal_tree = tmp_path / "internal" / "proj"
    (internal_tree / "src").mkdir(parents=True)
    (internal_tree / "src" / "lib.rs").write_text("pub fn f() {}\n")
    (internal_tree / STATE_FILE_NAME).write_text('last_synced_internal_commit = "abc"\n')

    result = extract_clean_slate("demo", config)

    out = config.output_path
    assert result.project_id == "demo"
    assert result.output_path == out
    assert (out / "src" / "lib.rs").read_text() == "pub fn f() {}\n"
    assert not (out / STATE_FILE_NAME).exists()
    assert (out / "LICENSE-CUSTOM").exists()
    assert (out / ".gitignore").exists()
    assert (out / ".git").is_dir()
    assert result.secrets_found == []
    assert result.messages[-1] == "Created initial Git commit."
    assert "Initialized Git repository." in result.messages

    log_output = run_git_command(["log", "--pretty=format:%s"], out)
    assert log_output.stdout.decode() == "Initial commit of open source project 'demo'"
    # the internal tree is left untouched
    assert (internal_tree / STATE_FILE_NAME).exists()


def test_clean_slate_reports_secrets(tmp_path, git_env):
    config = _config(tmp_path)
    internal_tree = tmp_path / "internal" / "proj"
    internal_tree.mkdir(parents=True)
    (internal_tree / "conf.toml").write_text('token = "x"\npassword = "password"\n')

    result = extract_clean_slate("demo", config)

    assert len(result.secrets_found) == 1
    assert "Warning: 1 potential secrets found during basic scan." in result.messages


def _fake_run_factory(missing_tool=None):
    def fake_run(cmd, *args, **kwargs):
        if cmd[0] == missing_tool:
            raise FileNotFoundError(cmd[0])
        return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")

    return fake_run


def test_preserve_requires_git_filter_repo(tmp_path):
    config = _config(tmp_path)
    with mock.patch(
        "subprocess.run", side_effect=_fake_run_factory("git-filter-repo")
    ):
        with pytest.raises(ToolNotFoundError) as info:
            extract_preserve_history("demo", config)
    assert info.value.tool == "git-filter-repo"


def test_preserve_requires_git_repository(tmp_path):
    config = _config(tmp_path)
    (tmp_path / "internal" / "proj").mkdir(parents=True)
    with mock.patch("subprocess.run", side_effect=_fake_run_factory()):
        with pytest.raises(GitOperationError) as info:
            extract_preserve_history("demo", config)
    assert "does not appear to be a git repository root" in str(info.value)


def test_preserve_missing_subdir_raises(tmp_path):
    config = _config(tmp_path)
    (tmp_path / "internal" / ".git").mkdir(parents=True)
    with mock.patch("subprocess.run", side_effect=_fake_run_factory()):
        with pytest.raises(PathNotFoundError) as info:
            extract_preserve_history("demo", config)
    assert info.value.path == tmp_path / "internal" / "proj"


def test_preserve_non_empty_output_raises(tmp_path):
    config = _config(tmp_path)
    (tmp_path / "internal" / ".git").mkdir(parents=True)
    (tmp_path / "internal" / "proj").mkdir()
    config.output_path.mkdir()
    (config.output_path / "keep.txt").write_text("x")
    with mock.patch("subprocess.run", side_effect=_fake_run_factory()):
        with pytest.raises(OutputPathExistsError):
            extract_preserve_history("demo", config)
    assert (config.output_path / "keep.txt").read_text() == "x"