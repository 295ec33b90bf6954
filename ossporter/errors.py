"""Exception hierarchy raised by the porter."""

from __future__ import annotations

from pathlib import Path


class PorterError(Exception):
    """Base class for every error the porter raises."""

    prefix = ""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(f"{self.prefix}{message}")


class ConfigError(PorterError):
    """The configuration is invalid or cannot be located."""

    prefix = "Configuration Error: "


class ConfigNotFoundError(PorterError):
    """The configuration file does not exist."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(
            f"Configuration file not found at path: {self.path}\n"
            "Consider running `oss-porter config init` to create a default file."
        )


class PorterIOError(PorterError):
    """An operating-system level I/O failure tied to a path."""

    def __init__(self, source: BaseException, path: Path | str) -> None:
        self.source = source
        self.path = Path(path)
        super().__init__(f"I/O Error accessing '{self.path}': {source}")


class FsError(PorterError):
    """A compound filesystem operation (copy, move) failed."""

    prefix = "Filesystem operation failed: "


class GitCommandError(PorterError):
    """An external command exited unsuccessfully."""

    def __init__(
        self,
        cmd: str,
        cwd: Path | str,
        status: str,
        stdout: str,
        stderr: str,
    ) -> None:
        self.cmd = cmd
        self.cwd = Path(cwd)
        self.status = status
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            "Git command failed.\n"
            f" Command: {cmd}\n"
            f" CWD: {self.cwd}\n"
            f" Status: {status}\n"
            f" Stdout: {stdout}\n"
            f" Stderr: {stderr}"
        )


class GitOperationError(PorterError):
    """A higher level git operation could not be carried out."""

    prefix = "Git operation failed: "


class PathNotFoundError(PorterError):
    """A required path does not exist."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Required path not found: {self.path}")


class OutputPathExistsError(PorterError):
    """The output directory exists and already has content."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Output path already exists and is not empty: {self.path}")


class ToolNotFoundError(PorterError):
    """A required external tool is not available."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(
            f"Required external tool '{tool}' not found in PATH. Please install it."
        )


class SecretsFoundError(PorterError):
    """Potential secrets were detected."""

    prefix = "Secrets Scan Warning: "


class InternalDependencyError(PorterError):
    """A dependency points outside the extracted project."""

    prefix = "Dependency Check Warning: "


class TomlParseError(PorterError):
    """A TOML file could not be parsed."""

    def __init__(self, source: BaseException, path: Path | str) -> None:
        self.source = source
        self.path = Path(path)
        super().__init__(f"Failed to parse TOML file '{self.path}': {source}")


class TomlSerializeError(PorterError):
    """Data could not be serialised to TOML."""

    prefix = "Failed to serialize TOML data: "


class TempDirError(PorterError):
    """A temporary directory could not be created or accessed."""

    def __init__(self, source: BaseException) -> None:
        self.source = source
        super().__init__(f"Failed to create/access temporary directory: {source}")