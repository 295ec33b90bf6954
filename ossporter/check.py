"""Pre-publication checks run against an extracted project."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from .errors import ConfigError, PathNotFoundError, PorterIOError
from .extract import scan_secrets_basic
from .models import CheckResult, ProjectConfig

log = logging.getLogger(__name__)

_DEPENDENCY_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")
_LICENSE_PREFIXES = ("license", "copying")


def _load_manifest(cargo_toml_path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(cargo_toml_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {cargo_toml_path}: {exc}") from exc


def _path_dependencies(
    manifest: dict[str, Any], cargo_toml_path: Path
) -> list[tuple[str, str, str]]:
    """Return (section, name, path) for every dependency given by path."""
    found = []
    for section in _DEPENDENCY_SECTIONS:
        deps = manifest.get(section, {})
        if not isinstance(deps, dict):
            raise ConfigError(
                f"Failed to parse {cargo_toml_path}: invalid type for `{section}`: "
                "expected a table"
            )
        for name in sorted(deps):
            spec = deps[name]
            if isinstance(spec, dict) and isinstance(spec.get("path"), str):
                found.append((section, name, spec["path"]))
    return found


def check_internal_dependencies(output_path: Path | str) -> list[str]:
    """Report Cargo.toml path dependencies that point outside ``output_path``."""
    output_path = Path(output_path)
    log.info("Checking for internal path dependencies in %s", output_path)
    findings: list[str] = []
    cargo_toml_path = output_path / "Cargo.toml"

    if not cargo_toml_path.exists():
        log.warning("Cargo.toml not found in output path, skipping dependency check.")
        return findings

    manifest = _load_manifest(cargo_toml_path)

    try:
        canonical_output = output_path.resolve(strict=True)
    except OSError as exc:
        raise PorterIOError(exc, output_path) from exc

    for section, name, dep_path_str in _path_dependencies(manifest, cargo_toml_path):
        log.debug(
            "Checking path dependency '%s' from section '[%s]': %s",
            name,
            section,
            dep_path_str,
        )
        try:
            canonical_dep = (output_path / dep_path_str).resolve(strict=True)
        except OSError as exc:
            finding = (
                f"Path dependency '{name}' in section '[{section}]' ('{dep_path_str}') "
                f"could not be canonicalized: {exc}. It might be invalid or point outside."
            )
            log.warning("%s", finding)
            findings.append(finding)
            continue

        if canonical_dep.is_relative_to(canonical_output):
            log.debug(
                "Dependency '%s' path '%s' is within output directory.",
                name,
                dep_path_str,
            )
        else:
            finding = (
                f"Potential internal path dependency found in section '[{section}]': "
                f"'{name}' points to '{dep_path_str}' (outside {output_path})"
            )
            log.warning("%s", finding)
            findings.append(finding)

    log.info(
        "Internal dependency check completed. Found %d potential issues.",
        len(findings),
    )
    return findings


def _has_license_file(directory: Path) -> bool:
    try:
        names = [entry.name.lower() for entry in directory.iterdir()]
    except OSError as exc:
        raise PorterIOError(exc, directory) from exc
    return any(name.startswith(_LICENSE_PREFIXES) for name in names)


def check_project(project_id: str, config: ProjectConfig) -> CheckResult:
    """Run the secret, dependency and licence checks on the output directory."""
    output_path = config.output_path
    log.info("Running checks for project '%s' in %s", project_id, output_path)

    if not output_path.exists():
        raise PathNotFoundError(output_path)

    secrets = scan_secrets_basic(output_path)
    internal_deps = check_internal_dependencies(output_path)

    license_ok = _has_license_file(output_path)
    if not license_ok:
        log.warning(
            "No file starting with 'LICENSE' or 'COPYING' found in output directory."
        )

    return CheckResult(
        project_id=project_id,
        secrets_found=secrets,
        internal_deps_found=internal_deps,
        license_ok=license_ok,
    )