"""Resolve a package pattern to exactly one Go package via ``go list``."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Iterator

from gofuzzbuild.core.exceptions import ConfigError, ResolveError
from gofuzzbuild.core.schema import PackageInfo, ResolvedTarget

log = logging.getLogger(__name__)

#: Recursive wildcard; a fuzz build needs exactly one package.
WILDCARD = "..."

#: Import path prefix go uses for directories outside any module.
LOCAL_PATH_MARKER = "_/"


def _decode_stream(text: str) -> Iterator[dict]:
    """Yield each object of a concatenated JSON stream (``go list -json`` output)."""
    decoder = json.JSONDecoder()
    idx = 0
    end = len(text)
    while True:
        while idx < end and text[idx].isspace():
            idx += 1
        if idx >= end:
            return
        obj, idx = decoder.raw_decode(text, idx)
        yield obj


def format_package_errors(packages: list[PackageInfo]) -> str:
    """One ``importpath: message`` line per package error."""
    lines = []
    for pkg in packages:
        if pkg.error:
            lines.append(f"{pkg.import_path}: {pkg.error}" if pkg.import_path else pkg.error)
    return "\n".join(lines)


class TargetResolver:
    """Query package metadata with the same build flags the final build uses."""

    def __init__(self, go_bin: str = "go", work_dir: Path | None = None) -> None:
        self._go_bin = go_bin
        self._work_dir = Path(work_dir) if work_dir else Path.cwd()

    def load_packages(self, pattern: str, build_flags: list[str]) -> list[PackageInfo]:
        """Run ``go list -e -json`` for ``pattern``; names only, nothing is compiled.

        Raises:
            ResolveError: go could not be started, exited non-zero, or printed bad JSON.
        """
        args = [self._go_bin, "list", "-e", "-json", *build_flags, pattern]
        log.debug("Package query: %s", args)
        try:
            result = subprocess.run(
                args,
                cwd=str(self._work_dir),
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise ResolveError(f"failed to load packages: {e}") from e

        if result.stderr:
            log.debug("go list stderr:\n%s", result.stderr.rstrip())
        if result.returncode != 0:
            detail = (result.stderr or "").strip() or f"exit status {result.returncode}"
            raise ResolveError(f"failed to load packages: {detail}")

        try:
            packages = [PackageInfo.from_go_list(obj) for obj in _decode_stream(result.stdout or "")]
        except json.JSONDecodeError as e:
            raise ResolveError(f"failed to load packages: malformed go list output: {e}") from e
        log.debug("Package query matched %d package(s)", len(packages))
        return packages

    def resolve(self, pattern: str, build_flags: list[str]) -> ResolvedTarget:
        """Resolve ``pattern`` to exactly one package.

        Raises:
            ConfigError: wildcard pattern, or zero or several matching packages.
            ResolveError: the query failed or a package has load errors.
        """
        if WILDCARD in pattern:
            raise ConfigError("package path must not contain ... wildcards")

        packages = self.load_packages(pattern, build_flags)
        errors = format_package_errors(packages)
        if errors:
            raise ResolveError(errors)
        if not packages:
            raise ConfigError(f"no package found matching {pattern}")
        if len(packages) != 1:
            raise ConfigError("package path matched multiple packages")

        pkg = packages[0]
        import_path = pkg.import_path
        if import_path.startswith(LOCAL_PATH_MARKER):
            # Not importable from a separately compiled main package.
            import_path = pattern
        target = ResolvedTarget(import_path=import_path, package_name=pkg.name)
        log.info("Resolved %s to %s (package %s)", pattern, target.import_path, target.package_name)
        return target
