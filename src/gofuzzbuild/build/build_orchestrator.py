"""Assemble the go build flag set and run the toolchain once."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from gofuzzbuild.core.config import BuildConfig
from gofuzzbuild.core.exceptions import BuildError
from gofuzzbuild.core.schema import BuildInvocation, ResolvedTarget

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Named constants
# ---------------------------------------------------------------------------

#: Produce a static library plus C header instead of an executable.
BUILD_MODE = "c-archive"

#: Enable the libFuzzer instrumentation pass for every package in the build.
INSTRUMENT_GCFLAGS = "all=-d=libfuzzer"

#: Packages whose instrumentation breaks the runtime's signal/syscall handling
#: (https://github.com/google/oss-fuzz/issues/3639).
SUPPRESSED_PACKAGES = ("syscall",)

#: Suffix appended to the package name when no output path is given.
DEFAULT_OUTPUT_SUFFIX = "-fuzz.a"


def build_flags(config: BuildConfig) -> list[str]:
    """Return the go build flags shared by the package query and the build."""
    flags = [
        "-buildmode", BUILD_MODE,
        "-gcflags", INSTRUMENT_GCFLAGS,
    ]
    for pkg in SUPPRESSED_PACKAGES:
        flags.extend(["-gcflags", f"{pkg}=-d=libfuzzer=0"])
    flags.extend(["-tags", config.tags])
    flags.append("-trimpath")

    if config.race:
        flags.append("-race")
    if config.verbose:
        flags.append("-v")
    if config.keep_work:
        flags.append("-work")
    if config.print_commands:
        flags.append("-x")
    return flags


def default_output(package_name: str) -> Path:
    """Artifact path used when the user gives none."""
    return Path(package_name + DEFAULT_OUTPUT_SUFFIX)


def header_path(archive: Path) -> Path:
    """Path of the C header go writes next to a c-archive."""
    return archive.with_suffix(".h")


class BuildOrchestrator:
    """Compile the generated harness and its target into a c-archive."""

    def __init__(self, go_bin: str = "go", work_dir: Path | None = None) -> None:
        self._go_bin = go_bin
        self._work_dir = Path(work_dir) if work_dir else Path.cwd()

    def invocation(
        self,
        config: BuildConfig,
        target: ResolvedTarget,
        source_file: Path,
    ) -> BuildInvocation:
        """Build the command for ``source_file``; output defaults to ``<name>-fuzz.a``."""
        return BuildInvocation(
            go_bin=self._go_bin,
            flags=tuple(build_flags(config)),
            source_file=source_file,
            output_file=config.output or default_output(target.package_name),
        )

    def artifact_path(self, invocation: BuildInvocation) -> Path:
        """Where the archive lands (relative outputs resolve against the work dir)."""
        out = invocation.output_file
        return out if out.is_absolute() else self._work_dir / out

    def run(self, invocation: BuildInvocation) -> Path:
        """Run go build with inherited stdout/stderr; return the artifact path.

        Raises:
            BuildError: go could not be started or exited non-zero.
        """
        log.info("Running: %s", shlex.join(invocation.args))
        try:
            result = subprocess.run(invocation.args, cwd=str(self._work_dir))
        except OSError as e:
            raise BuildError(f"failed to build packages: {e}") from e
        if result.returncode != 0:
            raise BuildError(f"failed to build packages: exit status {result.returncode}")
        artifact = self.artifact_path(invocation)
        log.info("Built %s", artifact)
        return artifact
