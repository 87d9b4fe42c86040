"""Tests for BuildOrchestrator flag assembly and the go build run."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from gofuzzbuild.build.build_orchestrator import (
    BUILD_MODE,
    INSTRUMENT_GCFLAGS,
    SUPPRESSED_PACKAGES,
    BuildOrchestrator,
    build_flags,
    default_output,
    header_path,
)
from gofuzzbuild.core.config import BuildConfig
from gofuzzbuild.core.exceptions import BuildError
from gofuzzbuild.core.schema import ResolvedTarget

from _helpers import completed

RUN = "gofuzzbuild.build.build_orchestrator.subprocess.run"

SAMPLE = ResolvedTarget(import_path="example.com/sample", package_name="sample")


# ---------------------------------------------------------------------------
# build_flags
# ---------------------------------------------------------------------------


class TestBuildFlags:
    def test_default_flags_in_order(self, build_config: BuildConfig) -> None:
        assert build_flags(build_config) == [
            "-buildmode", "c-archive",
            "-gcflags", "all=-d=libfuzzer",
            "-gcflags", "syscall=-d=libfuzzer=0",
            "-tags", "gofuzz,gofuzz_libfuzzer,libfuzzer",
            "-trimpath",
        ]

    def test_constants(self) -> None:
        assert BUILD_MODE == "c-archive"
        assert INSTRUMENT_GCFLAGS == "all=-d=libfuzzer"
        assert "syscall" in SUPPRESSED_PACKAGES

    def test_every_suppressed_package_gets_gcflags(self, build_config: BuildConfig) -> None:
        flags = build_flags(build_config)
        for pkg in SUPPRESSED_PACKAGES:
            i = flags.index(f"{pkg}=-d=libfuzzer=0")
            assert flags[i - 1] == "-gcflags"

    def test_user_tags_appended_once(self) -> None:
        flags = build_flags(BuildConfig.create(extra_tags="netgo,osusergo"))
        tags = flags[flags.index("-tags") + 1]
        assert tags == "gofuzz,gofuzz_libfuzzer,libfuzzer,netgo,osusergo"
        assert flags.count("-tags") == 1

    @pytest.mark.parametrize(
        "option, flag",
        [("race", "-race"), ("verbose", "-v"), ("keep_work", "-work"), ("print_commands", "-x")],
    )
    def test_optional_flags_only_when_requested(self, build_config: BuildConfig, option: str, flag: str) -> None:
        assert flag not in build_flags(build_config)
        flags = build_flags(BuildConfig.create(**{option: True}))
        assert flags[-1] == flag
        assert flags.count(flag) == 1

    def test_optional_flags_keep_fixed_order(self) -> None:
        config = BuildConfig.create(race=True, verbose=True, keep_work=True, print_commands=True)
        assert build_flags(config)[-4:] == ["-race", "-v", "-work", "-x"]


def test_default_output_and_header() -> None:
    assert default_output("sample") == Path("sample-fuzz.a")
    assert header_path(Path("out/sample-fuzz.a")) == Path("out/sample-fuzz.h")


# ---------------------------------------------------------------------------
# invocation
# ---------------------------------------------------------------------------


def test_invocation_defaults_output_to_package_name(tmp_path: Path, build_config: BuildConfig) -> None:
    orch = BuildOrchestrator(go_bin="go", work_dir=tmp_path)
    inv = orch.invocation(build_config, SAMPLE, Path("main.123.go"))
    assert inv.output_file == Path("sample-fuzz.a")
    assert inv.args[:4] == ["go", "build", "-o", "sample-fuzz.a"]
    assert inv.args[4:-1] == build_flags(build_config)
    assert inv.args[-1] == "main.123.go"
    assert orch.artifact_path(inv) == tmp_path / "sample-fuzz.a"


def test_invocation_uses_user_output(tmp_path: Path) -> None:
    out = tmp_path / "dist" / "parser.a"
    orch = BuildOrchestrator(work_dir=tmp_path)
    inv = orch.invocation(BuildConfig.create(output=out), SAMPLE, Path("main.1.go"))
    assert inv.args[3] == str(out)
    assert orch.artifact_path(inv) == out


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


def test_run_inherits_streams_and_runs_in_work_dir(tmp_path: Path, build_config: BuildConfig) -> None:
    orch = BuildOrchestrator(go_bin="/usr/local/go/bin/go", work_dir=tmp_path)
    inv = orch.invocation(build_config, SAMPLE, Path("main.1.go"))
    with patch(RUN, return_value=completed()) as run:
        artifact = orch.run(inv)
    run.assert_called_once_with(inv.args, cwd=str(tmp_path))
    assert artifact == tmp_path / "sample-fuzz.a"


def test_run_nonzero_exit_raises(tmp_path: Path, build_config: BuildConfig) -> None:
    orch = BuildOrchestrator(work_dir=tmp_path)
    inv = orch.invocation(build_config, SAMPLE, Path("main.1.go"))
    with patch(RUN, return_value=completed(returncode=2)):
        with pytest.raises(BuildError, match="failed to build packages: exit status 2"):
            orch.run(inv)


def test_run_missing_go_raises(tmp_path: Path, build_config: BuildConfig) -> None:
    orch = BuildOrchestrator(go_bin="nope-go", work_dir=tmp_path)
    inv = orch.invocation(build_config, SAMPLE, Path("main.1.go"))
    with patch(RUN, side_effect=FileNotFoundError(2, "No such file or directory", "nope-go")):
        with pytest.raises(BuildError, match="nope-go"):
            orch.run(inv)
