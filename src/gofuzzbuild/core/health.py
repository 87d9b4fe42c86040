"""Health checks for the Go toolchain a fuzz build needs."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from gofuzzbuild.core.config import ConfigManager


@dataclass
class HealthCheckResult:
    """Result of a single health check."""

    name: str
    ok: bool
    message: str = ""
    suggestion: str = ""


def _run_cmd(cmd: list[str], timeout: int = 10) -> tuple[bool, str]:
    """Run command, return (success, output_or_error)."""
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        if result.returncode == 0:
            return True, (result.stdout or "").strip()
        return False, (result.stderr or result.stdout or f"exit code {result.returncode}").strip()
    except FileNotFoundError:
        return False, "command not found"
    except subprocess.TimeoutExpired:
        return False, "timeout"
    except OSError as e:
        return False, str(e)


def _resolve_go_bin(go_bin: str) -> tuple[str, Path | None]:
    """Return (binary_str, absolute_path or None) for the configured go binary."""
    found = shutil.which(go_bin)
    if found:
        return found, Path(found).resolve()
    return go_bin, None


class HealthChecker:
    """Check that go is runnable and cgo is enabled (c-archive needs it)."""

    def __init__(self, config: ConfigManager | None = None) -> None:
        self._config = config or ConfigManager()

    def check_go(self) -> HealthCheckResult:
        go_bin_str, go_bin_path = _resolve_go_bin(self._config.config.go_bin)
        ok, out = _run_cmd([go_bin_str, "version"])
        if not ok:
            return HealthCheckResult(
                name="go",
                ok=False,
                message=out or "go version failed",
                suggestion=(
                    "Install Go 1.17 or newer from https://go.dev/dl/ and add it to PATH, "
                    "or set GOFUZZBUILD_GO to the go binary."
                ),
            )
        message = out or "OK"
        if go_bin_path:
            message = f"{message} (binary: {go_bin_path})"
        return HealthCheckResult(name="go", ok=True, message=message)

    def check_cgo(self) -> HealthCheckResult:
        ok, out = _run_cmd([self._config.config.go_bin, "env", "CGO_ENABLED"])
        if not ok:
            return HealthCheckResult(name="cgo", ok=False, message=out or "go env failed")
        if out != "1":
            return HealthCheckResult(
                name="cgo",
                ok=False,
                message=f"CGO_ENABLED={out or '0'}",
                suggestion="Set CGO_ENABLED=1 and install a C compiler (clang or gcc); -buildmode=c-archive needs cgo.",
            )
        return HealthCheckResult(name="cgo", ok=True, message="CGO_ENABLED=1")

    def check_all(self) -> list[HealthCheckResult]:
        """Run all checks; cgo is only checked when go itself works."""
        results = [self.check_go()]
        if results[0].ok:
            results.append(self.check_cgo())
        return results
