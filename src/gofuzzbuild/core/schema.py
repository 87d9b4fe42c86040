"""Pydantic models passed between the resolve, generate and build steps."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class PackageInfo(BaseModel):
    """One package record from ``go list -json``."""

    import_path: str = ""
    name: str = ""
    dir: str = ""
    error: str | None = None

    @classmethod
    def from_go_list(cls, record: dict[str, Any]) -> PackageInfo:
        """Build from the raw JSON object (``ImportPath``, ``Name``, ``Dir``, ``Error.Err``)."""
        err = record.get("Error")
        if isinstance(err, dict):
            message = err.get("Err") or ""
            pos = err.get("Pos")
            err = f"{pos}: {message}" if pos else message
        return cls(
            import_path=record.get("ImportPath", ""),
            name=record.get("Name", ""),
            dir=record.get("Dir", ""),
            error=err or None,
        )


class ResolvedTarget(BaseModel):
    """The single package a build is for."""

    model_config = {"frozen": True}

    import_path: str
    package_name: str


class BuildInvocation(BaseModel):
    """A fully assembled ``go build`` command."""

    model_config = {"frozen": True}

    go_bin: str = "go"
    flags: tuple[str, ...] = Field(default_factory=tuple)
    source_file: Path
    output_file: Path

    @property
    def args(self) -> list[str]:
        return [self.go_bin, "build", "-o", str(self.output_file), *self.flags, str(self.source_file)]


class BuildResult(BaseModel):
    """Outcome of a successful run."""

    target: ResolvedTarget
    invocation: BuildInvocation
    artifact: Path
    header: Path
