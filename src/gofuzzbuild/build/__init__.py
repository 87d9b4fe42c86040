"""Build: go build flag assembly, invocation, and run logging."""

from gofuzzbuild.build.build_orchestrator import BuildOrchestrator, build_flags, default_output

__all__ = [
    "BuildOrchestrator",
    "build_flags",
    "default_output",
]
