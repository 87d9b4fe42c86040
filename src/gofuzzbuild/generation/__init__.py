"""Harness generation: render and write the cgo bridge program."""

from gofuzzbuild.generation.harness_generator import harness_file, render_harness

__all__ = ["harness_file", "render_harness"]
