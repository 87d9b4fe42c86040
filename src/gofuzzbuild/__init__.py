"""gofuzzbuild: build libFuzzer-instrumented c-archives from Go fuzz functions."""

__version__ = "0.1.0"
