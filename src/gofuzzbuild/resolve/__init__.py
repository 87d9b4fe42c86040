"""Target resolution via the go package query."""

from gofuzzbuild.resolve.target_resolver import TargetResolver

__all__ = ["TargetResolver"]
