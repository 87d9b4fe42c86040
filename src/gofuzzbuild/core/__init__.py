"""Framework core: config, schema, exceptions, health."""

from gofuzzbuild.core.config import AppConfig, BuildConfig, ConfigManager
from gofuzzbuild.core.health import HealthChecker, HealthCheckResult
from gofuzzbuild.core.schema import (
    BuildInvocation,
    BuildResult,
    PackageInfo,
    ResolvedTarget,
)

__all__ = [
    "AppConfig",
    "BuildConfig",
    "BuildInvocation",
    "BuildResult",
    "ConfigManager",
    "HealthCheckResult",
    "HealthChecker",
    "PackageInfo",
    "ResolvedTarget",
]
