"""Pipeline: resolve the target, generate the harness, build the archive."""

from __future__ import annotations

import logging
from pathlib import Path

from gofuzzbuild.build.build_orchestrator import BuildOrchestrator, build_flags, header_path
from gofuzzbuild.core.config import BuildConfig
from gofuzzbuild.core.schema import BuildResult
from gofuzzbuild.generation.harness_generator import harness_file, render_harness
from gofuzzbuild.resolve.target_resolver import TargetResolver

log = logging.getLogger(__name__)


class FuzzBuildPipeline:
    """Runs resolve -> generate -> build sequentially for one package.

    Every step raises a :class:`~gofuzzbuild.core.exceptions.GoFuzzBuildError`
    subclass on failure; nothing is retried.
    """

    def __init__(
        self,
        go_bin: str = "go",
        work_dir: Path | None = None,
        resolver: TargetResolver | None = None,
        orchestrator: BuildOrchestrator | None = None,
    ) -> None:
        self._work_dir = Path(work_dir) if work_dir else Path.cwd()
        self._resolver = resolver or TargetResolver(go_bin=go_bin, work_dir=self._work_dir)
        self._orchestrator = orchestrator or BuildOrchestrator(go_bin=go_bin, work_dir=self._work_dir)

    def run(self, config: BuildConfig, pattern: str) -> BuildResult:
        """Build ``pattern`` into a c-archive according to ``config``."""
        flags = build_flags(config)
        target = self._resolver.resolve(pattern, flags)

        source = render_harness(target.import_path, config.entry_func)
        with harness_file(source, self._work_dir) as source_path:
            invocation = self._orchestrator.invocation(config, target, Path(source_path.name))
            artifact = self._orchestrator.run(invocation)

        return BuildResult(
            target=target,
            invocation=invocation,
            artifact=artifact,
            header=header_path(artifact),
        )
