"""CLI entry point for gofuzzbuild."""

from __future__ import annotations

from pathlib import Path

import click

from gofuzzbuild import __version__
from gofuzzbuild.build.build_log import build_log_context, configure_console
from gofuzzbuild.core.config import BuildConfig, ConfigManager
from gofuzzbuild.core.exceptions import ConfigError, GoFuzzBuildError
from gofuzzbuild.core.health import HealthChecker
from gofuzzbuild.pipeline import FuzzBuildPipeline


def _load_config() -> ConfigManager:
    """Load gofuzzbuild.yaml / .env and route log output to stderr."""
    config = ConfigManager()
    config.load()
    configure_console(config.config.log_level)
    return config


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """gofuzzbuild: build libFuzzer-instrumented c-archives from Go fuzz functions."""
    pass


@main.command()
@click.option("--func", "entry_func", default="Fuzz", show_default=True, help="Fuzzer entry point.")
@click.option("-o", "--output", type=click.Path(path_type=Path, dir_okay=False), help="Output file (default: <package>-fuzz.a).")
@click.option("--race", is_flag=True, help="Enable data race detection.")
@click.option("--tags", default="", help="A comma-separated list of build tags to consider satisfied during the build.")
@click.option("--verbose", "-v", is_flag=True, help="Print the names of packages as they are compiled.")
@click.option("--work", "keep_work", is_flag=True, help="Print the name of the temporary work directory and do not remove it when exiting.")
@click.option("-x", "print_commands", is_flag=True, help="Print the commands.")
@click.option("--log-file", type=click.Path(path_type=Path, dir_okay=False), help="Write the run log to this file (DEBUG level with -v).")
@click.argument("packages", nargs=-1)
def build(
    entry_func: str,
    output: Path | None,
    race: bool,
    tags: str,
    verbose: bool,
    keep_work: bool,
    print_commands: bool,
    log_file: Path | None,
    packages: tuple[str, ...],
) -> None:
    """Build PACKAGE's fuzz function into a libFuzzer c-archive."""
    try:
        config = BuildConfig.create(
            entry_func=entry_func,
            output=output.resolve() if output else None,
            race=race,
            extra_tags=tags,
            verbose=verbose,
            keep_work=keep_work,
            print_commands=print_commands,
        )
        if len(packages) != 1:
            raise ConfigError("must specify exactly one package path")

        config_mgr = _load_config()
        pipeline = FuzzBuildPipeline(
            go_bin=config_mgr.config.go_bin,
            work_dir=config_mgr.work_dir,
        )
        with build_log_context(log_file.resolve() if log_file else None, verbose=verbose) as log:
            log.info("=== gofuzzbuild %s: %s ===", __version__, packages[0])
            result = pipeline.run(config, packages[0])
    except GoFuzzBuildError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1)

    click.echo(f"Built {result.artifact}")
    click.echo(f"Header: {result.header}")


@main.command()
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output.")
def check(verbose: bool) -> None:
    """Verify the go toolchain and cgo are usable for c-archive builds."""
    try:
        config = _load_config()
    except GoFuzzBuildError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1)
    results = HealthChecker(config=config).check_all()
    for r in results:
        status = "OK" if r.ok else "FAIL"
        click.echo(f"  {r.name}: {status}")
        if verbose or not r.ok:
            click.echo(f"    {r.message}")
        if not r.ok and r.suggestion:
            click.echo(f"    → {r.suggestion}")
    if all(r.ok for r in results):
        click.echo("All checks passed.")
    else:
        click.echo("Some checks failed. Fix the issues above or follow the suggested steps.", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
