"""Release commands: release, plan and notes."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from semrel.cli.context import CLIContext, build_context
from semrel.core.result import Err
from semrel.output.console import ConsoleProtocol, Style
from semrel.output.errors import (
    print_release_error,
    print_release_failure,
    release_error_exit_code,
)
from semrel.services.release.planner import NothingToRelease, ReleasePlan, print_plan_summary
from semrel.services.release.service import preview_release, run_release
from semrel.services.release.transaction import Released


_REPO_HELP = "Repository root (defaults to the current directory)"
_CONFIG_HELP = "Config file (defaults to semrel.toml, then [tool.semrel] in pyproject.toml)"


def _exit(code: int) -> NoReturn:
    raise typer.Exit(code=code)


def _print_nothing(outcome: NothingToRelease, console: ConsoleProtocol) -> None:
    console.info(f"nothing to release: {outcome.reason}")


def _print_preview(plan: ReleasePlan, ctx: CLIContext) -> None:
    console = ctx.console
    print_plan_summary(plan, console)

    console.header(f"{ctx.config.changelog} entry")
    for line in plan.changelog_entry.rstrip("\n").splitlines():
        console.print(line)

    console.header(ctx.config.notes)
    if plan.notes:
        for line in plan.notes.rstrip("\n").splitlines():
            console.print(line)
    else:
        console.print("(empty: no features, fixes or improvements)", Style.DIM)


def _print_next_steps(released: Released, ctx: CLIContext) -> None:
    console = ctx.console
    tag = released.plan.tag
    console.success(f"released {tag} ({released.commit_sha[:7]})")
    console.header("Next steps")
    console.print("  git push origin HEAD")
    console.print(f"  git push origin {tag}")
    if released.notes_path is not None:
        console.print(f"  gh release create {tag} --title {tag} --notes-file {ctx.config.notes}")
    else:
        console.print(f"  gh release create {tag} --title {tag}")


def release(
    repo: Path | None = typer.Option(None, "--repo", help=_REPO_HELP),
    config: Path | None = typer.Option(None, "--config", help=_CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change, write nothing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Echo git commands"),
) -> None:
    """Bump the version, update the changelog, commit and tag."""
    ctx = build_context(repo_path=repo, config_path=config, verbose=verbose)

    result = run_release(repo=ctx.repo, config=ctx.config, console=ctx.console, dry_run=dry_run)
    if isinstance(result, Err):
        failure = result.error
        print_release_failure(failure, ctx.console)
        _exit(release_error_exit_code(failure.error))

    match result.value:
        case NothingToRelease() as nothing:
            _print_nothing(nothing, ctx.console)
        case ReleasePlan() as preview:
            _print_preview(preview, ctx)
            ctx.console.info("dry run: nothing was written")
        case Released() as released:
            _print_next_steps(released, ctx)


def plan(
    repo: Path | None = typer.Option(None, "--repo", help=_REPO_HELP),
    config: Path | None = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Show the previous release, change counts and the next version."""
    ctx = build_context(repo_path=repo, config_path=config)

    result = preview_release(repo=ctx.repo, config=ctx.config, console=ctx.console)
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        _exit(release_error_exit_code(result.error))

    match result.value:
        case NothingToRelease() as nothing:
            _print_nothing(nothing, ctx.console)
        case ReleasePlan() as planned:
            print_plan_summary(planned, ctx.console)


def notes(
    repo: Path | None = typer.Option(None, "--repo", help=_REPO_HELP),
    config: Path | None = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Print the release notes the next release would publish."""
    # Diagnostics go to stderr so the notes can be piped.
    ctx = build_context(repo_path=repo, config_path=config, stderr=True)

    result = preview_release(repo=ctx.repo, config=ctx.config, console=ctx.console)
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        _exit(release_error_exit_code(result.error))

    match result.value:
        case NothingToRelease() as nothing:
            _print_nothing(nothing, ctx.console)
        case ReleasePlan() as planned:
            if planned.notes:
                typer.echo(planned.notes, nl=False)
            else:
                ctx.console.info("no features, fixes or improvements to announce")

