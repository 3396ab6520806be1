"""Entry points used by the CLI."""

from __future__ import annotations

from datetime import date

from semrel.core.config import Config
from semrel.core.result import Err, Ok, Result
from semrel.output.console import ConsoleProtocol
from semrel.services.release.errors import ReleaseError
from semrel.services.release.planner import NothingToRelease, PlanOutcome, ReleasePlan, plan_release
from semrel.services.release.transaction import (
    ReleaseFailure,
    ReleaseTransaction,
    Released,
    TxState,
)
from semrel.services.release.vcs import ReleaseVcs


type ReleaseOutcome = Released | NothingToRelease | ReleasePlan


def preview_release(
    *,
    repo: ReleaseVcs,
    config: Config,
    console: ConsoleProtocol,
    today: date | None = None,
) -> Result[PlanOutcome, ReleaseError]:
    """Compute what the next release would be, without writing anything."""
    return plan_release(repo=repo, config=config, console=console, today=today or date.today())


def run_release(
    *,
    repo: ReleaseVcs,
    config: Config,
    console: ConsoleProtocol,
    today: date | None = None,
    dry_run: bool = False,
) -> Result[ReleaseOutcome, ReleaseFailure]:
    """Run a release.

    Returns:
        Ok(Released) after a release, Ok(NothingToRelease) when there is
        nothing to do, Ok(ReleasePlan) for a dry run. Err(ReleaseFailure)
        otherwise, after rollback.
    """
    day = today or date.today()

    if dry_run:
        planned = preview_release(repo=repo, config=config, console=console, today=day)
        if isinstance(planned, Err):
            return Err(ReleaseFailure(error=planned.error, failed_in=TxState.COMPUTING))
        return Ok(planned.value)

    tx = ReleaseTransaction(repo=repo, config=config, console=console, today=day)
    return tx.execute()
