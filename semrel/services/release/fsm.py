"""Minimal step runner for the release transaction.

Each handler performs one step and either names the next step or finishes.
The runner stops at the first failing handler and reports which step failed.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass
from typing import TypeVar

from semrel.core.result import Err, Ok, Result
from semrel.services.release.errors import ReleaseError

K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True, slots=True)
class StepAdvance[K]:
    step: K


@dataclass(frozen=True, slots=True)
class StepFinish:
    pass


@dataclass(frozen=True, slots=True)
class StepFailed[K]:
    step: K
    error: ReleaseError


type StepOutcome[K] = StepAdvance[K] | StepFinish
type StepHandler[K] = Callable[[], Result[StepOutcome[K], ReleaseError]]


FINISH = StepFinish()


def advance[K](step: K) -> StepAdvance[K]:
    return StepAdvance(step=step)


def run_state_machine[K](
    *,
    initial_step: K,
    handlers: Mapping[K, StepHandler[K]],
    on_enter: Callable[[K], None],
) -> Result[K, StepFailed[K]]:
    """Run handlers from `initial_step` until one finishes or fails.

    Returns:
        Ok(last step) when a handler finishes, Err(StepFailed) otherwise.
    """
    current = initial_step

    while True:
        on_enter(current)
        handler = handlers.get(current)
        if handler is None:
            return Err(
                StepFailed(
                    step=current,
                    error=ReleaseError(kind="invalid_config", message=f"no handler for release step: {current}"),
                )
            )

        outcome = handler()
        if isinstance(outcome, Err):
            return Err(StepFailed(step=current, error=outcome.error))

        if isinstance(outcome.value, StepFinish):
            return Ok(current)

        current = outcome.value.step
