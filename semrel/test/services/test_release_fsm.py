from __future__ import annotations

from semrel.core.result import Err, Ok, Result
from semrel.services.release.errors import ReleaseError
from semrel.services.release.fsm import FINISH, StepOutcome, advance, run_state_machine


def test_run_state_machine_advances_and_reports_entered_steps() -> None:
    entered: list[str] = []

    def step_a() -> Result[StepOutcome[str], ReleaseError]:
        return Ok(advance("b"))

    def step_b() -> Result[StepOutcome[str], ReleaseError]:
        return Ok(FINISH)

    result = run_state_machine(
        initial_step="a",
        handlers={"a": step_a, "b": step_b},
        on_enter=entered.append,
    )

    assert result == Ok("b")
    assert entered == ["a", "b"]


def test_run_state_machine_unknown_step_fails() -> None:
    result = run_state_machine(initial_step="missing", handlers={}, on_enter=lambda _: None)

    assert isinstance(result, Err)
    assert result.error.step == "missing"
    assert "missing" in result.error.error.message


def test_run_state_machine_stops_at_failing_step() -> None:
    ran: list[str] = []

    def bad_step() -> Result[StepOutcome[str], ReleaseError]:
        ran.append("a")
        return Err(ReleaseError(kind="io_failed", message="boom"))

    def never() -> Result[StepOutcome[str], ReleaseError]:
        ran.append("b")
        return Ok(FINISH)

    result = run_state_machine(
        initial_step="a",
        handlers={"a": bad_step, "b": never},
        on_enter=lambda _: None,
    )

    assert isinstance(result, Err)
    assert result.error.step == "a"
    assert result.error.error.kind == "io_failed"
    assert ran == ["a"]
