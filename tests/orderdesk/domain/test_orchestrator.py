"""Tests for the side-effect orchestrator — isolation, timeouts and follow-up chaining."""

import threading
import time

from orderdesk.order.orchestrator import (
    EffectFailed,
    EffectSkipped,
    EffectStatus,
    SideEffect,
    SideEffectOrchestrator,
)


def _returning(value):
    return lambda _previous: value


def _raising(exc):
    def action(_previous):
        raise exc

    return action


def _sleeping(seconds, value="done"):
    def action(_previous):
        time.sleep(seconds)
        return value

    return action


class TestOutcomes:
    def test_no_effects_no_outcomes(self):
        assert SideEffectOrchestrator().run([]) == []

    def test_successful_effect(self):
        outcomes = SideEffectOrchestrator().run([SideEffect("ping", _returning("pong"))])
        assert len(outcomes) == 1
        assert outcomes[0].effect == "ping"
        assert outcomes[0].succeeded
        assert outcomes[0].detail == "pong"

    def test_non_string_result_is_kept_without_detail(self):
        outcome = SideEffectOrchestrator().run([SideEffect("count", _returning(3))])[0]
        assert outcome.result == 3
        assert outcome.detail == ""

    def test_skipped_effect(self):
        outcome = SideEffectOrchestrator().run([SideEffect("push", _raising(EffectSkipped("no address")))])[0]
        assert outcome.status == EffectStatus.SKIPPED
        assert outcome.detail == "no address"

    def test_failed_effect(self):
        outcome = SideEffectOrchestrator().run([SideEffect("refund", _raising(EffectFailed("declined")))])[0]
        assert outcome.status == EffectStatus.FAILED
        assert outcome.detail == "declined"

    def test_unexpected_exception_is_a_failure(self):
        outcome = SideEffectOrchestrator().run([SideEffect("boom", _raising(ConnectionError("reset")))])[0]
        assert outcome.status == EffectStatus.FAILED


class TestIsolation:
    def test_failure_does_not_affect_other_effects(self):
        outcomes = SideEffectOrchestrator().run(
            [
                SideEffect("first", _raising(RuntimeError("broken"))),
                SideEffect("second", _returning("ok")),
            ]
        )
        assert [(o.effect, o.status) for o in outcomes] == [
            ("first", EffectStatus.FAILED),
            ("second", EffectStatus.SUCCEEDED),
        ]

    def test_outcomes_follow_effect_order(self):
        outcomes = SideEffectOrchestrator().run(
            [
                SideEffect("slow", _sleeping(0.2)),
                SideEffect("fast", _returning("quick")),
            ]
        )
        assert [o.effect for o in outcomes] == ["slow", "fast"]

    def test_effects_run_concurrently(self):
        started = time.monotonic()
        SideEffectOrchestrator(timeout_seconds=2).run([SideEffect(f"e{i}", _sleeping(0.3)) for i in range(4)])
        assert time.monotonic() - started < 1.0


class TestTimeouts:
    def test_slow_effect_times_out(self):
        outcomes = SideEffectOrchestrator(timeout_seconds=0.1).run([SideEffect("slow", _sleeping(1.0))])
        assert outcomes[0].status == EffectStatus.TIMED_OUT
        assert "0.1" in outcomes[0].detail

    def test_timeout_does_not_hold_up_the_caller(self):
        started = time.monotonic()
        SideEffectOrchestrator(timeout_seconds=0.1).run([SideEffect("slow", _sleeping(1.5))])
        assert time.monotonic() - started < 1.0

    def test_fast_effect_survives_a_slow_sibling(self):
        outcomes = SideEffectOrchestrator(timeout_seconds=0.2).run(
            [
                SideEffect("slow", _sleeping(1.0)),
                SideEffect("fast", _returning("ok")),
            ]
        )
        statuses = {o.effect: o.status for o in outcomes}
        assert statuses == {"slow": EffectStatus.TIMED_OUT, "fast": EffectStatus.SUCCEEDED}

    def test_follow_up_runs_after_a_timed_out_step(self):
        received = []

        def notify(previous):
            received.append(previous)
            return "sent"

        effect = SideEffect("refund", _sleeping(1.0), follow_up=SideEffect("notify", notify))
        outcomes = SideEffectOrchestrator(timeout_seconds=0.1).run([effect])

        assert [(o.effect, o.status) for o in outcomes] == [
            ("refund", EffectStatus.TIMED_OUT),
            ("notify", EffectStatus.SUCCEEDED),
        ]
        assert received == [None]

    def test_follow_up_has_its_own_timeout(self):
        effect = SideEffect("refund", _returning("ok"), follow_up=SideEffect("notify", _sleeping(1.0)))
        outcomes = SideEffectOrchestrator(timeout_seconds=0.1).run([effect])
        assert [o.status for o in outcomes] == [EffectStatus.SUCCEEDED, EffectStatus.TIMED_OUT]


class TestLateOutcomes:
    def _collector(self):
        finished = threading.Event()
        late = []

        def collect(outcome):
            late.append(outcome)
            finished.set()

        return finished, late, collect

    def test_late_success_is_reported(self):
        finished, late, collect = self._collector()
        orchestrator = SideEffectOrchestrator(timeout_seconds=0.1, on_late_outcome=collect)

        outcomes = orchestrator.run([SideEffect("refund", _sleeping(0.3, value="refunded"))])

        assert outcomes[0].status == EffectStatus.TIMED_OUT
        assert finished.wait(timeout=2)
        assert late[0].effect == "refund"
        assert late[0].status == EffectStatus.SUCCEEDED
        assert late[0].result == "refunded"
        assert late[0].late

    def test_late_failure_is_reported(self):
        finished, late, collect = self._collector()

        def declined(_previous):
            time.sleep(0.3)
            raise EffectFailed("declined")

        SideEffectOrchestrator(timeout_seconds=0.1, on_late_outcome=collect).run([SideEffect("refund", declined)])

        assert finished.wait(timeout=2)
        assert late[0].status == EffectStatus.FAILED
        assert late[0].detail == "declined"

    def test_steps_within_timeout_are_not_reported_late(self):
        late = []
        orchestrator = SideEffectOrchestrator(timeout_seconds=1, on_late_outcome=late.append)
        orchestrator.run([SideEffect("ping", _returning("pong"))])
        assert late == []


class TestFollowUps:
    def test_follow_up_receives_previous_result(self):
        received = []

        def notify(previous):
            received.append(previous)
            return "sent"

        effect = SideEffect("refund", _returning({"amount": 21.0}), follow_up=SideEffect("notify", notify))
        outcomes = SideEffectOrchestrator().run([effect])

        assert received == [{"amount": 21.0}]
        assert [o.effect for o in outcomes] == ["refund", "notify"]

    def test_follow_up_runs_with_none_after_failure(self):
        received = []

        def notify(previous):
            received.append(previous)
            return "sent"

        effect = SideEffect("refund", _raising(EffectFailed("declined")), follow_up=SideEffect("notify", notify))
        outcomes = SideEffectOrchestrator().run([effect])

        assert received == [None]
        assert [o.status for o in outcomes] == [EffectStatus.FAILED, EffectStatus.SUCCEEDED]

    def test_chain_lists_steps_in_order(self):
        last = SideEffect("c", _returning(3))
        effect = SideEffect("a", _returning(1), follow_up=SideEffect("b", _returning(2), follow_up=last))
        assert [step.name for step in effect.chain()] == ["a", "b", "c"]
