"""Side-effect orchestrator.

A status change can trigger several follow-up effects: a customer
notification, a partial refund, a scoreboard increment, closing a table
session. They are independent of each other and of the order write that
already committed, so each runs on its own worker thread. Failures and
timeouts are logged and reported as outcomes; they never propagate.

An effect may have a follow-up step that runs after it and receives its
result (the shortfall notification needs the refunded amount). Every step
has its own timeout. When a step fails or times out its follow-up still
runs, with ``None``.

Effects only talk to ports. They must not touch the domain context, which
is not available on worker threads.
"""

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, replace
from enum import Enum
from functools import partial
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class EffectStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"


class EffectSkipped(Exception):
    """Raised by an effect that has nothing to do, e.g. no push address."""


class EffectFailed(Exception):
    """Raised by an effect whose collaborator reported a failure."""


@dataclass(frozen=True)
class SideEffect:
    name: str
    action: Callable[[Any], Any]
    follow_up: "SideEffect | None" = None

    def chain(self) -> list["SideEffect"]:
        steps, step = [], self
        while step is not None:
            steps.append(step)
            step = step.follow_up
        return steps


@dataclass(frozen=True)
class EffectOutcome:
    effect: str
    status: EffectStatus
    detail: str = ""
    result: Any = None
    late: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status == EffectStatus.SUCCEEDED


def _run_step(step: SideEffect, previous: Any, context: dict) -> EffectOutcome:
    try:
        result = step.action(previous)
    except EffectSkipped as exc:
        logger.info("Side effect skipped", effect=step.name, reason=str(exc), **context)
        return EffectOutcome(step.name, EffectStatus.SKIPPED, str(exc))
    except Exception as exc:
        logger.warning("Side effect failed", effect=step.name, error=str(exc), **context)
        return EffectOutcome(step.name, EffectStatus.FAILED, str(exc))
    detail = result if isinstance(result, str) else ""
    return EffectOutcome(step.name, EffectStatus.SUCCEEDED, detail, result)


class SideEffectOrchestrator:
    """Runs side effects concurrently, each step bounded by `timeout_seconds`.

    A step that times out is reported as TIMED_OUT and its follow-up runs
    with ``None``. The worker cannot be interrupted, so when the step does
    finish its real outcome is logged and handed to `on_late_outcome`.
    """

    def __init__(
        self,
        timeout_seconds: float = 5.0,
        on_late_outcome: Callable[[EffectOutcome], None] | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.on_late_outcome = on_late_outcome

    def run(self, effects: list[SideEffect], **context) -> list[EffectOutcome]:
        """Run all effects and return one outcome per step, in effect order."""
        if not effects:
            return []

        # One thread per chain and per step, so a hung step never queues another.
        step_count = sum(len(effect.chain()) for effect in effects)
        executor = ThreadPoolExecutor(
            max_workers=len(effects) + step_count,
            thread_name_prefix="orderdesk-effect",
        )
        outcomes: list[EffectOutcome] = []
        try:
            chains = [executor.submit(self._run_chain, executor, effect, context) for effect in effects]
            for chain in chains:
                outcomes.extend(chain.result())
        finally:
            executor.shutdown(wait=False)
        return outcomes

    def _run_chain(self, executor: ThreadPoolExecutor, effect: SideEffect, context: dict) -> list[EffectOutcome]:
        outcomes = []
        previous = None
        for step in effect.chain():
            future = executor.submit(_run_step, step, previous, context)
            try:
                outcome = future.result(timeout=self.timeout_seconds)
            except FutureTimeoutError:
                logger.warning(
                    "Side effect timed out",
                    effect=step.name,
                    timeout_seconds=self.timeout_seconds,
                    **context,
                )
                outcome = EffectOutcome(step.name, EffectStatus.TIMED_OUT, f"No result within {self.timeout_seconds}s")
                future.add_done_callback(partial(self._report_late, context=context))
            outcomes.append(outcome)
            previous = outcome.result if outcome.succeeded else None
        return outcomes

    def _report_late(self, future: Future, context: dict) -> None:
        outcome = replace(future.result(), late=True)
        logger.warning(
            "Side effect finished after its timeout",
            effect=outcome.effect,
            status=outcome.status.value,
            detail=outcome.detail,
            **context,
        )
        if self.on_late_outcome is None:
            return
        try:
            self.on_late_outcome(outcome)
        except Exception as exc:
            logger.error("Recording late side effect outcome failed", effect=outcome.effect, error=str(exc), **context)
