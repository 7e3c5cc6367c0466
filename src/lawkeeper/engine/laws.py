# src/lawkeeper/engine/laws.py
"""Law engine: run a law against generated samples.

Each law runs as one Hypothesis search. A trial draws a seed, hands the law
a Sample bound to the type under test, and fails when the law returns a
falsy value or raises. Hypothesis shrinks the failure to a minimal trial
and replays it last, so the Sample captured from the final call is the one
reported. Runs are derandomized unless a random_seed is configured.

A LawViolationError keeps the values drawn by the failing trial, and
LawRunner.replay feeds them back to the law in draw order, so
error.reproduce() re-evaluates the failure without searching again.
"""

from __future__ import annotations

import copy
import functools
from collections.abc import Callable, Mapping, Sequence
from datetime import timedelta
from typing import Any

import hypothesis
from hypothesis import HealthCheck, Phase, Verbosity
from hypothesis import strategies as st
from hypothesis.errors import DeadlineExceeded

from lawkeeper.contracts.errors import (
    LawFalsifiedError,
    LawInequalityError,
    LawTimeoutError,
    LawViolationError,
    ReplayError,
    UnknownOperationError,
)
from lawkeeper.contracts.models import Law
from lawkeeper.contracts.types import TypeId
from lawkeeper.core.config import VerificationSettings
from lawkeeper.core.logging import get_logger
from lawkeeper.engine.generators import Generator, GeneratorRegistry

logger = get_logger(__name__)

# Generated samples may be large or rejected by user filters; neither is a
# reason to abort verification.
_SUPPRESSED_HEALTH_CHECKS = (
    HealthCheck.too_slow,
    HealthCheck.data_too_large,
    HealthCheck.filter_too_much,
)


def equal(left: Any, right: Any) -> bool:
    """Compare two law results, keeping both sides when they differ.

    Returns True so it can end a law body; raises LawInequalityError
    otherwise, and the violation's cause then shows the inequality.
    """
    if left != right:
        raise LawInequalityError(left, right)
    return True


class Sample:
    """What a law body receives for one trial.

    Attributes:
        seed: Size seed for this trial
        type_id: Type under test
        contract: Contract whose law is running
        drawn: Values generated so far, in draw order
    """

    def __init__(
        self,
        *,
        seed: int,
        contract: str,
        type_id: TypeId,
        draw: Callable[[TypeId], Any],
        operations: Mapping[str, Callable[..., Any]],
    ) -> None:
        self.seed = seed
        self.contract = contract
        self.type_id = type_id
        self.drawn: list[Any] = []
        self._draw = draw
        self._operations = operations

    def generate(self, type_id: TypeId | None = None) -> Any:
        """Draw a value of the type under test, or of another declared type."""
        value = self._draw(self.type_id if type_id is None else type_id)
        self.drawn.append(value)
        return value

    def operation(self, name: str) -> Callable[..., Any]:
        """Implementation of an operation of the contract or one of its dependencies."""
        try:
            return self._operations[name]
        except KeyError:
            raise UnknownOperationError(self.contract, name) from None

    def invoke(self, name: str, *args: Any, **kwargs: Any) -> Any:
        return self.operation(name)(*args, **kwargs)

    def __repr__(self) -> str:
        return f"Sample(contract={self.contract!r}, seed={self.seed}, drawn={self.drawn!r})"


def _contains_deadline(exc: BaseException) -> bool:
    """Whether exc is, or groups, a Hypothesis DeadlineExceeded."""
    if isinstance(exc, DeadlineExceeded):
        return True
    nested = getattr(exc, "exceptions", ())
    return any(_contains_deadline(inner) for inner in nested)


class LawRunner:
    """Execute laws under the configured trial budget.

    Usage:
        runner = LawRunner(settings.verification, generators)
        trials = runner.run("Semigroup", law, list, generator=gen, operations={"concat": operator.add})
    """

    def __init__(self, settings: VerificationSettings, generators: GeneratorRegistry) -> None:
        self._settings = settings
        self._generators = generators

    @property
    def settings(self) -> VerificationSettings:
        return self._settings

    def run(
        self,
        contract: str,
        law: Law,
        type_id: TypeId,
        *,
        generator: Generator,
        operations: Mapping[str, Callable[..., Any]],
        trial_count: int | None = None,
    ) -> int:
        """Run one law against generated samples of type_id.

        Args:
            contract: Contract declaring the law
            law: Law to evaluate
            type_id: Type under test
            generator: Resolved generator for type_id
            operations: Operation name -> implementation visible to the law
            trial_count: Overrides the configured trial count

        Returns:
            Number of trials executed

        Raises:
            LawViolationError: the law was falsy or raised for some sample
            LawTimeoutError: a trial exceeded deadline_ms
        """
        config = self._settings
        trials = 0
        last: list[Sample] = []

        def trial(data: st.DataObject) -> None:
            nonlocal trials
            trials += 1
            seed = data.draw(st.integers(min_value=0, max_value=config.max_seed), label="seed")
            sample = Sample(
                seed=seed,
                contract=contract,
                type_id=type_id,
                draw=self._drawing(data, seed, type_id, generator),
                operations=operations,
            )
            last[:] = [sample]
            result = law.predicate(sample)
            if not result:
                raise LawFalsifiedError(law.name, result)

        search = hypothesis.given(st.data())(trial)
        search = hypothesis.settings(
            max_examples=trial_count or config.trial_count,
            deadline=timedelta(milliseconds=config.deadline_ms) if config.deadline_ms is not None else None,
            derandomize=config.random_seed is None,
            database=None,
            phases=(Phase.generate, Phase.shrink),
            verbosity=Verbosity.quiet,
            report_multiple_bugs=False,
            print_blob=False,
            suppress_health_check=_SUPPRESSED_HEALTH_CHECKS,
        )(search)
        if config.random_seed is not None:
            search = hypothesis.seed(config.random_seed)(search)

        try:
            search()
        except Exception as exc:
            if config.deadline_ms is not None and _contains_deadline(exc):
                logger.info("Law timed out", contract=contract, law=law.name, deadline_ms=config.deadline_ms)
                raise LawTimeoutError(contract, type_id, law.name, deadline_ms=config.deadline_ms) from exc

            failing = last[0] if last else None
            seed = failing.seed if failing is not None else None
            logger.info(
                "Law failed",
                contract=contract,
                law=law.name,
                seed=seed,
                cause=f"{type(exc).__name__}: {exc}",
            )
            raise self._violation(
                contract,
                law,
                type_id,
                seed=seed,
                samples=failing.drawn if failing is not None else (),
                operations=operations,
                cause=exc,
            ) from exc

        return trials

    def replay(
        self,
        contract: str,
        law: Law,
        type_id: TypeId,
        *,
        seed: int | None,
        samples: Sequence[Any],
        operations: Mapping[str, Callable[..., Any]],
    ) -> None:
        """Evaluate law once, returning the recorded samples from generate() in order.

        Samples are deep-copied first so a law that mutates its inputs can
        be replayed again.

        Raises:
            LawViolationError: the law is falsy or raises for these samples
            ReplayError: the law drew more values than were recorded
        """
        recorded = iter(copy.deepcopy(tuple(samples)))

        def draw(target: TypeId) -> Any:
            try:
                return next(recorded)
            except StopIteration:
                raise ReplayError(
                    f"Law '{contract}.{law.name}' drew more than the {len(samples)} recorded samples"
                ) from None

        sample = Sample(seed=seed or 0, contract=contract, type_id=type_id, draw=draw, operations=operations)
        try:
            result = law.predicate(sample)
            if not result:
                raise LawFalsifiedError(law.name, result)
        except ReplayError:
            raise
        except Exception as exc:
            logger.debug("Replayed law failed", contract=contract, law=law.name, seed=seed)
            raise self._violation(
                contract, law, type_id, seed=seed, samples=samples, operations=operations, cause=exc
            ) from exc

    def _drawing(
        self, data: st.DataObject, seed: int, type_id: TypeId, generator: Generator
    ) -> Callable[[TypeId], Any]:
        """Draw function for a searched trial: the bound generator for type_id, declared ones otherwise."""

        def draw(target: TypeId) -> Any:
            source = generator if target is type_id else self._generators.resolve(target)
            return data.draw(source.strategy(seed))

        return draw

    def _violation(
        self,
        contract: str,
        law: Law,
        type_id: TypeId,
        *,
        seed: int | None,
        samples: Sequence[Any],
        operations: Mapping[str, Callable[..., Any]],
        cause: BaseException,
    ) -> LawViolationError:
        replay = None
        if seed is not None:
            replay = functools.partial(
                self.replay, contract, law, type_id, seed=seed, samples=tuple(samples), operations=operations
            )
        return LawViolationError(
            contract, type_id, law.name, seed=seed, cause=cause, samples=samples, replay=replay
        )
