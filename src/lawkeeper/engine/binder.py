# src/lawkeeper/engine/binder.py
"""Instance binding: the gated path from a request to a committed instance.

A binding moves DECLARED -> DEPENDENCY_CHECKED -> VERIFIED -> COMMITTED.
Every gate runs before anything is written; the dispatch table is touched
only in the commit step, so a rejected binding leaves no trace and the
same pair can be retried with a corrected implementation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from lawkeeper.contracts.enums import BindingState
from lawkeeper.contracts.errors import AlreadyBoundError, BindingError, NoInstanceError, UnsatisfiedDependencyError
from lawkeeper.contracts.models import BatchResult, BindingOutcome, BindingRequest, Contract
from lawkeeper.contracts.types import TypeId, type_name
from lawkeeper.core.graph import stable_topological_order
from lawkeeper.core.logging import binding_context, get_logger
from lawkeeper.core.registry import ContractRegistry
from lawkeeper.engine.bypass import BypassDecision, BypassPolicy
from lawkeeper.engine.dispatch import DispatchTable, collect_implementation
from lawkeeper.engine.generators import GeneratorRegistry, as_generator
from lawkeeper.engine.laws import LawRunner

logger = get_logger(__name__)


class InstanceBinder:
    """Validates, verifies and commits instances.

    Usage:
        binder = InstanceBinder(registry, table, generators, runner, BypassPolicy(settings.verification))
        outcome = binder.bind(BindingRequest("Semigroup", list, {"concat": operator.add}))
        outcome.laws_checked  # ("associative",)
    """

    def __init__(
        self,
        registry: ContractRegistry,
        dispatch: DispatchTable,
        generators: GeneratorRegistry,
        runner: LawRunner,
        policy: BypassPolicy,
    ) -> None:
        self._registry = registry
        self._dispatch = dispatch
        self._generators = generators
        self._runner = runner
        self._policy = policy

    def bind(self, request: BindingRequest) -> BindingOutcome:
        """Run every gate for request and commit it on success.

        Returns:
            Outcome with state COMMITTED

        Raises:
            UnknownContractError: request names an undeclared contract
            BindingError: any gate rejected the binding; err.outcome holds the
                REJECTED outcome
        """
        with binding_context(request.contract, request.type_id):
            return self._bind(request)

    def _bind(self, request: BindingRequest) -> BindingOutcome:
        contract = self._registry.get(request.contract)
        log = logger.bind(contract=contract.name, type=type_name(request.type_id))
        state = BindingState.DECLARED
        laws_checked: list[str] = []
        trials = 0

        try:
            if self._dispatch.is_registered(contract.name, request.type_id):
                raise AlreadyBoundError(contract.name, request.type_id)

            for dependency in self._registry.transitive_dependencies(contract.name):
                if not self._dispatch.is_registered(dependency, request.type_id):
                    raise UnsatisfiedDependencyError(contract.name, request.type_id, dependency)
            state = BindingState.DEPENDENCY_CHECKED
            log.debug("Dependencies satisfied")

            implementation = collect_implementation(contract, request.type_id, request.implementation)
            decision = self._policy.decide(contract, request)
            if decision is not None:
                log.warning(
                    "Law verification bypassed",
                    bypass=str(decision.source),
                    reason=decision.reason,
                    laws=list(contract.law_names),
                )
            else:
                generator = self._generators.resolve(
                    request.type_id, request.generator_override, contract=contract.name
                )
                operations = self._operation_scope(contract, request.type_id, implementation)
                for law in contract.laws:
                    trials += self._runner.run(
                        contract.name,
                        law,
                        request.type_id,
                        generator=generator,
                        operations=operations,
                    )
                    laws_checked.append(law.name)
            state = BindingState.VERIFIED
            log.debug("Binding verified", laws=laws_checked, trials=trials)
        except BindingError as err:
            err.outcome = self._rejected(request, err, laws_checked, trials)
            log.warning(
                "Binding rejected",
                reached=str(state),
                error=type(err).__name__,
                reason=str(err),
            )
            raise

        self._dispatch.register(
            contract.name,
            request.type_id,
            implementation,
            forced=request.force,
            bypass_reason=decision.reason if decision is not None else None,
            generator_override=request.generator_override,
        )
        self._registry.seal(contract.name)
        outcome = self._committed(request, decision, laws_checked, trials)
        log.info("Instance committed", laws=laws_checked, trials=trials, bypassed=outcome.bypassed)
        return outcome

    def bind_all(self, requests: Iterable[BindingRequest]) -> BatchResult:
        """Bind several requests, dependencies first.

        Requests for the same type are reordered so a contract's
        dependencies bind before it; otherwise input order is kept. A
        rejection does not stop the batch. Requests whose dependency was
        rejected fail with UnsatisfiedDependencyError.

        Raises:
            UnknownContractError: any request names an undeclared contract
            GeneratorError: any request carries a malformed generator_override
                (both raised before anything binds)
        """
        pending = list(requests)
        for request in pending:
            self._registry.get(request.contract)
            if request.generator_override is not None:
                as_generator(request.type_id, request.generator_override)

        closures = {request.contract: set(self._registry.transitive_dependencies(request.contract)) for request in pending}
        prerequisites = [
            (index, other)
            for index, request in enumerate(pending)
            for other, candidate in enumerate(pending)
            if candidate.type_id is request.type_id and candidate.contract in closures[request.contract]
        ]

        outcomes: list[BindingOutcome] = []
        for index in stable_topological_order(list(range(len(pending))), prerequisites):
            try:
                outcomes.append(self.bind(pending[index]))
            except BindingError as err:
                assert err.outcome is not None
                outcomes.append(err.outcome)

        result = BatchResult(tuple(outcomes))
        logger.info("Batch bound", committed=len(result.committed), rejected=len(result.rejected))
        return result

    def verify(self, contract_name: str, type_id: TypeId, *, trial_count: int | None = None) -> int:
        """Re-run the laws of a committed instance and of the contracts it depends on.

        Dependencies are checked deepest first, then the contract itself.

        Returns:
            Total trials executed

        Raises:
            NoInstanceError: no committed instance for the pair
            LawViolationError, LawTimeoutError, NoGeneratorAvailableError:
                verification failed
        """
        contract = self._registry.get(contract_name)
        instance = self._dispatch.lookup(contract.name, type_id)
        if instance is None:
            raise NoInstanceError(contract.name, type_id)

        trials = 0
        for name in (*reversed(self._registry.transitive_dependencies(contract.name)), contract.name):
            current = self._registry.get(name)
            committed = self._dispatch.lookup(name, type_id)
            if committed is None:
                raise NoInstanceError(name, type_id)
            with binding_context(name, type_id):
                generator = self._generators.resolve(type_id, committed.generator_override, contract=name)
                operations = self._operation_scope(current, type_id, committed.implementation)
                for law in current.laws:
                    trials += self._runner.run(
                        name,
                        law,
                        type_id,
                        generator=generator,
                        operations=operations,
                        trial_count=trial_count,
                    )
        return trials

    def _operation_scope(
        self, contract: Contract, type_id: TypeId, own: Mapping[str, Callable[..., Any]]
    ) -> dict[str, Callable[..., Any]]:
        """Operations visible to contract's laws: its own, then its dependencies' committed ones."""
        scope: dict[str, Callable[..., Any]] = {}
        for name, owner in self._registry.operations_in_scope(contract.name).items():
            if owner == contract.name:
                scope[name] = own[name]
            else:
                instance = self._dispatch.lookup(owner, type_id)
                if instance is not None:
                    scope[name] = instance.implementation[name]
        return scope

    @staticmethod
    def _committed(
        request: BindingRequest, decision: BypassDecision | None, laws_checked: list[str], trials: int
    ) -> BindingOutcome:
        return BindingOutcome(
            contract=request.contract,
            type_id=request.type_id,
            state=BindingState.COMMITTED,
            bypass=decision.source if decision is not None else None,
            bypass_reason=decision.reason if decision is not None else None,
            laws_checked=tuple(laws_checked),
            trials=trials,
        )

    @staticmethod
    def _rejected(request: BindingRequest, error: BindingError, laws_checked: list[str], trials: int) -> BindingOutcome:
        return BindingOutcome(
            contract=request.contract,
            type_id=request.type_id,
            state=BindingState.REJECTED,
            laws_checked=tuple(laws_checked),
            trials=trials,
            error=error,
        )
