"""
AppState -- the application state facade.

Responsibility:
    The single coordination point for blueprint and contract operations.
    Holds the current ``AppSnapshot`` as the source of truth, delegates every
    rule to the pure domain (``blueprint_store``, ``lifecycle``) and, when a
    mutation changed the snapshot, writes the full snapshot to the
    ``SnapshotStore`` exactly once before returning.

Architecture position:
    Kernel > Services -- imperative shell.  The only component that calls
    persistence.  Constructed once at startup (see
    ``blueprint_services.bootstrap``) and passed to every consumer; there is
    no module-level instance.

Invariants enforced:
    - Full-snapshot, write-after-every-mutation persistence.
    - Failed and no-op mutations never persist and never change the
      in-memory snapshot.
    - If the store write fails, the in-memory snapshot stays at the last
      persisted state.
    - Reads never touch the store.

Failure modes:
    - BlueprintNotFoundError / ContractNotFoundError: unknown id.
    - BlueprintValidationError / ContractValidationError: bad input.
    - SnapshotPersistError: the store rejected the write.
    - Invalid transitions are NOT failures of this kind: ``advance`` and
      ``revoke`` return ``TransitionResult(success=False)``.

Concurrency:
    Single writer.  Each mutation is read-modify-write of the whole
    snapshot, so two AppState instances writing the same storage key would
    overwrite each other (last write wins on the whole blob).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from blueprint_kernel.domain import blueprint_store, lifecycle
from blueprint_kernel.domain.blueprint import Blueprint, BlueprintDraft, BlueprintField
from blueprint_kernel.domain.clock import Clock, SystemClock
from blueprint_kernel.domain.contract import Contract, ContractFieldValue, ContractStatus
from blueprint_kernel.domain.identity import IdFactory, UuidIdFactory
from blueprint_kernel.domain.lifecycle import TransitionResult
from blueprint_kernel.domain.state import AppSnapshot
from blueprint_kernel.exceptions import SnapshotPersistError
from blueprint_kernel.logging_config import LogContext, get_logger
from blueprint_kernel.selectors.contract_selector import (
    ContractGroup,
    ContractSelector,
    ContractSummary,
    missing_required_fields,
)
from blueprint_kernel.services.snapshot_store import SnapshotStore

logger = get_logger("services.app_state")


class AppState:
    """
    Blueprint and contract operations over a persisted snapshot.

    Contract:
        Every mutating method either raises without side effects, returns
        without changing anything, or has durably saved the new snapshot by
        the time it returns.
    """

    def __init__(
        self,
        store: SnapshotStore,
        *,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
        catalog: Iterable[BlueprintDraft] = (),
        state: AppSnapshot | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._ids = id_factory or UuidIdFactory()
        self._catalog = tuple(catalog)
        self._state = state if state is not None else AppSnapshot()

    @classmethod
    def open(
        cls,
        store: SnapshotStore,
        *,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
        catalog: Iterable[BlueprintDraft] = (),
    ) -> AppState:
        """Load the stored snapshot once and wrap it."""
        return cls(
            store,
            clock=clock,
            id_factory=id_factory,
            catalog=catalog,
            state=store.load(),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> AppSnapshot:
        return self._state

    def _commit(self, new_state: AppSnapshot, operation: str) -> bool:
        """Persist ``new_state`` and adopt it.  Returns False when unchanged."""
        if new_state is self._state:
            return False
        try:
            self._store.save(new_state)
        except Exception as exc:
            logger.error(
                "snapshot_persist_failed",
                extra={"operation": operation, "storage_key": self._store.storage_key},
                exc_info=True,
            )
            raise SnapshotPersistError(self._store.storage_key, operation) from exc
        self._state = new_state
        return True

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def initialize_defaults(self) -> bool:
        """
        Seed the default blueprint catalog on the first ever start.

        Returns True when the snapshot changed.  Safe to call on every start.
        """
        before = len(self._state.blueprints)
        new_state = blueprint_store.initialize_defaults(
            self._state,
            self._catalog,
            new_id=self._ids.new_id,
            now=self._clock.now(),
        )
        changed = self._commit(new_state, "initialize_defaults")
        if changed:
            logger.info(
                "defaults_initialized",
                extra={"seeded": len(new_state.blueprints) - before},
            )
        return changed

    # ------------------------------------------------------------------
    # Blueprints
    # ------------------------------------------------------------------

    def add_blueprint(
        self,
        name: str,
        description: str,
        fields: Iterable[BlueprintField],
    ) -> Blueprint:
        new_state, blueprint = blueprint_store.create_blueprint(
            self._state,
            name,
            description,
            fields,
            blueprint_id=self._ids.new_id(),
            now=self._clock.now(),
        )
        self._commit(new_state, "add_blueprint")
        logger.info(
            "blueprint_created",
            extra={"blueprint_id": blueprint.id, "field_count": len(blueprint.fields)},
        )
        return blueprint

    def update_blueprint(self, blueprint_id: str, **changes: Any) -> Blueprint:
        with LogContext.bind(blueprint_id=blueprint_id):
            new_state, blueprint = blueprint_store.update_blueprint(
                self._state, blueprint_id, changes, now=self._clock.now()
            )
            self._commit(new_state, "update_blueprint")
            logger.info("blueprint_updated", extra={"changed": sorted(changes)})
        return blueprint

    def delete_blueprint(self, blueprint_id: str) -> None:
        with LogContext.bind(blueprint_id=blueprint_id):
            new_state = blueprint_store.delete_blueprint(self._state, blueprint_id)
            self._commit(new_state, "delete_blueprint")
            logger.info("blueprint_deleted")

    @property
    def blueprints(self) -> tuple[Blueprint, ...]:
        return blueprint_store.list_blueprints(self._state)

    def get_blueprint_by_id(self, blueprint_id: str) -> Blueprint | None:
        return blueprint_store.get_blueprint(self._state, blueprint_id)

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def create_contract(self, name: str, blueprint_id: str) -> Contract:
        """
        Create a contract from a blueprint.

        Raises:
            BlueprintNotFoundError: no contract is created.
        """
        with LogContext.bind(blueprint_id=blueprint_id):
            new_state, contract = lifecycle.create_contract(
                self._state,
                name,
                blueprint_id,
                contract_id=self._ids.new_id(),
                now=self._clock.now(),
            )
            self._commit(new_state, "create_contract")
            logger.info(
                "contract_created",
                extra={
                    "contract_id": contract.id,
                    "field_count": len(contract.field_values),
                },
            )
        return contract

    def update_contract_fields(
        self,
        contract_id: str,
        field_values: Iterable[ContractFieldValue] | Mapping[str, object],
    ) -> Contract:
        """
        Replace every field value of a contract.

        On a locked or revoked contract the edit is dropped and the unchanged
        contract is returned.
        """
        with LogContext.bind(contract_id=contract_id):
            new_state, contract = lifecycle.update_field_values(
                self._state, contract_id, field_values, now=self._clock.now()
            )
            if self._commit(new_state, "update_contract_fields"):
                logger.info("contract_fields_updated")
            else:
                logger.info(
                    "field_update_dropped",
                    extra={"status": contract.status.value},
                )
        return contract

    def advance_contract_status(self, contract_id: str) -> TransitionResult:
        with LogContext.bind(contract_id=contract_id):
            new_state, result = lifecycle.advance(
                self._state, contract_id, now=self._clock.now()
            )
            self._commit(new_state, "advance_contract_status")
            self._log_transition("contract_advanced", result)
        return result

    def revoke_contract(self, contract_id: str) -> TransitionResult:
        with LogContext.bind(contract_id=contract_id):
            new_state, result = lifecycle.revoke(
                self._state, contract_id, now=self._clock.now()
            )
            self._commit(new_state, "revoke_contract")
            self._log_transition("contract_revoked", result)
        return result

    def delete_contract(self, contract_id: str) -> None:
        with LogContext.bind(contract_id=contract_id):
            new_state = lifecycle.delete_contract(self._state, contract_id)
            self._commit(new_state, "delete_contract")
            logger.info("contract_deleted")

    @staticmethod
    def _log_transition(message: str, result: TransitionResult) -> None:
        if result.success:
            logger.info(
                message,
                extra={
                    "from_status": result.from_status.value,
                    "to_status": result.to_status.value,
                    "action": result.action,
                },
            )
        else:
            logger.info(
                "transition_rejected",
                extra={"from_status": result.from_status.value, "reason": result.reason},
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def contracts(self) -> tuple[Contract, ...]:
        return self._state.contracts

    def get_contract_by_id(self, contract_id: str) -> Contract | None:
        return self._state.find_contract(contract_id)

    def get_contracts_by_status(
        self, status_filter: ContractStatus | ContractGroup | str = ContractGroup.ALL
    ) -> tuple[Contract, ...]:
        return ContractSelector(self._state).by_status(status_filter)

    def summary(self) -> ContractSummary:
        return ContractSelector(self._state).summary()

    def recent_contracts(self, limit: int = 5) -> tuple[Contract, ...]:
        return ContractSelector(self._state).recent(limit)

    def missing_required_fields(self, contract_id: str) -> tuple[str, ...]:
        """
        Required fields still empty on a contract.

        Empty when the contract or its blueprint no longer exists.
        """
        contract = self._state.find_contract(contract_id)
        if contract is None:
            return ()
        blueprint = self._state.find_blueprint(contract.blueprint_id)
        if blueprint is None:
            return ()
        return missing_required_fields(contract, blueprint)
