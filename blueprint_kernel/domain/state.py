"""
Application snapshot (``blueprint_kernel.domain.state``).

The whole persisted state -- blueprints, contracts and the one-shot seeding
flag -- as a single immutable value.  Store and engine functions take a
snapshot and return a new one; when nothing changes they return the same
object, which the facade uses to skip the persist call.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from blueprint_kernel.domain.blueprint import Blueprint
from blueprint_kernel.domain.contract import Contract


@dataclass(frozen=True)
class AppSnapshot:
    blueprints: tuple[Blueprint, ...] = ()
    contracts: tuple[Contract, ...] = ()
    initialized: bool = False

    # -- lookups ------------------------------------------------------------

    def find_blueprint(self, blueprint_id: str) -> Blueprint | None:
        for bp in self.blueprints:
            if bp.id == blueprint_id:
                return bp
        return None

    def find_contract(self, contract_id: str) -> Contract | None:
        for c in self.contracts:
            if c.id == contract_id:
                return c
        return None

    # -- blueprints ---------------------------------------------------------

    def adding_blueprints(self, *blueprints: Blueprint) -> AppSnapshot:
        return replace(self, blueprints=self.blueprints + blueprints)

    def replacing_blueprint(self, blueprint: Blueprint) -> AppSnapshot:
        return replace(
            self,
            blueprints=tuple(
                blueprint if bp.id == blueprint.id else bp for bp in self.blueprints
            ),
        )

    def removing_blueprint(self, blueprint_id: str) -> AppSnapshot:
        return replace(
            self,
            blueprints=tuple(bp for bp in self.blueprints if bp.id != blueprint_id),
        )

    # -- contracts ----------------------------------------------------------

    def adding_contract(self, contract: Contract) -> AppSnapshot:
        return replace(self, contracts=self.contracts + (contract,))

    def replacing_contract(self, contract: Contract) -> AppSnapshot:
        return replace(
            self,
            contracts=tuple(
                contract if c.id == contract.id else c for c in self.contracts
            ),
        )

    def removing_contract(self, contract_id: str) -> AppSnapshot:
        return replace(
            self,
            contracts=tuple(c for c in self.contracts if c.id != contract_id),
        )
