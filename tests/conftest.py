"""
Pytest fixtures for the blueprint kernel test suite.

Provides:
- Deterministic clock and id factory
- In-memory and SQLite-backed snapshot stores
- AppState instances wired to them
- Structured log capture
"""

import json
import logging
from io import StringIO

import pytest

from blueprint_config import load_default_catalog
from blueprint_config.bridges import templates_to_drafts
from blueprint_kernel.db.engine import create_engine_from_url, create_tables
from blueprint_kernel.domain.blueprint import BlueprintField, Position
from blueprint_kernel.domain.clock import DeterministicClock
from blueprint_kernel.domain.field_types import FieldType
from blueprint_kernel.domain.identity import SequentialIdFactory
from blueprint_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from blueprint_kernel.services.app_state import AppState
from blueprint_kernel.services.snapshot_store import (
    InMemorySnapshotStore,
    SqlSnapshotStore,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture blueprint_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, app_state):
            app_state.advance_contract_status(cid)
            logs = captured_logs()
            assert any(r["message"] == "contract_advanced" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("blueprint_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock / ids
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


@pytest.fixture
def id_factory():
    return SequentialIdFactory("id")


# =============================================================================
# Catalog and sample data
# =============================================================================


@pytest.fixture(scope="session")
def default_catalog():
    """The shipped six-template catalog as kernel drafts."""
    return templates_to_drafts(load_default_catalog())


@pytest.fixture
def nda_fields():
    return (
        BlueprintField("f1", FieldType.CHECKBOX, "Agree", Position(30, 20), required=True),
    )


@pytest.fixture
def mixed_fields():
    """One field of every kind."""
    return (
        BlueprintField("name", FieldType.TEXT, "Name", Position(30, 20), required=True),
        BlueprintField("start", FieldType.DATE, "Start", Position(280, 20)),
        BlueprintField("agree", FieldType.CHECKBOX, "Agree", Position(30, 120), required=True),
        BlueprintField("sign", FieldType.SIGNATURE, "Signature", Position(30, 220), required=True),
    )


# =============================================================================
# Stores and facade
# =============================================================================


@pytest.fixture
def memory_store():
    return InMemorySnapshotStore()


@pytest.fixture
def sqlite_engine(tmp_path):
    """SQLite file database with all tables created."""
    engine = create_engine_from_url(f"sqlite:///{tmp_path / 'blueprints.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sqlite_engine, deterministic_clock):
    return SqlSnapshotStore(sqlite_engine, "test-storage", clock=deterministic_clock)


@pytest.fixture
def app_state(memory_store, deterministic_clock, id_factory, default_catalog):
    """AppState over an empty in-memory store (not yet initialized)."""
    return AppState.open(
        memory_store,
        clock=deterministic_clock,
        id_factory=id_factory,
        catalog=default_catalog,
    )


@pytest.fixture
def nda_blueprint(app_state, nda_fields):
    return app_state.add_blueprint("NDA", "Mutual NDA", nda_fields)


@pytest.fixture
def contract_in_status(app_state, nda_blueprint):
    """Factory: create a contract and advance it to the requested status."""
    from blueprint_kernel.domain.contract import ContractStatus
    from blueprint_kernel.domain.lifecycle import STATUS_FLOW

    def _create(status: ContractStatus, name: str = "Contract"):
        contract = app_state.create_contract(name, nda_blueprint.id)
        if status is ContractStatus.REVOKED:
            assert app_state.revoke_contract(contract.id).success
        else:
            for _ in range(STATUS_FLOW.index(status)):
                assert app_state.advance_contract_status(contract.id).success
        return app_state.get_contract_by_id(contract.id)

    return _create
