"""
Bootstrap -- build the one AppState an application runs on.

Responsibility:
    Turns ``AppSettings`` into a live ``AppState``: logging, engine, tables,
    snapshot store, catalog, and the idempotent first-start seeding.  The
    returned object is handed to the presentation layer, which passes it
    along to whatever needs it.

Architecture position:
    Services -- sits above ``blueprint_config`` and ``blueprint_kernel`` and
    is the only module that imports both.
"""

from __future__ import annotations

from blueprint_config import AppSettings, get_active_settings, load_default_catalog
from blueprint_config.bridges import templates_to_drafts
from blueprint_kernel.db.engine import create_engine_from_url, create_tables
from blueprint_kernel.domain.clock import Clock, SystemClock
from blueprint_kernel.domain.identity import IdFactory
from blueprint_kernel.logging_config import configure_logging, get_logger
from blueprint_kernel.services.app_state import AppState
from blueprint_kernel.services.snapshot_store import SnapshotStore, SqlSnapshotStore

logger = get_logger("services.bootstrap")


def open_app_state(
    settings: AppSettings | None = None,
    *,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
    store: SnapshotStore | None = None,
) -> AppState:
    """
    Open the application state described by ``settings``.

    Args:
        settings: Defaults to ``get_active_settings()``.
        clock: Defaults to ``SystemClock``.
        id_factory: Defaults to uuid4 ids.
        store: Use this store instead of the SQL store built from
            ``settings.database_url``.

    Returns:
        An ``AppState`` whose defaults have been initialized.
    """
    settings = settings or get_active_settings()
    clock = clock or SystemClock()
    configure_logging(level=settings.log_level)

    if store is None:
        engine = create_engine_from_url(settings.database_url, echo=settings.echo_sql)
        create_tables(engine)
        store = SqlSnapshotStore(engine, settings.storage_key, clock=clock)

    catalog = templates_to_drafts(load_default_catalog(settings.catalog_path))
    state = AppState.open(store, clock=clock, id_factory=id_factory, catalog=catalog)
    state.initialize_defaults()

    logger.info(
        "app_state_opened",
        extra={
            "storage_key": store.storage_key,
            "blueprint_count": len(state.blueprints),
            "contract_count": len(state.contracts),
        },
    )
    return state
