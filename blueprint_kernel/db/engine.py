"""
Module: blueprint_kernel.db.engine
Responsibility: SQLAlchemy engine creation, session factory construction and
    transactional scope utilities.  Single point of database connection
    configuration for the kernel.
Architecture position: Kernel > DB.  May import from db/base.py.  MUST NOT
    import from services/, selectors/, domain/, or outer layers (except for
    create_tables/drop_tables which import models so their tables register).

Invariants enforced:
    - No module-level engine: callers own the Engine they create and pass it
      to the snapshot store.  Two AppState instances never share hidden state.
    - In-memory SQLite uses a StaticPool so every session sees the same
      database.
    - session_scope() commits on success and rolls back on any exception.

Failure modes:
    - sqlalchemy.exc.ArgumentError on a malformed database URL.
    - OperationalError when the database file or server is unreachable.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from blueprint_kernel.logging_config import get_logger

logger = get_logger("db.engine")


def create_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_pre_ping: bool = True,
) -> Engine:
    """
    Create a SQLAlchemy engine for the snapshot store.

    Args:
        database_url: SQLAlchemy URL (e.g. ``sqlite:///blueprints.db``,
            ``sqlite://`` for an in-memory database, or a PostgreSQL URL).
        echo: If True, log all SQL statements.
        pool_pre_ping: If True, test connections before use.

    Returns:
        SQLAlchemy Engine instance.
    """
    url = make_url(database_url)
    kwargs: dict = {"echo": echo, "pool_pre_ping": pool_pre_ping}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)

    logger.info(
        "engine_initialized",
        extra={"dialect": url.get_backend_name(), "echo": echo},
    )
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, session is committed and closed.
        On exception, session is rolled back and closed.  The exception
        is re-raised to the caller.

    Usage:
        with session_scope(factory) as session:
            session.add(entity)
            # Commits on successful exit, rolls back on exception
    """
    session = factory()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine) -> None:
    """
    Create all tables defined in the models.  Idempotent.

    All ORM models are imported here so Base.metadata contains every table.
    """
    from blueprint_kernel.db.base import Base
    import blueprint_kernel.models  # noqa: F401

    Base.metadata.create_all(engine)


def drop_tables(engine: Engine) -> None:
    """
    Drop all tables. Use with caution - primarily for testing.
    """
    from blueprint_kernel.db.base import Base
    import blueprint_kernel.models  # noqa: F401

    Base.metadata.drop_all(engine)
