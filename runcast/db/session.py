from __future__ import annotations

from collections.abc import Callable, Generator
from contextlib import AbstractContextManager, contextmanager

from loguru import logger
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from runcast.config.settings import settings
from runcast.db.models import Base

# Anything that opens a unit of work: `with session_factory() as session: ...`
SessionFactory = Callable[[], AbstractContextManager[Session]]

# Lazy initialization so importing the package never touches the database
_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def _is_sqlite(url: str) -> bool:
    return url.lower().startswith("sqlite")


def get_engine() -> Engine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        logger.info(f"Initializing database engine: {settings.database_url}")
        connect_args = {}
        if _is_sqlite(settings.database_url):
            connect_args = {"check_same_thread": False}
            logger.debug("Using SQLite database (local use)")
        _engine = create_engine(
            settings.database_url,
            connect_args=connect_args,
            echo=False,
            pool_pre_ping=True,
        )
    return _engine


def _get_session_local() -> sessionmaker[Session]:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
        logger.debug("Database session factory initialized")
    return _SessionLocal


def make_session_factory(engine: Engine) -> SessionFactory:
    """Build a transactional session factory bound to an explicit engine.

    The returned callable behaves like `get_session`: commit on success,
    rollback on error, always close.
    """
    session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @contextmanager
    def _factory() -> Generator[Session, None, None]:
        session = session_local()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return _factory


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Commits when the block exits normally (including Core upserts, which do
    not mark the session dirty) and rolls back on any exception.

    Usage:
        with get_session() as session:
            session.add(obj)
    """
    session = _get_session_local()()
    try:
        yield session
        session.commit()
    except Exception:
        logger.exception("Database session rolled back")
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    target = engine or get_engine()
    Base.metadata.create_all(bind=target)
    logger.info("Database tables created or verified")
