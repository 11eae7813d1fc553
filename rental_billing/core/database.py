"""Database engine, session management and unit-of-work utilities."""
from collections.abc import Generator, Iterator
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from rental_billing.db import Base, models  # noqa: F401  # Ensure models are imported for metadata registration
from rental_billing.services.exceptions import ConflictError

from .settings import get_settings

logger = logging.getLogger(__name__)

_settings = get_settings()

ENGINE = create_engine(_settings.database_url, future=True, echo=_settings.sql_echo)
SessionLocal = sessionmaker(bind=ENGINE, class_=Session, autoflush=False, autocommit=False)


def get_db_session() -> Generator[Session, None, None]:
    """Yield a database session and ensure closure."""

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Run a block as one unit of work: commit on success, roll back on any error."""

    try:
        yield session
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.warning("Unit of work rolled back on constraint violation: %s", exc.orig)
        raise ConflictError("Conflicting change detected; nothing was saved") from exc
    except Exception:
        session.rollback()
        logger.warning("Unit of work rolled back", exc_info=True)
        raise


def create_database_schema() -> None:
    """Create database tables based on ORM metadata."""

    Base.metadata.create_all(bind=ENGINE)
