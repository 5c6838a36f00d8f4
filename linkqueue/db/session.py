"""Engine and session helpers for the triage state database."""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .base import Base


def sqlite_url(path: Union[str, Path]) -> str:
    """Return a SQLAlchemy URL for a SQLite file path."""
    return f"sqlite:///{Path(path).expanduser()}"


def create_engine_from_url(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # The refresh job and the web handlers share the engine across threads.
        connect_args["check_same_thread"] = False
    return create_engine(database_url, future=True, echo=False, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """Create the ``articles`` and ``links`` tables when missing."""
    Base.metadata.create_all(engine)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False, future=True)


@contextmanager
def session_scope(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session: Session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "create_engine_from_url",
    "create_session_factory",
    "init_db",
    "session_scope",
    "sqlite_url",
]
