"""
CoronaDB Engine Management

SQLAlchemy 2.0 engines and sessions for SQLite database files
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import get_config
from .logging import get_logger

logger = get_logger(__name__)


def sqlite_url(path: Union[str, Path]) -> str:
    """Build the SQLAlchemy URL of a SQLite file"""
    return f"sqlite:///{Path(path)}"


def create_sqlite_engine(path: Union[str, Path]) -> Engine:
    """
    Create an engine for one SQLite file

    Foreign keys are switched on for every new connection, SQLite leaves
    them off by default.
    """
    config = get_config()
    engine = create_engine(
        sqlite_url(path),
        echo=config.database.echo,
        connect_args={"timeout": config.database.sqlite_timeout},
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    logger.debug(f"Database engine created: {path}")
    return engine


def get_session_maker(engine: Engine) -> sessionmaker:
    """Session factory bound to the engine"""
    return sessionmaker(engine, class_=Session, expire_on_commit=False)


@contextmanager
def session_scope(session_maker: sessionmaker) -> Iterator[Session]:
    """
    Transactional session scope

    Usage:
        with session_scope(maker) as session:
            session.execute(...)
    """
    session = session_maker()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
