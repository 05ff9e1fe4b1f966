"""Engine and session helpers for the index queue database."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import Config
from .models import Base


def create_db_engine(database_url: str | None = None, *, echo: bool = False) -> Engine:
    """Create an engine for the queue database.

    Args:
        database_url: SQLAlchemy URL, defaults to Config.DATABASE_URL
        echo: Log all statements

    Returns:
        SQLAlchemy engine
    """
    url = database_url or Config.DATABASE_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create the queue table and its indexes if they do not exist."""
    Base.metadata.create_all(bind=engine)
