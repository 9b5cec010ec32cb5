"""
Engine and session factory construction.

The store receives its session factory explicitly; nothing here is a
process-wide singleton.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from talentflow.core.config import settings


def create_engine_for(database_url: str | None = None, echo: bool = False) -> Engine:
    """Create an engine, with SQLite tuned for use from the event loop thread."""
    url = database_url or settings.DATABASE_URL
    kwargs: dict = {"echo": echo}

    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory databases live as long as their single connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    return create_engine(url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    """Sessions keep loaded attributes after commit so records outlive them."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
