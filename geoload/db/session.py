# ========================
# geoload/db/session.py
# ========================

"""
SQLAlchemy engine creation and table bootstrap.
"""

import logging
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from .models import Base

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("sqlite", "postgresql")


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given database URL.

    Only SQLite and PostgreSQL are supported because the repository relies on
    their INSERT ... ON CONFLICT DO NOTHING dialect support.
    """
    url = make_url(database_url)
    backend = url.get_backend_name()
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unsupported database backend '{backend}'. "
            f"Supported: {', '.join(SUPPORTED_BACKENDS)}"
        )

    if backend == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(url, echo=echo)

    return create_engine(url, echo=echo, pool_pre_ping=True)


def create_tables(engine: Engine) -> None:
    """Create all known target tables that do not exist yet."""
    Base.metadata.create_all(engine)
    logger.info(f"Ensured tables exist: {sorted(Base.metadata.tables)}")
