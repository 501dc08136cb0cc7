# File: subroll/core/database/connection.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from subroll.core.config.settings import settings
from subroll.core.database.base import Base


def build_engine(url: str):
    # check_same_thread=False is needed only for SQLite
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """Creates all tables registered on Base. Idempotent."""
    # Import models so they register on Base
    import subroll.features.projects.data.sql_models  # noqa: F401

    if bind is None:
        settings.ensure_dirs()
        bind = engine
    Base.metadata.create_all(bind=bind)

