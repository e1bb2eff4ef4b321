# app/config/database.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .settings import Settings


def build_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine for the configured database"""
    database_url = settings.database_url_with_ssl

    engine_kwargs = {
        "pool_pre_ping": True,
        "echo": settings.debug
    }

    if database_url.startswith("sqlite"):
        # SQLite connections are shared across the request threadpool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_recycle"] = 300

    # SSL for hosted PostgreSQL
    if "render" in database_url:
        engine_kwargs["connect_args"] = {
            "sslmode": "require"
        }

    return create_engine(database_url, **engine_kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the engine"""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
