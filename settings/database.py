from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, declarative_base

from settings.config import get_settings

# Engine is created lazily so importing models never needs a database driver
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

Base = declarative_base()


def _connect_args(url) -> dict:
    settings = get_settings()
    backend = make_url(url).get_backend_name()
    if backend == "postgresql":
        return {
            "connect_timeout": settings.db_connect_timeout_seconds,
            "options": f"-c statement_timeout={settings.db_statement_timeout_ms}",
        }
    if backend == "sqlite":
        return {"timeout": settings.db_connect_timeout_seconds}
    return {}


def get_engine() -> Engine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.sqlalchemy_url
        options = {"pool_pre_ping": True, "connect_args": _connect_args(url)}
        if make_url(url).get_backend_name() == "postgresql":
            options["pool_size"] = settings.db_pool_size
        _engine = create_engine(url, **options)
    return _engine


def get_session_local() -> sessionmaker:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def get_db():
    db = get_session_local()()
    try:
        yield db
    finally:
        db.close()
