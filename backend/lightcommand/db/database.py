from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Optional

from ..core.config import settings
from ..core.exceptions import StoreConnectivityError

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args={"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {}
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Session:
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Optional[Engine] = None):
    """Create all tables"""
    from ..models import command_queue, device, remote_button  # noqa: F401 - register models

    Base.metadata.create_all(bind=bind or engine)


def check_connection(bind: Optional[Engine] = None) -> None:
    """Round-trip a trivial statement; raise StoreConnectivityError if the store is unreachable"""
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise StoreConnectivityError(f"Database connection failed: {e}") from e


def reconnect(bind: Optional[Engine] = None) -> None:
    """Drop pooled connections and verify a fresh one can be opened"""
    bind = bind or engine
    bind.dispose()
    check_connection(bind)
