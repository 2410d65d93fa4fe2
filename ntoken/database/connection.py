"""
Engine, session factory and transaction helpers.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ntoken.config import settings
from ntoken.models.base import Base


def make_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    url = url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        _enable_sqlite_savepoints(engine)
        return engine
    return create_engine(url, echo=echo, pool_pre_ping=True)


def _enable_sqlite_savepoints(engine: Engine) -> None:
    # pysqlite issues its own BEGIN lazily, which breaks SAVEPOINT; take over transaction control.
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = make_engine(echo=settings.DB_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Optional[Engine] = None) -> None:
    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """
    Run a block inside a SAVEPOINT. Any exception rolls back every change
    made in the block and propagates.
    """
    with session.begin_nested():
        yield session


def missing_tables(bind: Optional[Engine] = None) -> List[str]:
    """Ledger tables declared on the models but absent from the database."""
    present = set(inspect(bind or engine).get_table_names())
    return sorted(name for name in Base.metadata.tables if name not in present)
