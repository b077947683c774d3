# storefront/data/database.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from storefront.domain.errors import UpstreamUnavailable
from storefront.utils.settings import DATABASE_URL, DB_STATEMENT_TIMEOUT_MS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def make_engine(url: str, **kwargs):
    #statement timeout only where the driver supports it (postgres)
    if url.startswith("postgresql"):
        kwargs.setdefault(
            "connect_args",
            {"options": f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}"},
        )
    engine = create_engine(url, pool_pre_ping=True, **kwargs)
    if url.startswith("sqlite"):
        _configure_sqlite(engine)
    return engine


def _configure_sqlite(engine) -> None:
    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; let SQLAlchemy emit it
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    One atomic unit: commit when the block finishes, rollback on any error.
    Connection loss or timeouts from the store surface as UpstreamUnavailable.
    """
    try:
        yield db
        db.commit()
    except OperationalError as e:
        db.rollback()
        logger.error(f"Relational store unavailable: {e}")
        raise UpstreamUnavailable("relational store is unavailable") from e
    except BaseException:
        db.rollback()
        raise
