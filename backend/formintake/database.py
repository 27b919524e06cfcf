"""Database engine, session factory and declarative base."""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from formintake.config import get_settings


settings = get_settings()

# SQLite needs cross-thread access for the FastAPI threadpool;
# PostgreSQL gets a real connection pool.
connect_args = {}
engine_kwargs = {}

if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
else:
    engine_kwargs = {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
    }

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    **engine_kwargs
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def configure_sqlite(bind) -> None:
    """
    Enable foreign keys and working SAVEPOINTs on a SQLite engine.

    pysqlite opens transactions lazily and breaks nested transactions; the
    driver is switched to autocommit and BEGIN is emitted by SQLAlchemy.
    """

    @event.listens_for(bind, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(bind, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


if settings.database_url.startswith("sqlite"):
    configure_sqlite(engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def init_db(bind=None) -> None:
    """Create all tables (local development; production uses alembic)."""
    import formintake.models  # noqa: F401  register mappers

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
