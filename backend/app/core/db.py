from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine, text

# Table models must be imported so they register on SQLModel.metadata
from app.models import domain  # noqa: F401


def create_db_engine(database_uri: str) -> Engine:
    """Create the process-wide engine. Callers own its lifecycle."""
    connect_args = {}
    if database_uri.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(database_uri, connect_args=connect_args, pool_pre_ping=True)

    if database_uri.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_db(engine: Engine) -> None:
    """Create missing tables.

    Production schemas are managed with Alembic; this keeps local SQLite
    databases usable without running migrations.
    """
    SQLModel.metadata.create_all(engine)


def check_connection(session: Session) -> None:
    """Raise if the database cannot answer a trivial query."""
    session.execute(text("SELECT 1"))
