from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings

Base = declarative_base()


def _is_file_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and ":memory:" not in url and url not in ("sqlite://", "sqlite:///")


# Connection execution option marking a transaction that must hold the write lock
WRITE_LOCK_OPTION = "roombook_write_lock"


def enable_sqlite_write_locking(engine: Engine) -> None:
    """
    Let write transactions on a SQLite engine start with ``BEGIN IMMEDIATE``.

    pysqlite only opens a transaction right before the first DML statement,
    so a conflict check followed by an insert would otherwise run outside the
    write lock. Transactions opened through ``begin_write`` take the reserved
    lock at BEGIN, which keeps check-and-insert atomic against other writers.
    Everything else begins deferred, so reads never wait on the write lock.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # hand transaction control to SQLAlchemy
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(WRITE_LOCK_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def begin_write(db: Session) -> None:
    """
    Open the session's transaction as a write transaction.

    Must run before the session issues its first statement; a session that
    is already inside a transaction keeps the one it has.
    """
    if not db.in_transaction():
        db.connection(execution_options={WRITE_LOCK_OPTION: True})


def build_engine(url: str) -> Engine:
    engine_kwargs = {}
    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_engine(url, **engine_kwargs)
    if _is_file_sqlite(url):
        enable_sqlite_write_locking(engine)
    return engine


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
