"""
Unit tests for engine setup and write locking on file-backed SQLite.
"""
import threading
from datetime import datetime

import pytest
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from roombook import models
from roombook.conflicts import has_conflict, lock_room
from roombook.database import Base, _is_file_sqlite, begin_write, build_engine


SLOT_START = datetime(2026, 6, 1, 10, 0)
SLOT_END = datetime(2026, 6, 1, 11, 0)


@pytest.fixture
def file_engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'roombook.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_sessions(file_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=file_engine)


@pytest.fixture
def file_room(file_sessions):
    db = file_sessions()
    try:
        room = models.Room(name="Conference Room A", capacity=12)
        db.add(room)
        db.commit()
        return room.id
    finally:
        db.close()


def reserve_slot(session_factory, room_id: int) -> bool:
    """Lock, check and insert the way the booking routes do. True if stored."""
    db = session_factory()
    try:
        begin_write(db)
        lock_room(db, room_id)
        if has_conflict(db, room_id, SLOT_START, SLOT_END):
            db.rollback()
            return False
        db.add(
            models.Booking(
                room_id=room_id,
                user_name="Budi",
                title="Race",
                start_time=SLOT_START,
                end_time=SLOT_END,
            )
        )
        db.commit()
        return True
    finally:
        db.close()


class TestIsFileSqlite:

    @pytest.mark.parametrize("url", ["sqlite://", "sqlite:///", "sqlite:///:memory:"])
    def test_memory_urls(self, url):
        assert _is_file_sqlite(url) is False

    def test_file_url(self):
        assert _is_file_sqlite("sqlite:///./roombook.db") is True

    def test_other_engines(self):
        assert _is_file_sqlite("postgresql://user:pw@db/roombook") is False


class TestWriteLocking:

    def test_concurrent_writers_store_one_booking(self, file_sessions, file_room):
        """Only one of several simultaneous requests for a slot gets it."""
        writers = 8
        barrier = threading.Barrier(writers)
        results = []
        errors = []

        def worker():
            barrier.wait()
            try:
                results.append(reserve_slot(file_sessions, file_room))
            except Exception as exc:  # surfaced through the assertion below
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(writers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        assert results.count(True) == 1
        assert results.count(False) == writers - 1

        db = file_sessions()
        try:
            assert db.query(models.Booking).count() == 1
        finally:
            db.close()

    def test_reads_begin_deferred(self, file_engine, file_sessions, file_room):
        statements = []

        @event.listens_for(file_engine, "before_cursor_execute")
        def record(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        db = file_sessions()
        try:
            db.query(models.Room).all()
            db.rollback()

            begin_write(db)
            db.query(models.Room).all()
        finally:
            db.close()
            event.remove(file_engine, "before_cursor_execute", record)

        begins = [s for s in statements if s.startswith("BEGIN")]
        assert begins == ["BEGIN", "BEGIN IMMEDIATE"]

    def test_foreign_keys_enforced(self, file_sessions):
        db = file_sessions()
        try:
            db.add(
                models.Booking(
                    room_id=424242,
                    user_name="Budi",
                    title="Orphan",
                    start_time=SLOT_START,
                    end_time=SLOT_END,
                )
            )
            with pytest.raises(IntegrityError):
                db.commit()
        finally:
            db.close()
