from __future__ import annotations

import sqlite3
import threading

import pytest


def test_close_waits_for_in_flight_call(db):
    db._lock.acquire()
    closer = threading.Thread(target=db.close)
    closer.start()
    closer.join(0.2)
    assert closer.is_alive()
    assert db._conn is not None

    db._lock.release()
    closer.join(2)
    assert not closer.is_alive()
    assert db._conn is None


@pytest.mark.asyncio
async def test_calls_after_close_raise(db):
    db.close()
    with pytest.raises(sqlite3.ProgrammingError):
        await db.get_setting("localDNSname")


def test_close_twice_is_fine(db):
    db.close()
    db.close()
