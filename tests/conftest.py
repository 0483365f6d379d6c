import asyncio

import pytest

from tictac_promo.db import create_engine, create_session_factory, create_tables
from tictac_promo.key_lock_manager import KeyLockManager
from tictac_promo.notifier import NotificationDispatcher, NotificationSink
from tictac_promo.services.promo_issuance import PromoIssuanceCoordinator
from tictac_promo.storage import FilePlayerStore, MemoryPlayerStore, SqlPlayerStore


class RecordingSink(NotificationSink):
    def __init__(self):
        self.messages = []

    async def notify(self, player_id, message):
        self.messages.append((player_id, message))


class FailingSink(NotificationSink):
    async def notify(self, player_id, message):
        raise ConnectionError("chat unreachable")


class SlowReadStore(MemoryPlayerStore):
    """Yields to the loop between read and write so unserialized callers would interleave."""

    async def get(self, player_id):
        await asyncio.sleep(0.01)
        return await super().get(player_id)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def memory_store():
    return MemoryPlayerStore()


@pytest.fixture
async def sql_store(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'players.sqlite3'}")
    await create_tables(engine)
    yield SqlPlayerStore(create_session_factory(engine))
    await engine.dispose()


@pytest.fixture(params=["memory", "file", "sql"])
async def store(request, tmp_path):
    if request.param == "memory":
        yield MemoryPlayerStore()
    elif request.param == "file":
        yield FilePlayerStore(tmp_path / "database.json")
    else:
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'players.sqlite3'}")
        await create_tables(engine)
        yield SqlPlayerStore(create_session_factory(engine))
        await engine.dispose()


@pytest.fixture
def coordinator(memory_store, sink):
    return PromoIssuanceCoordinator(
        memory_store, NotificationDispatcher(sink), KeyLockManager()
    )
