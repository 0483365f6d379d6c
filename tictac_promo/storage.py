"""Player record stores.

Every backend offers the same three operations keyed by player_id:

- ``get``: the record or None.
- ``upsert``: create the record when absent; store ``last_promo_code`` only if
  the record has none yet (a promo code is write-once).
- ``link``: create the record when absent and attach the notification channel.

Callers that read, decide and then write (the promo coordinator) serialize per
player_id with ``KeyLockManager``; the stores only guarantee that each single
operation is applied as a whole or not at all.
"""

import asyncio
import json
import logging
import os
import pathlib
import tempfile
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from tictac_promo.crud import CreateData, ReadData, UpdateData
from tictac_promo.models.schema_models import PlayerRecordSchema


class StorageError(RuntimeError):
    """The player record could not be read or written."""


class PlayerStore(ABC):
    @abstractmethod
    async def get(self, player_id: str) -> Optional[PlayerRecordSchema]:
        ...

    @abstractmethod
    async def upsert(
        self, player_id: str, last_promo_code: Optional[str] = None
    ) -> PlayerRecordSchema:
        ...

    @abstractmethod
    async def link(self, player_id: str, channel_id: str) -> PlayerRecordSchema:
        ...


class MemoryPlayerStore(PlayerStore):
    def __init__(self):
        self.players: Dict[str, PlayerRecordSchema] = {}

    async def get(self, player_id: str) -> Optional[PlayerRecordSchema]:
        return self.players.get(player_id)

    async def upsert(
        self, player_id: str, last_promo_code: Optional[str] = None
    ) -> PlayerRecordSchema:
        def apply(record):
            if last_promo_code is not None and record.last_promo_code is None:
                return record.model_copy(update={"last_promo_code": last_promo_code})
            return record

        return await self._write(player_id, apply)

    async def link(self, player_id: str, channel_id: str) -> PlayerRecordSchema:
        def apply(record):
            return record.model_copy(
                update={"notification_channel_id": channel_id, "is_connected": True}
            )

        return await self._write(player_id, apply)

    def _apply(self, player_id: str, apply) -> Dict[str, PlayerRecordSchema]:
        record = self.players.get(player_id) or PlayerRecordSchema(player_id=player_id)
        players = dict(self.players)
        players[player_id] = apply(record)
        return players

    async def _write(self, player_id: str, apply) -> PlayerRecordSchema:
        self.players = self._apply(player_id, apply)
        return self.players[player_id]


class FilePlayerStore(MemoryPlayerStore):
    """Memory store mirrored to a JSON file, rewritten after every change.

    The whole file is rewritten on each change, so writes for all players go
    through a single lock: the next change starts from the map the previous
    one saved.
    """

    def __init__(self, file_path: str | os.PathLike):
        super().__init__()
        self.file_path = pathlib.Path(file_path)
        self._write_lock = asyncio.Lock()
        self._load()

    def _load(self) -> None:
        if not self.file_path.exists():
            return
        try:
            raw_data = json.loads(self.file_path.read_text(encoding="utf-8"))
            self.players = {
                item["player_id"]: PlayerRecordSchema.model_validate(item)
                for item in raw_data
            }
            logging.info(f"Loaded {len(self.players)} players from {self.file_path}")
        except (OSError, ValueError, KeyError, TypeError) as e:
            # An unreadable file starts an empty store; the next write replaces it.
            logging.error(f"Failed to load player data from {self.file_path}: {e}")
            self.players = {}

    async def _write(self, player_id: str, apply) -> PlayerRecordSchema:
        async with self._write_lock:
            players = self._apply(player_id, apply)
            try:
                await asyncio.to_thread(self._save, list(players.values()))
            except OSError as e:
                raise StorageError(f"Failed to save player data: {e}") from e
            self.players = players
            return players[player_id]

    def _save(self, records: List[PlayerRecordSchema]) -> None:
        payload = json.dumps([record.model_dump() for record in records], indent=2)
        directory = self.file_path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                tmp_file.write(payload)
            os.replace(tmp_path, self.file_path)
        except OSError:
            pathlib.Path(tmp_path).unlink(missing_ok=True)
            raise


class SqlPlayerStore(PlayerStore):
    """Store backed by the ``players`` table (SQLite via aiosqlite or PostgreSQL via asyncpg)."""

    def __init__(self, Session: async_sessionmaker):
        self.Session: async_sessionmaker = Session

    async def get(self, player_id: str) -> Optional[PlayerRecordSchema]:
        try:
            async with self.Session() as session:
                return await ReadData.read_player_data(player_id, session)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read player data: {e}") from e

    async def upsert(
        self, player_id: str, last_promo_code: Optional[str] = None
    ) -> PlayerRecordSchema:
        def apply(player):
            if last_promo_code is not None:
                UpdateData.set_promo_code_if_absent(player, last_promo_code)

        return await self._write(player_id, apply)

    async def link(self, player_id: str, channel_id: str) -> PlayerRecordSchema:
        def apply(player):
            UpdateData.set_notification_channel(player, channel_id)

        return await self._write(player_id, apply)

    async def _write(self, player_id: str, apply) -> PlayerRecordSchema:
        """Lock (or create) the row, apply the change and commit in one transaction.

        A first insert racing with another process fails on the primary key;
        the second attempt then finds the row and updates it.
        """
        for attempt in range(2):
            try:
                async with self.Session() as session:
                    async with session.begin():
                        player = await ReadData.read_player_row_for_update(player_id, session)
                        if player is None:
                            player = CreateData.add_player_data(player_id, session)
                        apply(player)
                        await session.flush()
                        record = PlayerRecordSchema.model_validate(player)
                return record
            except IntegrityError as e:
                if attempt == 1:
                    raise StorageError(f"Failed to write player data: {e}") from e
                logging.info(f"Concurrent insert for player {player_id}, retrying as update")
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to write player data: {e}") from e
