import logging
from asyncio import Lock
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class KeyLockManager:
    def __init__(self):
        self.locks: Dict[str, Lock] = {}  # one Lock per player_id
        self.users: Dict[str, int] = {}  # holders + waiters per player_id
        self.lock = Lock()  # protects locks and users

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Serialize everything done inside the block for the given key

        Args:
            key (str): player_id
        """
        async with self.lock:
            key_lock = self.locks.setdefault(key, Lock())
            self.users[key] = self.users.get(key, 0) + 1
        try:
            async with key_lock:
                yield
        finally:
            async with self.lock:
                self.users[key] -= 1

    async def cleanup(self) -> int:
        """Delete locks that nobody holds or waits for

        Returns:
            int: number of locks removed
        """
        async with self.lock:
            idle = [key for key, count in self.users.items() if count == 0]
            for key in idle:
                del self.locks[key]
                del self.users[key]
        if idle:
            logging.debug(f"Removed {len(idle)} idle player locks")
        return len(idle)

    def __len__(self) -> int:
        return len(self.locks)
