from collections import OrderedDict
from datetime import timedelta

from redis.exceptions import RedisError

from cart.domain.interfaces import CartStorageI
from gateways.db import RedisClient
from gateways.db.exceptions import AbstractDatabaseExceptionMapper


class RedisCartStorage:
    def __init__(
        self,
        db: RedisClient,
        exception_mapper: AbstractDatabaseExceptionMapper,
        session_key: str,
        ttl: timedelta,
    ):
        self._db = db
        self._exception_mapper = exception_mapper
        self._prefix = "sessions"
        self._ttl = ttl
        self.session_key = session_key

    @property
    def storage_key(self) -> str:
        return self._prefix + ":" + self.session_key + ":cart"

    async def get(self) -> str | None:
        try:
            return await self._db.get(self.storage_key)
        except RedisError as e:
            self._exception_mapper.map_and_raise(e)

    async def set(self, data: str) -> None:
        try:
            await self._db.set(self.storage_key, data, ex=self._ttl)
        except RedisError as e:
            self._exception_mapper.map_and_raise(e)


class InMemoryCartStorage:
    """Process-local storage, content is lost on restart.
    Holds at most max_slots carts, least recently written ones are evicted first"""

    def __init__(
        self,
        slots: OrderedDict[str, str] | None = None,
        session_key: str = "",
        max_slots: int = 10_000,
    ):
        self._slots = slots if slots is not None else OrderedDict()
        self._max_slots = max_slots
        self.session_key = session_key

    async def get(self) -> str | None:
        return self._slots.get(self.session_key)

    async def set(self, data: str) -> None:
        self._slots[self.session_key] = data
        self._slots.move_to_end(self.session_key)
        while len(self._slots) > self._max_slots:
            self._slots.popitem(last=False)


class RedisCartStorageFactory:
    def __init__(
        self,
        db: RedisClient,
        exception_mapper: AbstractDatabaseExceptionMapper,
        ttl: timedelta,
    ):
        self._db = db
        self._exception_mapper = exception_mapper
        self._ttl = ttl

    def create(self, session_key: str) -> CartStorageI:
        return RedisCartStorage(
            self._db, self._exception_mapper, session_key, self._ttl
        )


class InMemoryCartStorageFactory:
    def __init__(self, max_slots: int = 10_000):
        self._slots: OrderedDict[str, str] = OrderedDict()
        self._max_slots = max_slots

    def create(self, session_key: str) -> CartStorageI:
        return InMemoryCartStorage(self._slots, session_key, self._max_slots)

