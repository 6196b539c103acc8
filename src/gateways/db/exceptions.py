from collections.abc import Mapping

from redis import exceptions as redis_exc

from core.exception_mappers import AbstractExceptionMapper


class DatabaseError(Exception):
    def __init__(self, msg: str | None = None):
        self.msg = msg
        super().__init__(msg)


class StorageUnavailableError(DatabaseError): ...


class StorageTimeoutError(StorageUnavailableError): ...


class AbstractDatabaseExceptionMapper[K: Exception](
    AbstractExceptionMapper[K, DatabaseError]
): ...


class RedisExceptionsMapper(AbstractDatabaseExceptionMapper[redis_exc.RedisError]):
    EXCEPTION_MAPPING: Mapping[type[redis_exc.RedisError], type[DatabaseError]] = {
        redis_exc.TimeoutError: StorageTimeoutError,
        redis_exc.ConnectionError: StorageUnavailableError,
    }

    def get_default_exc(self) -> type[DatabaseError]:
        return DatabaseError

    def map_and_init(self, exc: redis_exc.RedisError) -> DatabaseError:
        mapped_exc_cls = self.map(exc)
        return mapped_exc_cls(str(exc))
