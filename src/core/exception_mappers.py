from collections.abc import Mapping
import logging
import abc
import typing as t
from fastapi.responses import JSONResponse
from core.logging import AbstractLogger
from core.services import exceptions as service_exc


from fastapi import FastAPI, Request, status


class AbstractExceptionMapper[K: Exception, V: Exception](abc.ABC):
    EXCEPTION_MAPPING: Mapping[type[K], type[V]]

    @abc.abstractmethod
    def get_default_exc(self) -> type[V]: ...

    def map(self, exc: K) -> type[V]:
        for exc_class in type(exc).__mro__:
            mapped_exc_cls = self.EXCEPTION_MAPPING.get(t.cast(type[K], exc_class))
            if mapped_exc_cls:
                return mapped_exc_cls
        logging.warning("Not mapped exception: %s", exc, exc_info=True)
        return self.get_default_exc()

    @abc.abstractmethod
    def map_and_init(self, exc: K) -> V: ...

    def map_and_raise(self, exc: K) -> t.NoReturn:
        raise self.map_and_init(exc) from exc


class HTTPExceptionsMapper:
    """Maps service errors to corresponding http status code"""

    _EXCEPTION_MAPPING: Mapping[type[Exception], int] = {
        service_exc.EntityNotFoundError: status.HTTP_404_NOT_FOUND,
        service_exc.ClientError: status.HTTP_400_BAD_REQUEST,
        service_exc.UnsupportedFileError: status.HTTP_400_BAD_REQUEST,
        service_exc.FileTooLargeError: status.HTTP_400_BAD_REQUEST,
        service_exc.InvalidCouponError: status.HTTP_400_BAD_REQUEST,
        service_exc.ExternalGatewayError: status.HTTP_502_BAD_GATEWAY,
    }

    def __init__(self, app: FastAPI, logger: AbstractLogger):
        self._app = app
        self._logger = logger

    async def _handle(self, req: Request, exc: Exception):
        status_code: int | None = next(
            (
                self._EXCEPTION_MAPPING[exc_class]
                for exc_class in type(exc).__mro__
                if exc_class in self._EXCEPTION_MAPPING
            ),
            None,
        )
        if status_code is None:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            self._logger.exception(
                "Unknown exception in handler", path=req.url.path, error=exc
            )
        message: str = (
            str(exc)
            if status_code != status.HTTP_500_INTERNAL_SERVER_ERROR
            else "Internal server error."
        )
        return JSONResponse({"detail": message}, status_code)

    def setup_handlers(self) -> None:
        for exc_class in self._EXCEPTION_MAPPING:
            self._app.add_exception_handler(exc_class, self._handle)
        self._app.add_exception_handler(Exception, self._handle)
