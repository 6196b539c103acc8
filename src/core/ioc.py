from pathlib import Path
import typing as t
from functools import lru_cache

from httpx import AsyncClient
import punq
from fastapi import Depends
from cart.domain.interfaces import CartStorageFactoryI, CatalogClientI
from cart.domain.services import CartService
from cart.repositories import InMemoryCartStorageFactory, RedisCartStorageFactory
from core.logging import AbstractLogger, AppLogger
from core.exception_mappers import HTTPExceptionsMapper
from core.sessions import SessionCreatorI, TokenSessionCreator
from gateways.catalog import CatalogClient
from gateways.db import RedisClient
from gateways.db.exceptions import (
    AbstractDatabaseExceptionMapper,
    RedisExceptionsMapper,
)
from uploads.domain.services import UploadsService
from config import Config, init_config


@lru_cache(1)
def get_container() -> punq.Container:
    return _init_container()


class SupportsAsyncClose(t.Protocol):
    async def aclose(self): ...


cleanup_list: list[SupportsAsyncClose] = []


def register_for_cleanup(obj: SupportsAsyncClose):
    cleanup_list.append(obj)


def _init_container() -> punq.Container:
    container = punq.Container()
    cfg = init_config()
    logs_dir = Path() / "logs"
    if not cfg.debug:
        logs_dir.mkdir(exist_ok=True)
    logger = AppLogger(cfg.debug, (logs_dir / "errors.log").as_posix())
    redis_client = RedisClient.from_url(str(cfg.redis_dsn))
    httpx_client = AsyncClient(timeout=10)
    register_for_cleanup(redis_client)
    register_for_cleanup(httpx_client)
    container.register(Config, instance=cfg)
    container.register(AbstractLogger, instance=logger)
    container.register(AsyncClient, instance=httpx_client)
    container.register(RedisClient, instance=redis_client)
    container.register(AbstractDatabaseExceptionMapper, RedisExceptionsMapper)
    container.register(HTTPExceptionsMapper, HTTPExceptionsMapper)
    container.register(SessionCreatorI, TokenSessionCreator, nbytes=16)
    if cfg.cart_storage == "memory":
        container.register(
            CartStorageFactoryI,
            instance=InMemoryCartStorageFactory(),
        )
    else:
        container.register(
            CartStorageFactoryI,
            RedisCartStorageFactory,
            scope=punq.Scope.singleton,
            ttl=cfg.server.sessions.ttl,
        )
    container.register(
        CatalogClientI,
        CatalogClient,
        scope=punq.Scope.singleton,
        base_url=str(cfg.catalog.base_url),
    )
    container.register(CartService, CartService)
    container.register(
        UploadsService,
        scope=punq.Scope.singleton,
        upload_dir=cfg.uploads.dir,
        max_file_size=cfg.uploads.max_file_size,
        media_url_prefix="/media",
    )
    return container


def Resolve[T](dep: type[T] | str, **kwargs) -> T:
    return t.cast(T, get_container().resolve(dep, **kwargs))


def Inject[T](dep: type[T] | str, **kwargs):
    def resolver() -> T:
        return Resolve(dep, **kwargs)

    return Depends(resolver)
