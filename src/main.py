import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Config
from core.exception_mappers import HTTPExceptionsMapper
from core.ioc import Resolve, cleanup_list
from core.logging import AbstractLogger
from core.router import router
from core.sessions import SessionCreatorI, session_middleware
from gateways.db import RedisClient

_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
]


async def _check_gateways(cfg: Config, logger: AbstractLogger) -> None:
    if cfg.cart_storage != "redis":
        logger.warning("Using in-memory cart storage, carts are lost on restart")
        return
    logger.info("Pinging redis...")
    await asyncio.wait_for(Resolve(RedisClient).ping(), timeout=3)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg = Resolve(Config)
    logger = Resolve(AbstractLogger)
    await _check_gateways(cfg, logger)
    logger.info("Gateways are ready to accept connections!")
    try:
        yield
    finally:
        await asyncio.gather(*[obj.aclose() for obj in cleanup_list])
        logger.info("Gateways closed")


def app_factory() -> FastAPI:
    cfg = Resolve(Config)
    app = FastAPI(title="Storefront API", version=cfg.api_version, lifespan=lifespan)
    app.include_router(router)
    Resolve(HTTPExceptionsMapper, app=app).setup_handlers()
    sessions_cfg = cfg.server.sessions
    app.middleware("http")(
        session_middleware(
            session_creator=Resolve(SessionCreatorI),
            max_age=sessions_cfg.ttl,
            session_key_name=sessions_cfg.key,
            secure=cfg.server.ssl_enabled,
        )
    )
    # credentials are allowed, so origins must be listed explicitly
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_DEV_ORIGINS if cfg.debug else [cfg.server.addr],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


async def main() -> None:
    cfg = Resolve(Config)
    Resolve(AbstractLogger).info("Running server", mode=cfg.mode, addr=cfg.server.addr)
    server = uvicorn.Server(
        uvicorn.Config(
            app="main:app_factory",
            factory=True,
            # bind to all interfaces, configured host is the public one
            host="0.0.0.0",
            port=cfg.server.port,
            reload=cfg.debug,
        )
    )
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        ...
