from datetime import timedelta
from secrets import token_urlsafe
from typing import Protocol

from fastapi import Request, Response
from starlette.middleware.base import DispatchFunction, RequestResponseEndpoint


class SessionCreatorI(Protocol):
    async def create(self) -> str: ...


class TokenSessionCreator:
    """Issues opaque session keys. Session data lives in per-feature storages
    (e.g. cart slot), keyed by the issued key"""

    def __init__(self, nbytes: int = 16):
        self._nbytes = nbytes

    async def create(self) -> str:
        return token_urlsafe(self._nbytes)


def session_middleware(
    session_creator: SessionCreatorI,
    max_age: int | timedelta,
    session_key_name: str = "session_id",
    secure: bool = True,
) -> DispatchFunction:
    if isinstance(max_age, timedelta):
        max_age = int(max_age.total_seconds())

    async def create_session(
        req: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        session_key: str | None = req.cookies.get(session_key_name)
        if not session_key:
            session_key = await session_creator.create()
        req.scope[session_key_name] = session_key
        resp = await call_next(req)
        resp.set_cookie(
            session_key_name,
            session_key,
            max_age,
            httponly=True,
            samesite="none" if secure else "lax",
            secure=secure,
        )
        return resp

    return create_session
