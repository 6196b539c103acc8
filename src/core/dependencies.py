from typing import Annotated
from fastapi import Request, Depends
from config import Config
from core.ioc import Resolve


def get_session_key(req: Request) -> str:
    session_key = req.scope.get(Resolve(Config).server.sessions.key)
    assert session_key, "Missing session key in req scope: %s" % req.scope
    return session_key


SessionKeyDep = Annotated[str, Depends(get_session_key)]
