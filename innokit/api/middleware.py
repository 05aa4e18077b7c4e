"""Ordered request stages run before routing.

A stage receives the request and returns ``None`` to continue or a
``Response`` to answer immediately. Exceptions raised by a stage are
rendered by ``ErrorMiddleware``.
"""

import logging
import re
from collections.abc import Awaitable, Callable, Sequence

import jwt
from fastapi import Request, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from innokit.core.security import decode_token
from innokit.errors import AuthError

logger = logging.getLogger(__name__)

Stage = Callable[[Request], Awaitable[Response | None]]


class StageMiddleware:
    def __init__(self, app: ASGIApp, stages: Sequence[Stage] = ()) -> None:
        self.app = app
        self.stages = tuple(stages)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            request = Request(scope, receive)
            for stage in self.stages:
                response = await stage(request)
                if response is not None:
                    await response(scope, receive, send)
                    return
        await self.app(scope, receive, send)


class JwtAuthStage:
    """
    Require a valid bearer token outside the public path.

    A missing, malformed or unverifiable bearer token is rejected with
    ``AUTH_TOKEN_IS_INVALID``. On success the decoded claims are available
    as ``request.state.user``.
    """

    def __init__(self, secret: str, public_path: str | None = None, algorithm: str = "HS256") -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.public_path = re.compile(public_path) if public_path else None

    def is_public(self, path: str) -> bool:
        return self.public_path is not None and self.public_path.search(path) is not None

    async def __call__(self, request: Request) -> Response | None:
        if self.is_public(request.url.path):
            return None

        scheme, _, token = request.headers.get("authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            logger.info("Missing bearer token on %s", request.url.path)
            raise AuthError(AuthError.TOKEN_IS_INVALID)

        try:
            request.state.user = decode_token(token.strip(), self.secret, self.algorithm)
        except jwt.InvalidTokenError as exc:
            logger.info("Rejected token on %s: %s", request.url.path, type(exc).__name__)
            raise AuthError(AuthError.TOKEN_IS_INVALID) from exc
        return None
