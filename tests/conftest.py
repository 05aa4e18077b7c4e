import threading
from collections.abc import Mapping
from typing import Any

import pytest
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from innokit.api.controller import Controller, read_body
from innokit.core.config import Settings
from innokit.core.security import create_token
from innokit.main import App
from innokit.schemas.result import Result
from innokit.validation import Validator

JWT_SECRET = "test-secret"
JWT_PUBLIC_PATH = r"^/public"


class SampleController(Controller):
    def __init__(self) -> None:
        self.barrier = threading.Barrier(2, timeout=5)

    async def public_resource(self, request: Request) -> Result[int]:
        return Result(result=1)

    async def protected_resource(self, request: Request) -> Result[dict]:
        return Result(result={"user": getattr(request.state, "user", None)})

    async def public_resource_with_error(self, request: Request):
        raise RuntimeError("Test error: password=hunter2")

    async def public_resource_with_validation(self, request: Request) -> Result[dict]:
        data = await self.validate(
            request,
            lambda validator: {
                "testField": validator.is_email("testField"),
                "testQueryField": validator.is_int("testQueryField"),
            },
        )
        return Result(result=data)

    async def item_by_id(self, request: Request, item_id: str) -> Result[dict]:
        data = await self.validate(request, lambda validator: {"item_id": validator.is_int("item_id")})
        return Result(result=data)

    async def forbidden_resource(self, request: Request):
        raise HTTPException(status_code=403, detail="secret internals")

    async def typed_item(self, request: Request, item_id: int) -> Result[int]:
        return Result(result=item_id)

    def blocking_resource(
        self, request: Request, body: Mapping[str, Any] = Depends(read_body)
    ) -> Result[dict]:
        data = self.validate_body(request, body, lambda validator: {"n": validator.is_int("n")})
        # Both requests must be in flight at once for the barrier to open.
        self.barrier.wait()
        return Result(result=data)


def build_router() -> APIRouter:
    controller = SampleController()
    router = APIRouter()
    router.post("/public/test")(controller.public_resource)
    router.post("/test")(controller.protected_resource)
    router.get("/public/errors/common")(controller.public_resource_with_error)
    router.post("/public/errors/validation")(controller.public_resource_with_validation)
    router.get("/public/items/{item_id}")(controller.item_by_id)
    router.get("/public/forbidden")(controller.forbidden_resource)
    router.get("/public/typed/{item_id}")(controller.typed_item)
    router.post("/public/blocking")(controller.blocking_resource)
    return router


@pytest.fixture(scope="session")
def router() -> APIRouter:
    return build_router()


@pytest.fixture(scope="function")
def jwt_client(router: APIRouter):
    """Client for an app with JWT auth enabled outside /public."""
    settings = Settings(jwt_secret=JWT_SECRET, jwt_public_path=JWT_PUBLIC_PATH)
    with TestClient(App(settings, router).api) as client:
        yield client


@pytest.fixture(scope="function")
def client(router: APIRouter):
    """Client for an app without JWT configuration."""
    settings = Settings(jwt_secret=None, jwt_public_path=None)
    with TestClient(App(settings, router).api) as client:
        yield client


@pytest.fixture(scope="function")
def token() -> str:
    return create_token({"foo": 1}, JWT_SECRET)


@pytest.fixture(scope="function")
def engine():
    """In-memory SQLite engine with a seeded users table."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as connection:
        connection.exec_driver_sql("CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT NOT NULL)")
        connection.exec_driver_sql(
            "INSERT INTO users (id, email) VALUES (1, 'a@test.ru'), (2, 'b@test.ru')"
        )
    yield engine
    engine.dispose()


@pytest.fixture(scope="session")
def validator() -> Validator:
    return Validator()
