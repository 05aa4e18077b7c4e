from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Result(BaseModel, Generic[T]):
    """Success envelope: handlers respond with ``{"result": ...}``."""

    result: T
