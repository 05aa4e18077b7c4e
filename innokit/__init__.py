"""Service toolkit: request validation, error taxonomy and error middleware."""

from innokit.api.controller import Controller
from innokit.api.exception_handlers import ErrorMiddleware, register_exception_handlers
from innokit.api.middleware import JwtAuthStage, StageMiddleware
from innokit.core.config import Settings
from innokit.db.service import DbService, OracleService, PgService
from innokit.errors import AppError, AuthError, ErrorKind, InternalError, ValidationError
from innokit.main import App
from innokit.schemas.result import Result
from innokit.validation import ItemValidator, Validator

__all__ = [
    "App",
    "AppError",
    "AuthError",
    "Controller",
    "DbService",
    "ErrorKind",
    "ErrorMiddleware",
    "InternalError",
    "ItemValidator",
    "JwtAuthStage",
    "OracleService",
    "PgService",
    "Result",
    "Settings",
    "StageMiddleware",
    "ValidationError",
    "Validator",
    "register_exception_handlers",
]
