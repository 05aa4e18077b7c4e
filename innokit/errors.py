"""Error taxonomy shared by every service built on the toolkit.

Every failure is represented by exactly one ``AppError`` subtype. The wire
identifier of an error is ``error_prefix + code`` and is a public contract:
codes are never renamed or reused once shipped.
"""

import re
from enum import Enum
from typing import Any, ClassVar

from fastapi import status


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTH = "auth"
    INTERNAL = "internal"


ERROR_PREFIXES: dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "VALIDATION_",
    ErrorKind.AUTH: "AUTH_",
    ErrorKind.INTERNAL: "INNO_",
}

HTTP_CODE_PATTERN = re.compile(r"HTTP_[45]\d\d")

DEFAULT_STATUSES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_prefix(kind: ErrorKind) -> str:
    """Return the wire prefix for an error kind."""
    return ERROR_PREFIXES[kind]


def default_status(kind: ErrorKind) -> int:
    """Return the HTTP status used for an error kind when the code does not override it."""
    return DEFAULT_STATUSES[kind]


class AppError(Exception):
    """Base exception for all classified failures."""

    kind: ClassVar[ErrorKind]
    error_prefix: ClassVar[str]
    codes: ClassVar[frozenset[str]] = frozenset()
    default_code: ClassVar[str]
    # Internal details are logged but never serialized into responses.
    expose_details: ClassVar[bool] = True

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "kind" in cls.__dict__:
            cls.error_prefix = error_prefix(cls.kind)

    def __init__(self, code: str | None = None, inner_details: Any = None) -> None:
        code = code or self.default_code
        if not self.is_known_code(code):
            raise ValueError(f"{code!r} is not a {self.kind.value} error code")
        self.code = code
        self.inner_details = inner_details
        super().__init__(self.wire_code)

    @classmethod
    def is_known_code(cls, code: str) -> bool:
        return code in cls.codes

    @property
    def wire_code(self) -> str:
        return self.error_prefix + self.code

    @property
    def http_status(self) -> int:
        return default_status(self.kind)

    @property
    def client_details(self) -> Any:
        """Details safe to serialize, or None when they must stay server-side."""
        if self.expose_details and self.inner_details:
            return self.inner_details
        return None

    def to_envelope(self) -> dict[str, Any]:
        """Build the client-visible ``{error, details}`` body; ``details`` is omitted when empty."""
        body: dict[str, Any] = {"error": self.wire_code}
        if self.client_details is not None:
            body["details"] = self.client_details
        return body


class ValidationError(AppError):
    """Raised when a request field fails its constraint. Details carry the first failure only."""

    kind = ErrorKind.VALIDATION

    INVALID = "INVALID"
    NO_EMAIL = "NO_EMAIL"
    NO_INT = "NO_INT"
    NO_FLOAT = "NO_FLOAT"
    NO_STRING = "NO_STRING"
    NO_BOOL = "NO_BOOL"
    NO_UUID = "NO_UUID"
    NO_ENUM = "NO_ENUM"

    codes = frozenset({INVALID, NO_EMAIL, NO_INT, NO_FLOAT, NO_STRING, NO_BOOL, NO_UUID, NO_ENUM})
    default_code = INVALID


class AuthError(AppError):
    """Raised when a request carries a missing or invalid credential."""

    kind = ErrorKind.AUTH

    TOKEN_IS_INVALID = "TOKEN_IS_INVALID"
    # Reserved: shipped in the code set, not raised by the JWT stage.
    TOKEN_MISSING = "TOKEN_MISSING"

    codes = frozenset({TOKEN_IS_INVALID, TOKEN_MISSING})
    default_code = TOKEN_IS_INVALID


class InternalError(AppError):
    """
    Raised for database failures, missing required rows and unclassified faults.

    ``HTTP_<status>`` codes carry HTTP errors raised by the framework itself
    (unknown route, wrong method) and keep their status.
    """

    kind = ErrorKind.INTERNAL
    expose_details = False

    INTERNAL = "INTERNAL"
    DB_QUERY = "DB_QUERY"
    DB_NO_SUCH_ = "DB_NO_SUCH_"
    HTTP_ = "HTTP_"

    codes = frozenset({INTERNAL, DB_QUERY})
    default_code = INTERNAL

    @classmethod
    def from_status(cls, status_code: int, inner_details: Any = None) -> "InternalError":
        return cls(f"{cls.HTTP_}{status_code}", inner_details)

    @classmethod
    def is_known_code(cls, code: str) -> bool:
        if code.startswith(cls.DB_NO_SUCH_) and len(code) > len(cls.DB_NO_SUCH_):
            return True
        if HTTP_CODE_PATTERN.fullmatch(code):
            return True
        return super().is_known_code(code)

    @property
    def http_status(self) -> int:
        if self.code.startswith(self.DB_NO_SUCH_):
            return status.HTTP_404_NOT_FOUND
        if HTTP_CODE_PATTERN.fullmatch(self.code):
            return int(self.code[len(self.HTTP_):])
        return super().http_status
