"""Field checks: sanitize one named input value and verify its constraint.

A check is declared by a rule set and evaluated later, in declaration
order, by :func:`run_checks`. Evaluation stops at the first failing field.
"""

import math
import re
import uuid
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass, replace
from typing import Any

from email_validator import validate_email

from innokit.errors import ValidationError
from innokit.schemas.error import FieldFailure

INT_PATTERN = re.compile(r"[+-]?\d+")
TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off"})
JSON_TYPES = (str, int, float, bool, list, dict)

Lookup = Callable[[str], Any]


def reportable(value: Any) -> Any:
    """Return a JSON-safe stand-in for a failing value: uploads report their filename."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if value is None or isinstance(value, JSON_TYPES):
        return value
    return getattr(value, "filename", None)


def _trim(raw: Any) -> Any:
    if isinstance(raw, str):
        return raw.strip()
    return raw


def _to_email(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError("email must be a string")
    validate_email(value, check_deliverability=False)
    return value


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and INT_PATTERN.fullmatch(value):
        return int(value)
    raise ValueError("not an integer")


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("bool is not a number")
    result = float(value)
    if not math.isfinite(result):
        raise ValueError("number must be finite")
    return result


def _to_string(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError("empty or non-string value")
    return value


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError("not a boolean")


def _to_uuid(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError("uuid must be a string")
    return str(uuid.UUID(value))


@dataclass(frozen=True)
class CheckFailure:
    field: str
    value: Any
    code: str

    def details(self) -> dict[str, Any]:
        return FieldFailure(invalidField=self.field, invalidValue=self.value).model_dump()

    def to_error(self) -> ValidationError:
        return ValidationError(self.code, self.details())


@dataclass(frozen=True)
class Check:
    """A pending check of one field. Nothing is read until :meth:`evaluate`."""

    field: str
    code: str
    convert: Callable[[Any], Any]
    optional: bool = False
    default: Any = None

    def evaluate(self, lookup: Lookup) -> Any:
        """Return the sanitized value, or a :class:`CheckFailure`."""
        value = _trim(lookup(self.field))
        if value is None or value == "":
            if self.optional:
                return self.default
            return CheckFailure(self.field, value, self.code)
        try:
            return self.convert(value)
        except (TypeError, ValueError):
            return CheckFailure(self.field, reportable(value), self.code)


class Validator:
    """Builds checks for a rule set. Stateless; one instance may serve many requests."""

    def is_email(self, field: str) -> Check:
        return Check(field, ValidationError.NO_EMAIL, _to_email)

    def is_int(self, field: str) -> Check:
        return Check(field, ValidationError.NO_INT, _to_int)

    def is_float(self, field: str) -> Check:
        return Check(field, ValidationError.NO_FLOAT, _to_float)

    def is_string(self, field: str) -> Check:
        return Check(field, ValidationError.NO_STRING, _to_string)

    def is_bool(self, field: str) -> Check:
        return Check(field, ValidationError.NO_BOOL, _to_bool)

    def is_uuid(self, field: str) -> Check:
        return Check(field, ValidationError.NO_UUID, _to_uuid)

    def is_in(self, field: str, choices: Collection[Any]) -> Check:
        def member(value: Any) -> Any:
            if value not in choices:
                raise ValueError("value not allowed")
            return value

        return Check(field, ValidationError.NO_ENUM, member)

    def optional(self, check: Check, default: Any = None) -> Check:
        """Let an absent or blank value pass as ``default``."""
        return replace(check, optional=True, default=default)


def run_checks(rules: Mapping[str, Check], lookup: Lookup) -> dict[str, Any] | CheckFailure:
    """
    Evaluate ``rules`` in declaration order against ``lookup``.

    Returns the sanitized data keyed by rule name, or the failure of the
    first failing check. Checks after a failure are never evaluated.
    """
    data: dict[str, Any] = {}
    for name, check in rules.items():
        outcome = check.evaluate(lookup)
        if isinstance(outcome, CheckFailure):
            return outcome
        data[name] = outcome
    return data
