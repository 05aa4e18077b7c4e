from collections.abc import Mapping
from typing import Any

from fastapi import Request

from innokit.errors import ValidationError
from innokit.validation import ItemValidator, RuleSet

JSON_CONTENT_TYPES = ("application/json",)
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_body(request: Request) -> Mapping[str, Any]:
    """
    Return the request body as a mapping: JSON object, form fields, or empty.

    Also usable as a dependency, ``body: Mapping[str, Any] = Depends(read_body)``,
    so that plain ``def`` handlers get the body without awaiting it.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(JSON_CONTENT_TYPES):
        try:
            body = await request.json()
        except ValueError as exc:
            raise ValidationError(ValidationError.INVALID) from exc
        return body if isinstance(body, dict) else {}
    if content_type.startswith(FORM_CONTENT_TYPES):
        return await request.form()
    return {}


class Controller:
    """
    Base class for route handlers.

    Subclasses expose handlers as methods and turn request input into
    sanitized data with :meth:`validate` (``async def`` handlers) or
    :meth:`validate_body` (plain ``def`` handlers, which FastAPI runs in its
    threadpool; use these for handlers doing blocking database work).
    """

    async def validate(self, request: Request, rule_set: RuleSet) -> dict[str, Any]:
        """
        Validate the request's body, query and path params against ``rule_set``.

        Raises:
            ValidationError: For the first field that fails its check.
        """
        return self.validate_body(request, await read_body(request), rule_set)

    def validate_body(self, request: Request, body: Mapping[str, Any], rule_set: RuleSet) -> dict[str, Any]:
        """Like :meth:`validate`, with the body already read (see :func:`read_body`)."""
        item_validator = ItemValidator(
            body=body,
            query=request.query_params,
            params=request.path_params,
        )
        return item_validator.validate(rule_set)
