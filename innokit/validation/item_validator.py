from collections.abc import Callable, Mapping
from typing import Any

from innokit.validation.validator import Check, CheckFailure, Validator, run_checks

RuleSet = Callable[[Validator], Mapping[str, Check]]

EMPTY: Mapping[str, Any] = {}


class ItemValidator:
    """
    Validates one request's input against a rule set.

    A field is looked up in the body first, then the query string, then the
    path params; the first source containing the field wins.
    """

    def __init__(
        self,
        body: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        validator: Validator | None = None,
    ) -> None:
        self.sources = (body or EMPTY, query or EMPTY, params or EMPTY)
        self.validator = validator or Validator()

    def lookup(self, field: str) -> Any:
        for source in self.sources:
            if field in source:
                return source[field]
        return None

    def validate(self, rule_set: RuleSet) -> dict[str, Any]:
        """
        Run ``rule_set`` and return the sanitized data.

        Raises:
            ValidationError: For the first field that fails its check.
        """
        outcome = run_checks(rule_set(self.validator), self.lookup)
        if isinstance(outcome, CheckFailure):
            raise outcome.to_error()
        return outcome
