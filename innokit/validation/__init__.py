from innokit.validation.item_validator import ItemValidator, RuleSet
from innokit.validation.validator import Check, CheckFailure, Validator, run_checks

__all__ = ["Check", "CheckFailure", "ItemValidator", "RuleSet", "Validator", "run_checks"]
