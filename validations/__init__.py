from .automation_validator import (
    UnknownRegistryTypeError,
    UnsupportedTriggerError,
    parse_and_validate_rule,
    validate_rule,
)

__all__ = ["UnknownRegistryTypeError", "UnsupportedTriggerError", "parse_and_validate_rule", "validate_rule"]
