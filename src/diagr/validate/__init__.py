"""Document validation."""

from diagr.validate.schema import ValidationResult, find_cycle, validate_document, validate_model

__all__ = ["ValidationResult", "find_cycle", "validate_document", "validate_model"]
