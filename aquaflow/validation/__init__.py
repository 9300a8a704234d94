"""UI-boundary validation."""

from aquaflow.validation.validator import (
    AREA_REQUIRED_MESSAGE,
    INVALID_AMOUNT_MESSAGE,
    CustomerValidator,
    ValidationFailedError,
    parse_sheet_value,
    validate_customer,
    validate_payment_amount,
    validate_sheet_value,
)

__all__ = [
    "AREA_REQUIRED_MESSAGE",
    "INVALID_AMOUNT_MESSAGE",
    "CustomerValidator",
    "ValidationFailedError",
    "parse_sheet_value",
    "validate_customer",
    "validate_payment_amount",
    "validate_sheet_value",
]
