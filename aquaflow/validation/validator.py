"""
Form Validation

Validation happens at the UI boundary, before anything reaches the
repositories or the ledger. Two stages, as for every form:

STAGE 1 - SCHEMA VALIDATION:
- Type and range checks from the pydantic model
- Leading and trailing whitespace trimmed from typed text
- Numeric parsing of raw text input

STAGE 2 - BUSINESS RULES:
- Required name and area
- A usable customer id
- Positive payment amounts

IMPORTANT: Validation NEVER silently fixes issues.
It reports them, and the flow aborts without writing.
"""

from typing import Any, Mapping, Union

from pydantic import ValidationError

from aquaflow.models import (
    QUANTITY_FIELDS,
    Customer,
    ValidationIssue,
    ValidationResult,
)


AREA_REQUIRED_MESSAGE = "Please select an Area."
INVALID_AMOUNT_MESSAGE = "Please enter a valid amount."

INTEGER_FIELDS = tuple(f for f in QUANTITY_FIELDS if f != "payment_amount")

# Free-text customer fields typed into the form
FORM_TEXT_FIELDS = (
    "name",
    "name_hindi",
    "area",
    "address",
    "landmark",
    "landmark_hindi",
    "mobile",
)


class ValidationFailedError(Exception):
    """Raised by flows when a form does not pass validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(result.first_message or "Validation failed")


def _issues_from_pydantic(error: ValidationError) -> list[ValidationIssue]:
    issues = []
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ())) or "record"
        issues.append(ValidationIssue(
            field=field,
            issue_type=item.get("type", "invalid"),
            message=item.get("msg", "Invalid value"),
        ))
    return issues


def _trim_form_text(customer: Customer) -> Customer:
    trimmed = {}
    for field in FORM_TEXT_FIELDS:
        value = getattr(customer, field)
        if isinstance(value, str) and value != value.strip():
            trimmed[field] = value.strip()
    return customer.model_copy(update=trimmed) if trimmed else customer


class CustomerValidator:
    """Validates a customer form before it is saved."""

    def _validate_schema(
        self,
        data: Union[Customer, Mapping[str, Any]],
    ) -> tuple[Union[Customer, None], list[ValidationIssue]]:
        """Stage 1: build the Customer model from trimmed form text."""
        try:
            customer = data if isinstance(data, Customer) else Customer.model_validate(dict(data))
        except ValidationError as e:
            return None, _issues_from_pydantic(e)
        return _trim_form_text(customer), []

    def _validate_rules(self, customer: Customer) -> list[ValidationIssue]:
        """Stage 2: required fields the schema allows to be blank."""
        issues = []

        if not customer.name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Customer name is required.",
            ))

        if not customer.area:
            issues.append(ValidationIssue(
                field="area",
                issue_type="missing",
                message=AREA_REQUIRED_MESSAGE,
                suggested_fix="Create an area first if the list is empty",
            ))

        if not customer.id:
            issues.append(ValidationIssue(
                field="id",
                issue_type="missing",
                message="Customer ID could not be generated. Check the start date.",
                suggested_fix="Enter a valid start date",
            ))

        if not customer.mobile:
            issues.append(ValidationIssue(
                field="mobile",
                issue_type="missing",
                message="No mobile number recorded.",
                severity="warning",
            ))

        return issues

    def validate(self, data: Union[Customer, Mapping[str, Any]]) -> ValidationResult:
        customer, issues = self._validate_schema(data)
        if customer is None:
            return ValidationResult(issues=issues)
        issues.extend(self._validate_rules(customer))
        return ValidationResult(issues=issues, value=customer)


def validate_customer(data: Union[Customer, Mapping[str, Any]]) -> ValidationResult:
    return CustomerValidator().validate(data)


def validate_payment_amount(raw: Union[str, int, float, None]) -> ValidationResult:
    """
    Parse a payment entry; it must be a number greater than zero.

    ``value`` holds the parsed float when valid.
    """
    try:
        amount = float(str(raw).strip()) if raw is not None else None
    except ValueError:
        amount = None

    if amount is None or amount != amount or amount <= 0:
        return ValidationResult(issues=[ValidationIssue(
            field="payment_amount",
            issue_type="invalid_value",
            message=INVALID_AMOUNT_MESSAGE,
        )])
    return ValidationResult(value=amount)


def parse_sheet_value(field: str, raw: Union[str, int, float, None]) -> Union[int, float]:
    """
    Convert a supply-sheet cell to a number. Empty text means 0.

    Raises:
        KeyError: not an editable sheet field
        ValueError: text that is not a number of the right kind
    """
    if field not in QUANTITY_FIELDS:
        raise KeyError(f"Not an editable field: {field}")

    if raw is None:
        return 0
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        value = raw
    else:
        text = str(raw).strip()
        if text == "":
            return 0
        value = float(text)

    if field in INTEGER_FIELDS:
        if float(value) != int(float(value)):
            raise ValueError(f"{field} must be a whole number")
        return int(float(value))
    return float(value)


def validate_sheet_value(field: str, raw: Union[str, int, float, None]) -> ValidationResult:
    """``parse_sheet_value`` with the failure reported as an issue."""
    try:
        value = parse_sheet_value(field, raw)
    except (KeyError, ValueError, OverflowError) as e:
        return ValidationResult(issues=[ValidationIssue(
            field=field,
            issue_type="invalid_format",
            message=str(e).strip("'"),
        )])

    if value < 0:
        return ValidationResult(issues=[ValidationIssue(
            field=field,
            issue_type="negative",
            message=f"{field} cannot be negative",
        )])
    return ValidationResult(value=value)
