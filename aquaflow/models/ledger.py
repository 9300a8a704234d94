"""
Core Data Models for AquaFlow

These models define the schemas for everything stored in, or derived
from, the key-value store:

- Persisted records: Customer, Area, Transaction, AppSettings
- Write payloads: TransactionPatch
- Derived values: CustomerStats, StatementRow, MonthStatement, SupplyChartRow

Persisted JSON uses camelCase keys (``customerId``, ``rateJar``,
``nameHindi``...). Python code uses the snake_case field names; both are
accepted on input. Always serialize with ``to_record()`` so the stored
layout stays stable.
"""

from datetime import date
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

# Stored history may carry unpadded days or months ("2025-1-5")
STORED_DATE_PATTERN = r"^\d{4}-\d{1,2}-\d{1,2}$"

# Fields a transaction carries besides its identity and key
QUANTITY_FIELDS = (
    "jars_delivered",
    "jars_returned",
    "thermos_delivered",
    "thermos_returned",
    "payment_amount",
)


class LedgerModel(BaseModel):
    """Base for every record that round-trips through the store."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict with the persisted (camelCase) key names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class Customer(LedgerModel):
    """
    A billing subject.

    ``area`` is a denormalized copy of an Area's name, not a reference.
    Renaming an Area rewrites it in place; deleting an Area leaves it as
    an orphaned label.

    ``rate_jar`` / ``rate_thermos`` are always the *current* rates. Past
    deliveries are re-priced whenever a rate changes.
    """

    id: str = Field(
        default="",
        description="Formatted YYYYMM#### id, or a random id for legacy records"
    )
    name: str = Field(
        default="",
        description="Customer name"
    )
    name_hindi: Optional[str] = Field(
        default=None,
        description="Name in the secondary (Devanagari) script"
    )
    area: str = Field(
        default="",
        description="Delivery area name (denormalized)"
    )
    address: str = ""
    landmark: str = ""
    landmark_hindi: Optional[str] = None
    mobile: str = ""
    rate_jar: float = Field(
        default=0,
        ge=0,
        description="Price per jar delivered"
    )
    rate_thermos: float = Field(
        default=0,
        ge=0,
        description="Price per thermos delivered"
    )
    security_deposit: float = Field(default=0, ge=0)
    old_dues: float = Field(
        default=0,
        description="Opening balance carried over from a manual ledger"
    )
    start_date: Optional[date] = None

    @field_validator("start_date", mode="before")
    @classmethod
    def blank_start_date_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Area(LedgerModel):
    """A named delivery zone. Names are unique by convention only."""

    id: str = ""
    name: str = Field(
        default="New Area",
        description="Display name, copied onto customers"
    )


class Transaction(LedgerModel):
    """
    One day's delivery/payment record for one customer.

    CRITICAL: at most one Transaction exists per (customer_id, date).
    Writes go through ``TransactionRepository.upsert`` which merges into
    the existing record for the pair instead of inserting a duplicate.
    """

    id: str = ""
    customer_id: str = Field(
        ...,
        min_length=1,
        description="Customer this record belongs to"
    )
    date: str = Field(
        ...,
        pattern=STORED_DATE_PATTERN,
        description="Calendar day as YYYY-MM-DD"
    )
    jars_delivered: int = Field(default=0, ge=0)
    jars_returned: int = Field(default=0, ge=0)
    thermos_delivered: int = Field(default=0, ge=0)
    thermos_returned: int = Field(default=0, ge=0)
    payment_amount: float = Field(default=0, ge=0)

    @property
    def key(self) -> tuple[str, str]:
        return self.customer_id, self.date

    @property
    def jar_movement(self) -> int:
        return self.jars_delivered - self.jars_returned

    @property
    def thermos_movement(self) -> int:
        return self.thermos_delivered - self.thermos_returned


class TransactionPatch(LedgerModel):
    """
    Partial write for a (customer_id, date) pair.

    Only the fields that were explicitly set are merged into an existing
    transaction; unset fields keep their stored value. On create, unset
    quantities default to zero.
    """

    customer_id: str = Field(..., min_length=1)
    date: str = Field(..., pattern=ISO_DATE_PATTERN)
    jars_delivered: Optional[int] = Field(default=None, ge=0)
    jars_returned: Optional[int] = Field(default=None, ge=0)
    thermos_delivered: Optional[int] = Field(default=None, ge=0)
    thermos_returned: Optional[int] = Field(default=None, ge=0)
    payment_amount: Optional[float] = Field(default=None, ge=0)

    def supplied_fields(self) -> dict[str, Any]:
        """Quantity fields the caller actually supplied."""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if name in QUANTITY_FIELDS and value is not None
        }

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionPatch":
        """Patch that overwrites every quantity of the pair."""
        return cls(
            customer_id=transaction.customer_id,
            date=transaction.date,
            **{name: getattr(transaction, name) for name in QUANTITY_FIELDS},
        )


class AppSettings(LedgerModel):
    """
    Company details printed on bills and supply sheets.

    A single record, overwritten wholesale on save. Loaded per operation
    and passed explicitly to whatever renders it.
    """

    company_name: str = "AquaFlow Services"
    company_address: str = "Main Market, City"
    company_mobile: str = ""
    bill_footer_note: str = "Thank you for your business!"
    storage_path: Optional[str] = Field(
        default=None,
        description="Where the operator keeps backups (display hint only)"
    )


# =============================================================================
# DERIVED VALUES (never persisted)
# =============================================================================

class CustomerStats(LedgerModel):
    """
    Running balances derived from the transaction log.

    Serialized names match the dashboard contract:
    ``currentJarBalance``, ``currentThermosBalance``, ``totalDue``.
    """

    current_jar_balance: int = 0
    current_thermos_balance: int = 0
    total_due: float = 0

    @classmethod
    def zero(cls) -> "CustomerStats":
        return cls()


class StatementRow(LedgerModel):
    """One calendar day on a monthly bill."""

    date: str
    jars: int = 0
    thermos: int = 0
    rate_jar: float = 0
    rate_thermos: float = 0
    amount: float = 0
    paid: float = 0

    @property
    def is_blank(self) -> bool:
        """Days without deliveries or payments are rendered empty."""
        return not (self.jars or self.thermos or self.amount or self.paid)


class MonthStatement(LedgerModel):
    """Monthly bill for one customer: a row for every day of the month."""

    customer: Customer
    year: int
    month: int = Field(..., ge=1, le=12, description="Calendar month, 1-12")
    rows: list[StatementRow] = Field(default_factory=list)
    total_amount: float = 0
    total_paid: float = 0
    total_jars: int = 0
    total_thermos: int = 0

    @property
    def net_due(self) -> float:
        return self.total_amount - self.total_paid


class SupplyChartRow(LedgerModel):
    """A customer line on the printable per-area daily supply chart."""

    customer: Customer
    transaction: Optional[Transaction] = None
    stats: CustomerStats = Field(default_factory=CustomerStats)


class ImportResult(BaseModel):
    """Outcome of a backup restore."""

    success: bool
    message: Optional[str] = None

    @field_validator("message")
    @classmethod
    def blank_message_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None
