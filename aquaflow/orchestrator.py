"""
Main Orchestrator for AquaFlow

This module ties the components together and defines the end-to-end
flows behind each screen:

1. Supply sheet (open day -> edit drafts -> save dirty rows -> reopen)
2. Payment collection (validate amount -> add to the day's payment)
3. Customers and areas (validate -> save, confirm -> delete)
4. Billing (monthly statement with company header)
5. Dashboard and analytics (reports, optional AI insight)
6. Backup (export, confirm -> restore) and company settings

The orchestrator enforces the boundaries:
- Nothing invalid reaches a repository; validation failures raise
  ``ValidationFailedError`` before any write
- Destructive operations raise ``ConfirmationRequiredError`` unless
  called with ``confirmed=True``
- Collaborator failures (Gemini, transliteration) never escape
"""

from datetime import date
from typing import NamedTuple, Optional, Union

from aquaflow.agents import BusinessInsightAgent
from aquaflow.config import StorageSettings, get_settings
from aquaflow.ledger import LedgerEngine, SupplySheet
from aquaflow.logger import get_logger
from aquaflow.models import (
    AppSettings,
    Area,
    Customer,
    CustomerStats,
    DashboardSummary,
    ImportResult,
    MonthStatement,
    PeriodSummary,
    RecentPayment,
    SupplyChartRow,
    Transaction,
    TransactionPatch,
    ValidationIssue,
    ValidationResult,
    ViewMode,
)
from aquaflow.queries import ReportExecutor
from aquaflow.queries.reports import ALL_AREAS
from aquaflow.repositories import Repositories, parse_reference_date
from aquaflow.services.backup import BackupService
from aquaflow.services.storage import (
    GoogleSheetsKeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from aquaflow.services.transliteration import (
    FormTransliterator,
    TrailingDebouncer,
    TransliterationClient,
)
from aquaflow.validation import (
    ValidationFailedError,
    validate_customer,
    validate_payment_amount,
    validate_sheet_value,
)


log = get_logger(__name__)

DEFAULT_RATE_JAR = 20
DEFAULT_RATE_THERMOS = 10
RECENT_PAYMENTS_LIMIT = 5
UNKNOWN_CUSTOMER = "Unknown"


class ConfirmationRequiredError(Exception):
    """A destructive operation was requested without explicit confirmation."""

    def __init__(self, action: str, message: str):
        self.action = action
        super().__init__(message)


def _require_confirmation(confirmed: bool, action: str, message: str) -> None:
    if not confirmed:
        raise ConfirmationRequiredError(action, message)


class SupplySheetFlow:
    """
    Daily supply sheet.

    Flow:
    1. Open a day -> snapshot originals, drafts and baseline stats
    2. Edit cells -> drafts change, projected balances update in memory
    3. Save -> every dirty row is upserted, then the sheet is reopened
       so the next baseline includes what was just written
    """

    def __init__(self, repos: Repositories, ledger: Optional[LedgerEngine] = None):
        self._repos = repos
        self._ledger = ledger or LedgerEngine(repos)

    def open(self, day: str, area: Optional[str] = None) -> SupplySheet:
        sheet = SupplySheet.open(
            day=day,
            customers=self._repos.customers.list(),
            day_transactions=self._ledger.transactions_on_date(day),
            baseline=self._ledger.compute_all_stats(),
            settings=self._repos.settings.load(),
        )
        if area is not None:
            sheet.select_area(area)
        return sheet

    def edit(
        self,
        sheet: SupplySheet,
        customer_id: str,
        field: str,
        raw: Union[str, int, float, None],
    ) -> Transaction:
        """
        Apply one cell edit typed by the operator. Empty text means 0.

        Raises:
            ValidationFailedError: text that is not a valid quantity
            KeyError: customer not on the sheet
        """
        result = validate_sheet_value(field, raw)
        if result.has_errors:
            raise ValidationFailedError(result)
        return sheet.edit(customer_id, field, result.value)

    def save(self, sheet: SupplySheet) -> SupplySheet:
        """Persist dirty rows and return a freshly opened sheet for the same day."""
        patches = sheet.dirty_patches()
        for patch in patches:
            self._repos.transactions.upsert(patch)
        log.info("supply_sheet_saved", day=sheet.day, rows=len(patches))
        return self.open(sheet.day, area=sheet.selected_area or None)

    def supply_chart(self, day: str, area: str) -> list[SupplyChartRow]:
        """Printable per-area sheet for ``day``."""
        return self._ledger.supply_chart(day, area)


class PaymentCollectionFlow:
    """Records payments received outside the daily supply round."""

    def __init__(self, repos: Repositories):
        self._repos = repos

    def collect_payment(
        self,
        customer_id: str,
        day: str,
        raw_amount: Union[str, int, float, None],
    ) -> Transaction:
        """
        Add a payment to whatever was already paid on ``day``.

        Raises:
            ValidationFailedError: no customer selected or amount not > 0
        """
        if not customer_id or self._repos.customers.get(customer_id) is None:
            raise ValidationFailedError(ValidationResult(issues=[ValidationIssue(
                field="customer_id",
                issue_type="missing",
                message="Please select a customer.",
            )]))

        result = validate_payment_amount(raw_amount)
        if result.has_errors:
            raise ValidationFailedError(result)

        existing = self._repos.transactions.find(customer_id, day)
        already_paid = existing.payment_amount if existing else 0
        saved = self._repos.transactions.upsert(TransactionPatch(
            customer_id=customer_id,
            date=day,
            payment_amount=already_paid + result.value,
        ))
        log.info("payment_collected", customer_id=customer_id, day=day, amount=result.value)
        return saved

    def recent_payments(self, limit: int = RECENT_PAYMENTS_LIMIT) -> list[RecentPayment]:
        """Latest payments first, named after their customer."""
        names = {c.id: c.name for c in self._repos.customers.list()}
        payments = sorted(
            (t for t in self._repos.transactions.list() if t.payment_amount > 0),
            key=lambda t: t.date,
            reverse=True,
        )
        return [
            RecentPayment(
                transaction_id=t.id,
                customer_id=t.customer_id,
                customer_name=names.get(t.customer_id, UNKNOWN_CUSTOMER),
                date=t.date,
                amount=t.payment_amount,
            )
            for t in payments[:limit]
        ]


class CustomerFlow:
    """Customer form, search and removal."""

    def __init__(
        self,
        repos: Repositories,
        ledger: Optional[LedgerEngine] = None,
        transliterator: Optional[FormTransliterator] = None,
    ):
        self._repos = repos
        self._ledger = ledger or LedgerEngine(repos)
        self.transliterator = transliterator

    def new_customer(self, start_date: Union[str, date, None] = None) -> Customer:
        """Blank form with the next id for the start date and default rates."""
        start = start_date or date.today()
        areas = self._repos.areas.list()
        return Customer(
            id=self._repos.customers.generate_next_id(start),
            rate_jar=DEFAULT_RATE_JAR,
            rate_thermos=DEFAULT_RATE_THERMOS,
            area=areas[0].name if areas else "",
            start_date=parse_reference_date(start),
        )

    def change_start_date(self, customer: Customer, start_date: Union[str, date]) -> Customer:
        """
        Move the start date on the form.

        The id is regenerated only for customers that are not stored yet.
        """
        is_new = self._repos.customers.get(customer.id) is None
        update = {"start_date": parse_reference_date(start_date)}
        if is_new:
            update["id"] = self._repos.customers.generate_next_id(start_date)
        return customer.model_copy(update=update)

    def save_customer(self, data: Union[Customer, dict]) -> Customer:
        """
        Validate and upsert.

        Raises:
            ValidationFailedError: missing name, area or id, or bad numbers
        """
        result = validate_customer(data)
        if result.has_errors:
            log.info("customer_rejected", errors=result.error_count)
            raise ValidationFailedError(result)
        return self._repos.customers.upsert(result.value)

    def delete_customer(self, customer_id: str, confirmed: bool = False) -> bool:
        """Remove the customer; their transactions stay as history."""
        _require_confirmation(
            confirmed,
            "delete_customer",
            "Deleting a customer cannot be undone. Their history is kept.",
        )
        return self._repos.customers.delete(customer_id)

    def get_stats(self, customer_id: str) -> CustomerStats:
        return self._ledger.compute_stats(customer_id)

    def search_customers(self, query: str = "", area: str = ALL_AREAS) -> list[Customer]:
        """
        Substring search over name (any case), mobile and id,
        optionally limited to one area.
        """
        needle = query.strip().casefold()
        matched = []
        for c in self._repos.customers.list():
            if area != ALL_AREAS and c.area != area:
                continue
            if needle and not (
                needle in c.name.casefold()
                or needle in c.mobile
                or needle in c.id.casefold()
            ):
                continue
            matched.append(c)
        return matched


class AreaFlow:
    """Delivery area management."""

    def __init__(self, repos: Repositories):
        self._repos = repos

    def list_areas(self) -> list[Area]:
        return self._repos.areas.list()

    def save_area(self, area_id: Optional[str] = None, name: Optional[str] = None) -> Area:
        """Create or rename an area. Renames cascade onto customers."""
        if name is not None and not name.strip():
            raise ValidationFailedError(ValidationResult(issues=[ValidationIssue(
                field="name",
                issue_type="missing",
                message="Area name is required.",
            )]))
        return self._repos.areas.upsert(area_id, name.strip() if name else None)

    def delete_area(self, area_id: str, confirmed: bool = False) -> bool:
        """Remove the area from the list; its customers keep the old label."""
        _require_confirmation(
            confirmed,
            "delete_area",
            "Customers in this area keep the old area name until updated.",
        )
        return self._repos.areas.delete(area_id)


class BillingFlow:
    """Monthly bills."""

    def __init__(self, repos: Repositories, ledger: Optional[LedgerEngine] = None):
        self._repos = repos
        self._ledger = ledger or LedgerEngine(repos)

    def monthly_statement(self, customer_id: str, year: int, month: int) -> Optional[MonthStatement]:
        """Bill for a calendar month (1-12); None for an unknown customer."""
        return self._ledger.month_statement(customer_id, year, month)

    def bill_header(self) -> AppSettings:
        """Company details printed above the bill."""
        return self._repos.settings.load()


class DashboardFlow:
    """Dashboard figures, period analytics and the AI insight."""

    def __init__(
        self,
        repos: Repositories,
        reports: Optional[ReportExecutor] = None,
        insight_agent: Optional[BusinessInsightAgent] = None,
    ):
        self._repos = repos
        self._reports = reports or ReportExecutor(repos)
        self._insight_agent = insight_agent

    def summary(self, today: Optional[date] = None) -> DashboardSummary:
        return self._reports.dashboard_summary(today or date.today())

    def period(
        self,
        view_mode: ViewMode,
        anchor: Optional[date] = None,
        area: str = ALL_AREAS,
    ) -> PeriodSummary:
        return self._reports.period_summary(view_mode, anchor or date.today(), area)

    async def generate_insight(self) -> str:
        """Written analysis from Gemini; always returns a readable string."""
        if self._insight_agent is None:
            self._insight_agent = BusinessInsightAgent()
        return await self._insight_agent.generate(
            self._repos.customers.list(),
            self._repos.transactions.list(),
        )


class BackupFlow:
    """Export and destructive restore."""

    def __init__(self, repos: Repositories, backup: Optional[BackupService] = None):
        self._backup = backup or BackupService(repos)

    def export_json(self) -> str:
        return self._backup.export_json()

    def restore(self, payload: Union[str, bytes, dict], confirmed: bool = False) -> ImportResult:
        """Overwrite every collection with ``payload``."""
        _require_confirmation(
            confirmed,
            "restore_backup",
            "Restoring replaces all current data. This cannot be undone.",
        )
        return self._backup.import_data(payload)


class SettingsFlow:
    """Company details shown on bills."""

    def __init__(self, repos: Repositories):
        self._repos = repos

    def load(self) -> AppSettings:
        return self._repos.settings.load()

    def save(self, settings: AppSettings) -> bool:
        return self._repos.settings.save(settings)


class AppComponents(NamedTuple):
    """Every flow, built over one shared set of repositories."""

    repos: Repositories
    supply_sheet: SupplySheetFlow
    payments: PaymentCollectionFlow
    customers: CustomerFlow
    areas: AreaFlow
    billing: BillingFlow
    dashboard: DashboardFlow
    backup: BackupFlow
    settings: SettingsFlow


def create_store(settings: Optional[StorageSettings] = None) -> KeyValueStore:
    """Key-value backend selected by ``AQUAFLOW_STORAGE_BACKEND``."""
    settings = settings or get_settings().storage
    if settings.backend == "memory":
        return InMemoryKeyValueStore()
    if settings.backend == "google_sheets":
        return GoogleSheetsKeyValueStore()
    return JsonFileKeyValueStore(settings.data_dir)


def create_app_components(
    store: Optional[KeyValueStore] = None,
    insight_agent: Optional[BusinessInsightAgent] = None,
    transliterator: Optional[FormTransliterator] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        store: Key-value backend. Built from configuration when omitted.
        insight_agent: Gemini agent. Created on first use when omitted.
        transliterator: Customer-form transliteration. Built from
            configuration when omitted.
    """
    storage_settings = get_settings().storage
    store = store or create_store(storage_settings)
    repos = Repositories(store, key_prefix=storage_settings.key_prefix)
    ledger = LedgerEngine(repos)

    if transliterator is None:
        translit_settings = get_settings().transliteration
        transliterator = FormTransliterator(
            TransliterationClient(translit_settings),
            TrailingDebouncer(translit_settings.debounce_seconds),
        )

    log.info(
        "app_components_created",
        backend=type(store).__name__,
        key_prefix=storage_settings.key_prefix,
    )

    return AppComponents(
        repos=repos,
        supply_sheet=SupplySheetFlow(repos, ledger),
        payments=PaymentCollectionFlow(repos),
        customers=CustomerFlow(repos, ledger, transliterator),
        areas=AreaFlow(repos),
        billing=BillingFlow(repos, ledger),
        dashboard=DashboardFlow(repos, ReportExecutor(repos, ledger), insight_agent),
        backup=BackupFlow(repos),
        settings=SettingsFlow(repos),
    )
