from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, tzinfo
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional

from rdl.domain.errors import (
    ApiError,
    DebtClosed,
    InvalidPaymentAmount,
    LedgerStateError,
    MissingDueDate,
    PaymentExceedsRemaining,
    RemoteRejectedError,
)
from rdl.domain.models import (
    DebtRecord,
    LedgerTotals,
    LineItem,
    PaymentLine,
    PaymentMethod,
    PaymentRequest,
    PaymentTransaction,
    Product,
    SubmitResult,
)
from rdl.domain.periods import period_key
from rdl.domain.results import Result
from rdl.domain.store import LineItemStore, PeriodView
from rdl.repositories.contracts import DebtRepository
from rdl.services import delta, reconciliation
from rdl.services.payload import build_payload

log = logging.getLogger("rdl.ledger")


class LedgerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"
    ERROR = "error"


class LedgerService:
    """One open collection ledger: loads a debt, applies edits, submits the delta.

    Edits go through the reconciliation functions and replace the store on
    success. A successful submit reloads everything from the server, so
    local dirty markers never outlive it.

    The editable period is taken from the clock at load time and kept until
    the next load, so lines added before midnight are still submitted.
    """

    def __init__(
        self,
        repo: DebtRepository,
        clock: Callable[[], datetime] | None = None,
        tz: tzinfo | None = None,
        currency_places: int = delta.DEFAULT_CURRENCY_PLACES,
    ):
        self.repo = repo
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(tz))
        self.currency_places = currency_places

        self.state = LedgerState.IDLE
        self.debt_id: Optional[str] = None
        self.record: Optional[DebtRecord] = None
        self.store = LineItemStore()
        self.due_date: Optional[date] = None
        self.note = ""
        self.last_error: Optional[Exception] = None
        self._period: Optional[str] = None

    @property
    def current_period(self) -> str:
        """The editable period, fixed when the ledger was last loaded."""
        if self._period is None:
            return period_key(self.clock(), self.tz)
        return self._period

    def open(self, debt_id: str) -> None:
        if self.state is not LedgerState.IDLE:
            raise LedgerStateError(f"Ledger already opened (state={self.state.value}).")
        self.debt_id = str(debt_id)
        self._load()

    def reload(self) -> None:
        if self.debt_id is None:
            raise LedgerStateError("No ledger opened.")
        self._load()

    def _load(self) -> None:
        self.state = LedgerState.LOADING
        try:
            detail = self.repo.fetch_debt_detail(self.debt_id)
        except ApiError as e:
            self.state = LedgerState.ERROR
            self.last_error = e
            log.error("ledger_load_failed debt_id=%s error=%s", self.debt_id, e)
            raise

        items = {
            key: [replace(it, original_quantity=it.quantity, dirty=False) for it in period_items]
            for key, period_items in detail.items_by_period.items()
        }
        self.record = detail.record
        self.store = LineItemStore.from_periods(items)
        self.due_date = detail.record.due_date or self.clock().date()
        self.note = detail.record.note or ""
        self.last_error = None
        self._period = period_key(self.clock(), self.tz)
        self.state = LedgerState.READY
        log.info(
            "ledger_loaded debt_id=%s periods=%s items=%s",
            self.debt_id,
            len(self.store),
            sum(1 for _ in self.store.all_items()),
        )

    def _ensure_ready(self) -> None:
        if self.state is not LedgerState.READY:
            raise LedgerStateError(f"Ledger is not ready (state={self.state.value}).")

    def _apply(self, action: str, result: Result[LineItemStore]) -> Result[LineItemStore]:
        if result.ok:
            self.store = result.value
        else:
            log.info("ledger_edit_rejected debt_id=%s action=%s reason=%s", self.debt_id, action, type(result.error).__name__)
        return result

    # -- edits ---------------------------------------------------------

    def add_product(self, code_or_id: str) -> Result[LineItemStore]:
        """Look a product up by barcode or id and add one unit of it today."""
        self._ensure_ready()
        product = self.repo.fetch_product(code_or_id)
        return self.add_product_item(product)

    def add_product_item(self, product: Product) -> Result[LineItemStore]:
        self._ensure_ready()
        result = reconciliation.add_or_increment(
            self.store, product, self.current_period, self.clock(), receipt_id=self.debt_id or ""
        )
        return self._apply("add", result)

    def set_quantity(self, item_id: str, quantity: int) -> Result[LineItemStore]:
        self._ensure_ready()
        return self._apply("quantity", reconciliation.set_quantity(self.store, item_id, quantity, self.current_period))

    def set_price(self, item_id: str, price: Decimal) -> Result[LineItemStore]:
        self._ensure_ready()
        return self._apply("price", reconciliation.set_price(self.store, item_id, price, self.current_period))

    def set_ship_now(self, item_id: str, enabled: bool) -> Result[LineItemStore]:
        self._ensure_ready()
        return self._apply("ship_now", reconciliation.set_ship_now(self.store, item_id, enabled, self.current_period))

    def remove_item(self, item_id: str) -> Result[LineItemStore]:
        self._ensure_ready()
        return self._apply("remove", reconciliation.remove_item(self.store, item_id, self.current_period))

    def set_due_date(self, due_date: Optional[date]) -> None:
        self.due_date = due_date

    def set_note(self, note: Optional[str]) -> None:
        self.note = note or ""

    # -- derived values ------------------------------------------------

    def dirty_items(self) -> list[LineItem]:
        return delta.dirty_items(self.store, self.current_period)

    def incremental_amount_due(self) -> Decimal:
        return delta.incremental_amount_due(self.store, self.current_period, self.currency_places)

    def totals(self) -> LedgerTotals:
        return delta.ledger_totals(self.store, self.currency_places)

    def periods(self) -> list[PeriodView]:
        return self.store.ordered_periods(self.current_period)

    # -- submit --------------------------------------------------------

    def submit(self) -> Result[Optional[SubmitResult]]:
        """Send the current period's changes.

        Missing due date or no changes block the submit without any network
        call. Remote failures leave the edits in place and are re-raised.
        """
        self._ensure_ready()
        if self.due_date is None:
            return Result.failure(None, MissingDueDate())

        built = build_payload(self.store, self.current_period, self.due_date, self.note)
        if not built.ok:
            return Result.failure(None, built.error)
        request = built.value

        self.state = LedgerState.SUBMITTING
        amount = self.incremental_amount_due()
        try:
            outcome = self.repo.submit_period_update(self.debt_id, request)
            if not outcome.success:
                raise RemoteRejectedError(outcome.message or "Failed to update inventory for new period")
        except ApiError as e:
            self.state = LedgerState.READY
            self.last_error = e
            log.warning("ledger_submit_failed debt_id=%s items=%s error=%s", self.debt_id, len(request.items), e)
            raise

        log.info(
            "ledger_submitted debt_id=%s items=%s amount=%s due=%s",
            self.debt_id,
            len(request.items),
            amount,
            self.due_date.isoformat(),
        )
        self._load()
        return Result.success(outcome)

    # -- payments ------------------------------------------------------

    def pay(
        self,
        amount: Decimal,
        method: PaymentMethod = PaymentMethod.CASH,
        note: Optional[str] = None,
    ) -> Result[Optional[SubmitResult]]:
        """Record a payment against the debt and refresh the record.

        Line item edits are kept; only the record is refreshed.
        """
        self._ensure_ready()
        amount = Decimal(str(amount))
        if self.record.is_closed:
            return Result.failure(None, DebtClosed())
        if amount <= 0:
            return Result.failure(None, InvalidPaymentAmount())
        if amount > self.record.remaining_amount:
            return Result.failure(
                None, PaymentExceedsRemaining(f"Payment cannot exceed {self.record.remaining_amount}.")
            )

        request = PaymentRequest(transactions=(PaymentLine(amount=amount, method=method),), note=note)
        outcome = self._write("payment", lambda: self.repo.pay_debt(self.debt_id, request), "Payment failed")
        log.info("ledger_paid debt_id=%s amount=%s method=%s", self.debt_id, request.amount, method.name)
        self._refresh_record()
        return Result.success(outcome)

    def cancel(self, note: Optional[str] = None) -> Result[Optional[SubmitResult]]:
        self._ensure_ready()
        if self.record.is_closed:
            return Result.failure(None, DebtClosed())

        outcome = self._write(
            "cancel", lambda: self.repo.cancel_debt(self.debt_id, note), "Failed to cancel receipt debt"
        )
        log.info("ledger_cancelled debt_id=%s", self.debt_id)
        self._refresh_record()
        return Result.success(outcome)

    def payment_transactions(self) -> list[PaymentTransaction]:
        self._ensure_ready()
        return self.repo.fetch_payment_transactions(self.debt_id)

    def _write(self, action: str, call: Callable[[], SubmitResult], fallback: str) -> SubmitResult:
        self.state = LedgerState.SUBMITTING
        try:
            outcome = call()
            if not outcome.success:
                raise RemoteRejectedError(outcome.message or fallback)
        except ApiError as e:
            self.last_error = e
            log.warning("ledger_%s_failed debt_id=%s error=%s", action, self.debt_id, e)
            raise
        finally:
            self.state = LedgerState.READY
        return outcome

    def _refresh_record(self) -> None:
        try:
            detail = self.repo.fetch_debt_detail(self.debt_id)
        except ApiError as e:
            self.last_error = e
            log.warning("ledger_refresh_failed debt_id=%s error=%s", self.debt_id, e)
            raise
        self.record = detail.record
