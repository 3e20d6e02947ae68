from datetime import date, datetime
from decimal import Decimal

import pytest

from conftest import NOW, TODAY, YESTERDAY, FakeDebtRepository, make_item, make_product, make_record

from rdl.domain.errors import (
    DebtClosed,
    InvalidPaymentAmount,
    LedgerStateError,
    MissingDueDate,
    NetworkError,
    NotFoundError,
    NothingToSubmit,
    PaymentExceedsRemaining,
    QuantityBelowBaseline,
    RemoteRejectedError,
)
from rdl.domain.models import DebtStatus, PaymentMethod, SubmitResult, TransactionType
from rdl.services.ledger_service import LedgerService, LedgerState


def _repo(**kwargs):
    items = {
        YESTERDAY: [make_item("H", quantity=7, original_quantity=0)],
        TODAY: [make_item("A", quantity=10, original_quantity=0, dirty=True)],
    }
    return FakeDebtRepository(items_by_period=items, products={"8930002": make_product(inventory=0)}, **kwargs)


def _open(repo=None):
    repo = repo or _repo()
    ledger = LedgerService(repo, clock=lambda: NOW)
    ledger.open("debt-1")
    return ledger, repo


def test_open_loads_record_and_resets_baselines():
    ledger, _repo_ = _open()

    assert ledger.state is LedgerState.READY
    assert ledger.current_period == TODAY
    assert ledger.record.code == "PT-0001"
    assert ledger.due_date == date(2024, 6, 30)
    for _key, item in ledger.store.all_items():
        assert item.dirty is False
        assert item.original_quantity == item.quantity
    assert ledger.dirty_items() == []


def test_open_defaults_due_date_to_today_when_record_has_none():
    repo = _repo(record=make_record(due_date=None, note="call first"))
    ledger, _ = _open(repo)

    assert ledger.due_date == date(2024, 6, 15)
    assert ledger.note == "call first"


def test_open_not_found_moves_to_error_and_reraises():
    repo = _repo()
    ledger = LedgerService(repo, clock=lambda: NOW)

    with pytest.raises(NotFoundError):
        ledger.open("other-debt")

    assert ledger.state is LedgerState.ERROR
    assert isinstance(ledger.last_error, NotFoundError)
    with pytest.raises(LedgerStateError):
        ledger.set_quantity("A", 11)


def test_edits_replace_store_and_failures_leave_it():
    ledger, _ = _open()

    ok = ledger.set_quantity("A", 13)
    assert ok.ok
    assert ledger.incremental_amount_due() == Decimal("3000")

    before = ledger.store
    rejected = ledger.set_quantity("A", 5)
    assert isinstance(rejected.error, QuantityBelowBaseline)
    assert ledger.store is before
    assert ledger.state is LedgerState.READY


def test_add_product_by_barcode_uses_lookup_and_auto_ship_now():
    ledger, _ = _open()

    result = ledger.add_product("8930002")

    assert result.ok
    new_items = [it for it in ledger.store.items_in(TODAY) if it.product_id == "prod-new"]
    assert len(new_items) == 1
    assert new_items[0].ship_now is True
    assert new_items[0].receipt_id == "debt-1"
    assert ledger.set_quantity(new_items[0].id, 50).ok


def test_add_product_unknown_barcode_propagates_not_found():
    ledger, _ = _open()
    with pytest.raises(NotFoundError):
        ledger.add_product("0000")
    assert ledger.state is LedgerState.READY


def test_submit_without_due_date_blocks_without_network_call():
    ledger, repo = _open()
    ledger.set_quantity("A", 12)
    ledger.set_due_date(None)

    result = ledger.submit()

    assert isinstance(result.error, MissingDueDate)
    assert ledger.state is LedgerState.READY
    assert repo.submitted == []


def test_submit_without_changes_is_nothing_to_submit():
    ledger, repo = _open()

    result = ledger.submit()

    assert isinstance(result.error, NothingToSubmit)
    assert repo.submitted == []


def test_submit_sends_delta_and_reloads():
    ledger, repo = _open()
    ledger.set_quantity("A", 12)
    ledger.set_note("second visit")
    ledger.set_due_date(date(2024, 7, 1))

    result = ledger.submit()

    assert result.ok
    assert result.value.success is True
    assert ledger.state is LedgerState.READY
    assert repo.fetch_calls == 2
    debt_id, request = repo.submitted[0]
    assert debt_id == "debt-1"
    assert request.note == "second visit"
    assert [(it.product_id, it.quantity, it.original_quantity) for it in request.items] == [("prod-A", 12, 10)]
    # reload discards local changes
    assert ledger.dirty_items() == []


def test_submit_network_failure_keeps_edits_for_retry():
    ledger, repo = _open()
    ledger.set_quantity("A", 12)
    repo.fail_submit = NetworkError("timeout")

    with pytest.raises(NetworkError):
        ledger.submit()

    assert ledger.state is LedgerState.READY
    assert isinstance(ledger.last_error, NetworkError)
    assert [it.id for it in ledger.dirty_items()] == ["A"]

    repo.fail_submit = None
    assert ledger.submit().ok


def test_submit_rejected_by_server_is_raised():
    ledger, repo = _open()
    ledger.set_quantity("A", 12)
    repo.submit_result = SubmitResult(success=False, message="Receipt already completed")

    with pytest.raises(RemoteRejectedError, match="already completed"):
        ledger.submit()

    assert ledger.state is LedgerState.READY
    assert len(ledger.dirty_items()) == 1


def test_reload_failure_after_submit_moves_to_error():
    ledger, repo = _open()
    ledger.set_quantity("A", 12)

    original_submit = repo.submit_period_update

    def submit_then_break(debt_id, request):
        out = original_submit(debt_id, request)
        repo.fail_fetch = NetworkError("offline")
        return out

    repo.submit_period_update = submit_then_break

    with pytest.raises(NetworkError):
        ledger.submit()
    assert ledger.state is LedgerState.ERROR


def test_periods_and_totals_for_display():
    ledger, _ = _open()

    views = ledger.periods()
    assert [v.key for v in views] == [TODAY, YESTERDAY]
    assert views[0].mutable and not views[1].mutable

    totals = ledger.totals()
    assert totals.quantity == 17
    assert totals.amount == Decimal("17000")


def test_open_twice_is_rejected():
    ledger, _ = _open()
    with pytest.raises(LedgerStateError):
        ledger.open("debt-1")


def test_editable_period_stays_fixed_across_midnight():
    now = [NOW]
    ledger = LedgerService(_repo(), clock=lambda: now[0])
    ledger.open("debt-1")
    ledger.set_quantity("A", 12)

    now[0] = datetime(2024, 6, 16, 0, 5)

    assert ledger.current_period == TODAY
    assert [it.id for it in ledger.dirty_items()] == ["A"]
    assert ledger.incremental_amount_due() == Decimal("2000")
    assert ledger.submit().ok
    # the reload after submit moves to the new day
    assert ledger.current_period == "2024-06-16"


def test_pay_refreshes_record_and_keeps_edits():
    ledger, repo = _open()
    ledger.set_quantity("A", 12)

    result = ledger.pay(Decimal("4000"), PaymentMethod.BANK_TRANSFER, note="transfer")

    assert result.ok
    debt_id, request = repo.payments[0]
    assert debt_id == "debt-1"
    assert request.note == "transfer"
    (line,) = request.transactions
    assert (line.amount, line.method, line.type) == (Decimal("4000"), PaymentMethod.BANK_TRANSFER, TransactionType.PAYMENT)
    assert ledger.record.remaining_amount == Decimal("6000")
    assert ledger.record.status is DebtStatus.PARTIAL_PAID
    assert [it.id for it in ledger.dirty_items()] == ["A"]
    assert ledger.state is LedgerState.READY


@pytest.mark.parametrize(
    "amount, error",
    [(Decimal("0"), InvalidPaymentAmount), (Decimal("-5"), InvalidPaymentAmount), (Decimal("10001"), PaymentExceedsRemaining)],
)
def test_pay_rejects_bad_amounts_without_network_call(amount, error):
    ledger, repo = _open()

    result = ledger.pay(amount)

    assert isinstance(result.error, error)
    assert repo.payments == []


def test_pay_rejected_by_server_is_raised():
    ledger, repo = _open()
    repo.write_result = SubmitResult(success=False)

    with pytest.raises(RemoteRejectedError, match="Payment failed"):
        ledger.pay(Decimal("1000"))

    assert ledger.state is LedgerState.READY
    assert ledger.record.remaining_amount == Decimal("10000")


def test_cancel_refreshes_record_and_blocks_further_payments():
    ledger, repo = _open()

    assert ledger.cancel(note="customer moved").ok

    assert repo.cancellations == [("debt-1", "customer moved")]
    assert ledger.record.status is DebtStatus.CANCELLED
    assert isinstance(ledger.pay(Decimal("1000")).error, DebtClosed)
    assert isinstance(ledger.cancel().error, DebtClosed)
    assert len(repo.payments) == 0


def test_payment_transactions_are_listed_from_repository():
    ledger, repo = _open()
    repo.transactions = ["tx-1"]

    assert ledger.payment_transactions() == ["tx-1"]
