import sys
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

TODAY = "2024-06-15"
YESTERDAY = "2024-06-14"
NOW = datetime(2024, 6, 15, 10, 30)


def make_item(item_id: str = "item-1", **overrides):
    from rdl.domain.models import LineItem

    fields = dict(
        id=item_id,
        receipt_id="debt-1",
        period_id="period-1",
        product_id=f"prod-{item_id}",
        product_code="8930001",
        product_name="Sua tuoi",
        quantity=10,
        original_quantity=10,
        cost_price=Decimal("1000"),
        selling_price=Decimal("1000"),
        available_inventory=20,
    )
    fields.update(overrides)
    return LineItem(**fields)


def make_product(product_id: str = "prod-new", inventory: int = 5, price: str = "2500"):
    from rdl.domain.models import Product

    return Product(
        id=product_id,
        code=f"SP-{product_id}",
        product_name="Banh mi",
        cost_price=Decimal(price),
        selling_price=Decimal(price),
        inventory=inventory,
        product_code="8930002",
    )


def make_record(**overrides):
    from rdl.domain.models import DebtKind, DebtRecord, DebtStatus

    fields = dict(
        id="debt-1",
        code="PT-0001",
        kind=DebtKind.CUSTOMER_DEBT,
        total_amount=Decimal("10000"),
        paid_amount=Decimal("0"),
        remaining_amount=Decimal("10000"),
        status=DebtStatus.PENDING,
        due_date=date(2024, 6, 30),
        payment_date=None,
        note="",
        counterparty_name="Co Lan",
    )
    fields.update(overrides)
    return DebtRecord(**fields)


class FakeDebtRepository:
    """In-memory stand-in for the remote receipt-debt API."""

    def __init__(self, record=None, items_by_period=None, products=None):
        self.record = record or make_record()
        self.items_by_period = items_by_period if items_by_period is not None else {}
        self.products = products or {}
        self.fetch_calls = 0
        self.submitted = []
        self.fail_fetch = None
        self.fail_submit = None
        self.submit_result = None
        self.payments = []
        self.cancellations = []
        self.transactions = []
        self.write_result = None

    def fetch_debt_detail(self, debt_id):
        from rdl.domain.errors import NotFoundError
        from rdl.domain.models import DebtDetail

        self.fetch_calls += 1
        if self.fail_fetch is not None:
            raise self.fail_fetch
        if debt_id != self.record.id:
            raise NotFoundError("Receipt debt not found.")
        return DebtDetail(
            record=self.record,
            items_by_period={k: list(v) for k, v in self.items_by_period.items()},
        )

    def fetch_product(self, code_or_id):
        from rdl.domain.errors import NotFoundError

        if code_or_id not in self.products:
            raise NotFoundError(f"Product not found: {code_or_id}")
        return self.products[code_or_id]

    def submit_period_update(self, debt_id, request):
        from rdl.domain.models import SubmitResult

        if self.fail_submit is not None:
            raise self.fail_submit
        self.submitted.append((debt_id, request))
        return self.submit_result or SubmitResult(success=True, message="ok")

    def pay_debt(self, debt_id, request):
        from rdl.domain.models import DebtStatus, SubmitResult

        if self.fail_submit is not None:
            raise self.fail_submit
        self.payments.append((debt_id, request))
        if self.write_result is not None:
            return self.write_result
        remaining = self.record.remaining_amount - request.amount
        self.record = replace(
            self.record,
            paid_amount=self.record.paid_amount + request.amount,
            remaining_amount=remaining,
            status=DebtStatus.COMPLETED if remaining <= 0 else DebtStatus.PARTIAL_PAID,
        )
        return SubmitResult(success=True, message="Paid")

    def fetch_payment_transactions(self, debt_id):
        return list(self.transactions)

    def cancel_debt(self, debt_id, note=None):
        from rdl.domain.models import DebtStatus, SubmitResult

        if self.fail_submit is not None:
            raise self.fail_submit
        self.cancellations.append((debt_id, note))
        if self.write_result is not None:
            return self.write_result
        self.record = replace(self.record, status=DebtStatus.CANCELLED)
        return SubmitResult(success=True, message="Cancelled")


class FakeResponse:
    def __init__(self, status_code=200, body=None, invalid_json=False):
        self.status_code = status_code
        self._body = body
        self._invalid = invalid_json

    def json(self):
        if self._invalid:
            raise ValueError("no json")
        return self._body


class FakeSession:
    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        self.calls.append((method, url, json, timeout))
        out = self.responses.pop(0)
        if isinstance(out, Exception):
            raise out
        return out
