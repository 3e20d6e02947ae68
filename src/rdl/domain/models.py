from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional

MAX_QUANTITY = 999_999
MAX_PRICE = Decimal("999999999")


class DebtKind(str, Enum):
    CUSTOMER_DEBT = "customer_debt"
    SUPPLIER_DEBT = "supplier_debt"


class DebtStatus(str, Enum):
    PENDING = "pending"
    PARTIAL_PAID = "partial_paid"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    DebtStatus.PENDING: "Awaiting payment",
    DebtStatus.PARTIAL_PAID: "Partially paid",
    DebtStatus.COMPLETED: "Completed",
    DebtStatus.OVERDUE: "Overdue",
    DebtStatus.CANCELLED: "Cancelled",
}


class PaymentMethod(IntEnum):
    CASH = 1
    BANK_TRANSFER = 2
    CREDIT_CARD = 3


class TransactionType(IntEnum):
    PAYMENT = 1
    REFUND = 2


class TransactionStatus(IntEnum):
    PENDING = 1
    SUCCEEDED = 2
    FAILED = 3


@dataclass(frozen=True)
class DebtRecord:
    id: str
    code: str
    kind: DebtKind
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    status: DebtStatus
    due_date: Optional[date]
    payment_date: Optional[date]
    note: str
    counterparty_name: Optional[str]

    @property
    def is_closed(self) -> bool:
        return self.status in (DebtStatus.COMPLETED, DebtStatus.CANCELLED)


@dataclass(frozen=True)
class Product:
    id: str
    code: str
    product_name: str
    cost_price: Decimal
    selling_price: Decimal
    inventory: int
    product_code: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    """One product's quantity and price inside one collection period.

    ``original_quantity`` is the baseline recorded when the item was loaded
    (0 for items created in this session). ``dirty`` marks items added or
    edited since load; it is never cleared by reverting a value.
    """

    id: str
    receipt_id: str
    period_id: Optional[str]
    product_id: str
    product_code: Optional[str]
    product_name: str
    quantity: int
    original_quantity: int
    cost_price: Decimal
    selling_price: Decimal
    available_inventory: int
    discount: Decimal = Decimal("0")
    ship_now: bool = False
    returned_quantity: Optional[int] = None
    dirty: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_brand_new(self) -> bool:
        return self.original_quantity == 0

    @property
    def is_locked(self) -> bool:
        return (self.returned_quantity or 0) > 0

    @property
    def quantity_ceiling(self) -> int:
        if self.ship_now:
            return MAX_QUANTITY
        return min(self.available_inventory, MAX_QUANTITY)

    @property
    def effective_quantity(self) -> int:
        return max(0, self.quantity - (self.returned_quantity or 0))

    def edited(self, **changes) -> "LineItem":
        return replace(self, dirty=True, **changes)


@dataclass(frozen=True)
class DebtDetail:
    record: DebtRecord
    items_by_period: dict[str, list[LineItem]] = field(default_factory=dict)


@dataclass(frozen=True)
class SyncItem:
    product_id: str
    product_name: str
    product_code: Optional[str]
    quantity: int
    original_quantity: int
    price: Decimal
    period_id: Optional[str]
    ship_now: bool

    def to_payload(self) -> dict:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "productCode": self.product_code,
            "quantity": self.quantity,
            "originalQuantity": self.original_quantity,
            "price": _json_number(self.price),
            "periodId": self.period_id,
            "shipNow": self.ship_now,
        }


@dataclass(frozen=True)
class SyncRequest:
    due_date: date
    note: str
    items: tuple[SyncItem, ...]

    def to_payload(self) -> dict:
        return {
            "dueDate": self.due_date.isoformat(),
            "note": self.note,
            "items": [it.to_payload() for it in self.items],
        }


@dataclass(frozen=True)
class SubmitResult:
    success: bool
    message: Optional[str] = None


@dataclass(frozen=True)
class PaymentLine:
    amount: Decimal
    method: PaymentMethod = PaymentMethod.CASH
    type: TransactionType = TransactionType.PAYMENT
    note: Optional[str] = None

    def to_payload(self) -> dict:
        out = {
            "amount": _json_number(self.amount),
            "paymentMethod": int(self.method),
            "type": int(self.type),
        }
        if self.note:
            out["note"] = self.note
        return out


@dataclass(frozen=True)
class PaymentRequest:
    transactions: tuple[PaymentLine, ...]
    note: Optional[str] = None

    @property
    def amount(self) -> Decimal:
        return sum((t.amount for t in self.transactions if t.type is TransactionType.PAYMENT), Decimal("0"))

    def to_payload(self) -> dict:
        out: dict = {"transactions": [t.to_payload() for t in self.transactions]}
        if self.note:
            out["note"] = self.note
        return out


@dataclass(frozen=True)
class PaymentTransaction:
    """A payment already recorded against a debt on the server."""

    id: str
    code: str
    amount: Decimal
    description: str
    method: PaymentMethod
    status: TransactionStatus
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PeriodTotal:
    period: str
    quantity: int
    amount: Decimal


@dataclass(frozen=True)
class LedgerTotals:
    quantity: int
    amount: Decimal
    periods: tuple[PeriodTotal, ...]


def _json_number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)
