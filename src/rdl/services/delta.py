from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from rdl.domain.models import LedgerTotals, LineItem, PeriodTotal
from rdl.domain.periods import newest_first
from rdl.domain.store import LineItemStore

DEFAULT_CURRENCY_PLACES = 0


def round_money(value: Decimal, places: int = DEFAULT_CURRENCY_PLACES) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def dirty_items(store: LineItemStore, current: str) -> list[LineItem]:
    return [it for it in store.items_in(current) if it.dirty]


def incremental_amount_due(store: LineItemStore, current: str, places: int = DEFAULT_CURRENCY_PLACES) -> Decimal:
    """Value of the quantity pledged in this session only.

    The remote ledger appends this amount; it is not the period total.
    """
    total = sum(
        (it.selling_price * (it.quantity - it.original_quantity) for it in dirty_items(store, current)),
        Decimal("0"),
    )
    return round_money(total, places)


def period_totals(store: LineItemStore, places: int = DEFAULT_CURRENCY_PLACES) -> list[PeriodTotal]:
    out = []
    for key in newest_first(store.keys()):
        qty = 0
        amount = Decimal("0")
        for it in store.items_in(key):
            # returned units no longer count towards what is owed
            qty += it.effective_quantity
            amount += it.selling_price * it.effective_quantity
        out.append(PeriodTotal(period=key, quantity=qty, amount=round_money(amount, places)))
    return out


def ledger_totals(store: LineItemStore, places: int = DEFAULT_CURRENCY_PLACES) -> LedgerTotals:
    periods = period_totals(store, places)
    return LedgerTotals(
        quantity=sum(p.quantity for p in periods),
        amount=round_money(sum((p.amount for p in periods), Decimal("0")), places),
        periods=tuple(periods),
    )
