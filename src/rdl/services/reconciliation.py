from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from rdl.domain.errors import (
    ItemLocked,
    ItemNotFound,
    NegativePrice,
    PeriodLocked,
    PriceOutOfRange,
    QuantityBelowBaseline,
    QuantityExceedsAvailable,
    QuantityOutOfRange,
)
from rdl.domain.models import MAX_PRICE, MAX_QUANTITY, LineItem, Product
from rdl.domain.periods import is_mutable
from rdl.domain.results import Result
from rdl.domain.store import LineItemStore

StoreResult = Result[LineItemStore]


def add_or_increment(
    store: LineItemStore,
    product: Product,
    current: str,
    now: datetime,
    receipt_id: str = "",
) -> StoreResult:
    """Add one unit of ``product`` to the current period.

    An existing line for the product is incremented; otherwise a new line is
    created with ship-now switched on when there is no stock to draw from.
    """
    existing = store.find_product(current, product.id)
    if existing is not None:
        return set_quantity(store, existing.id, existing.quantity + 1, current)

    inventory = max(int(product.inventory), 0)
    item = LineItem(
        id=uuid.uuid4().hex,
        receipt_id=receipt_id,
        period_id=None,
        product_id=product.id,
        product_code=product.product_code or product.code,
        product_name=product.product_name,
        quantity=1,
        original_quantity=0,
        cost_price=product.cost_price,
        selling_price=product.selling_price,
        available_inventory=inventory,
        ship_now=int(product.inventory) <= 0,
        dirty=True,
        created_at=now,
        updated_at=now,
    )
    return Result.success(store.append_item(current, item))


def set_quantity(store: LineItemStore, item_id: str, new_quantity: int, current: str) -> StoreResult:
    found = store.locate(item_id)
    if found is None:
        return Result.failure(store, ItemNotFound())
    key, idx, item = found

    if not is_mutable(key, current):
        return Result.failure(store, QuantityBelowBaseline("Quantities of past collection periods cannot be changed."))
    if item.is_locked:
        return Result.failure(store, ItemLocked())
    if new_quantity < item.original_quantity and not item.is_brand_new:
        return Result.failure(
            store, QuantityBelowBaseline(f"Quantity cannot be lower than {item.original_quantity}.")
        )
    if not item.ship_now and new_quantity > item.available_inventory:
        return Result.failure(
            store, QuantityExceedsAvailable(f"Only {item.available_inventory} in stock. Enable ship now to exceed it.")
        )
    if new_quantity < 0 or new_quantity > MAX_QUANTITY:
        return Result.failure(store, QuantityOutOfRange(f"Quantity must be between 0 and {MAX_QUANTITY:,}."))

    if new_quantity == 0 and item.is_brand_new:
        return Result.success(store.remove_item(key, idx))
    return Result.success(store.replace_item(key, idx, item.edited(quantity=new_quantity)))


def set_price(store: LineItemStore, item_id: str, new_price: Decimal, current: str) -> StoreResult:
    found = store.locate(item_id)
    if found is None:
        return Result.failure(store, ItemNotFound())
    key, idx, item = found

    if not is_mutable(key, current):
        return Result.failure(store, PeriodLocked("Prices of past collection periods cannot be changed."))
    if item.is_locked:
        return Result.failure(store, ItemLocked())

    price = Decimal(str(new_price))
    if price < 0:
        return Result.failure(store, NegativePrice())
    if price > MAX_PRICE:
        return Result.failure(store, PriceOutOfRange(f"Price cannot exceed {MAX_PRICE:,}."))

    # a collected line carries one customer-facing price
    return Result.success(store.replace_item(key, idx, item.edited(cost_price=price, selling_price=price)))


def set_ship_now(store: LineItemStore, item_id: str, enabled: bool, current: str) -> StoreResult:
    found = store.locate(item_id)
    if found is None:
        return Result.failure(store, ItemNotFound())
    key, idx, item = found

    if not is_mutable(key, current):
        return Result.failure(store, PeriodLocked())
    if item.is_locked:
        return Result.failure(store, ItemLocked())
    if item.ship_now == enabled:
        return Result.success(store)

    changes: dict = {"ship_now": enabled}
    if not enabled and item.quantity > item.available_inventory:
        changes["quantity"] = max(item.available_inventory, 0)
    return Result.success(store.replace_item(key, idx, item.edited(**changes)))


def remove_item(store: LineItemStore, item_id: str, current: str) -> StoreResult:
    found = store.locate(item_id)
    if found is None:
        return Result.failure(store, ItemNotFound())
    key, idx, item = found

    if not is_mutable(key, current):
        return Result.failure(store, PeriodLocked("Products of past collection periods cannot be removed."))
    if item.is_locked:
        return Result.failure(store, ItemLocked("Returned products cannot be removed."))
    return Result.success(store.remove_item(key, idx))
