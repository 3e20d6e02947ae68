from __future__ import annotations

from datetime import date
from typing import Optional

from rdl.domain.errors import NothingToSubmit
from rdl.domain.models import LineItem, SyncItem, SyncRequest
from rdl.domain.results import Result
from rdl.domain.store import LineItemStore
from rdl.services.delta import dirty_items


def to_sync_item(item: LineItem) -> SyncItem:
    return SyncItem(
        product_id=item.product_id,
        product_name=item.product_name,
        product_code=item.product_code,
        quantity=item.quantity,
        original_quantity=item.original_quantity,
        price=item.selling_price,
        period_id=item.period_id,
        ship_now=item.ship_now,
    )


def build_payload(store: LineItemStore, current: str, due_date: date, note: str = "") -> Result[Optional[SyncRequest]]:
    items = dirty_items(store, current)
    if not items:
        return Result.failure(None, NothingToSubmit())
    return Result.success(
        SyncRequest(due_date=due_date, note=note or "", items=tuple(to_sync_item(it) for it in items))
    )
