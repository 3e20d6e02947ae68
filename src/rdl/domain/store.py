from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional

from rdl.domain.models import LineItem
from rdl.domain.periods import newest_first


@dataclass(frozen=True)
class PeriodView:
    key: str
    items: tuple[LineItem, ...]
    mutable: bool


@dataclass(frozen=True)
class LineItemStore:
    """Immutable mapping of period key -> line items.

    Every change returns a new store; empty periods are never kept.
    """

    periods: Mapping[str, tuple[LineItem, ...]] = field(default_factory=dict)

    @classmethod
    def from_periods(cls, items_by_period: Mapping[str, list[LineItem]]) -> "LineItemStore":
        return cls({k: tuple(v) for k, v in items_by_period.items() if v})

    def __contains__(self, key: object) -> bool:
        return key in self.periods

    def __len__(self) -> int:
        return len(self.periods)

    def keys(self) -> list[str]:
        return list(self.periods)

    def items_in(self, key: str) -> tuple[LineItem, ...]:
        return self.periods.get(key, ())

    def all_items(self) -> Iterator[tuple[str, LineItem]]:
        for key in newest_first(self.periods):
            for item in self.periods[key]:
                yield key, item

    def locate(self, item_id: str) -> Optional[tuple[str, int, LineItem]]:
        for key, items in self.periods.items():
            for idx, item in enumerate(items):
                if item.id == item_id:
                    return key, idx, item
        return None

    def find_product(self, key: str, product_id: str) -> Optional[LineItem]:
        for item in self.items_in(key):
            if item.product_id == product_id:
                return item
        return None

    def ordered_periods(self, current: Optional[str] = None) -> list[PeriodView]:
        return [PeriodView(k, self.periods[k], k == current) for k in newest_first(self.periods)]

    def replace_item(self, key: str, index: int, item: LineItem) -> "LineItemStore":
        items = list(self.periods[key])
        items[index] = item
        return self._with_period(key, tuple(items))

    def append_item(self, key: str, item: LineItem) -> "LineItemStore":
        return self._with_period(key, self.items_in(key) + (item,))

    def remove_item(self, key: str, index: int) -> "LineItemStore":
        items = self.periods[key]
        return self._with_period(key, items[:index] + items[index + 1:])

    def _with_period(self, key: str, items: tuple[LineItem, ...]) -> "LineItemStore":
        periods = dict(self.periods)
        if items:
            periods[key] = items
        else:
            periods.pop(key, None)
        return LineItemStore(periods)
