from __future__ import annotations

from typing import Optional, Protocol

from rdl.domain.models import (
    DebtDetail,
    PaymentRequest,
    PaymentTransaction,
    Product,
    SubmitResult,
    SyncRequest,
)


class DebtRepository(Protocol):
    def fetch_debt_detail(self, debt_id: str) -> DebtDetail: ...
    def fetch_product(self, code_or_id: str) -> Product: ...
    def submit_period_update(self, debt_id: str, request: SyncRequest) -> SubmitResult: ...
    def pay_debt(self, debt_id: str, request: PaymentRequest) -> SubmitResult: ...
    def fetch_payment_transactions(self, debt_id: str) -> list[PaymentTransaction]: ...
    def cancel_debt(self, debt_id: str, note: Optional[str] = None) -> SubmitResult: ...
