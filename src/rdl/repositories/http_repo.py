from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from urllib.parse import quote

import requests

from rdl.config import ApiSettings
from rdl.domain.errors import ApiError, AuthorizationError, NetworkError, NotFoundError, RemoteRejectedError
from rdl.domain.models import (
    DebtDetail,
    DebtKind,
    DebtRecord,
    DebtStatus,
    LineItem,
    PaymentMethod,
    PaymentRequest,
    PaymentTransaction,
    Product,
    SubmitResult,
    SyncRequest,
    TransactionStatus,
)
from rdl.domain.periods import parse_timestamp, period_key

log = logging.getLogger("rdl.api")

DEBT_PREFIX = "receipt-debt"


class HttpDebtRepository:
    """Remote receipt-debt API.

    Every response is wrapped as ``{statusCode, success, message, data}``.
    """

    def __init__(self, settings: ApiSettings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
        if settings.token:
            self.session.headers["Authorization"] = f"Bearer {settings.token}"
        self.tz = settings.tzinfo

    def _url(self, path: str) -> str:
        return f"{self.settings.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, payload: dict | None = None) -> dict:
        url = self._url(path)
        try:
            r = self.session.request(method, url, json=payload, timeout=self.settings.timeout_seconds)
        except requests.RequestException as e:
            log.warning("api_request_failed method=%s path=%s error=%s", method, path, e)
            raise NetworkError(f"Could not reach the server: {e}") from e

        log.info("api_request method=%s path=%s status=%s", method, path, r.status_code)

        if r.status_code in (401, 403):
            raise AuthorizationError("Session expired or access denied.")
        if r.status_code == 404:
            raise NotFoundError(f"Not found: {path}")
        if r.status_code >= 500:
            raise NetworkError(f"Server error {r.status_code} for {path}")
        if r.status_code == 204:
            return {"statusCode": 204, "success": True, "data": None}

        try:
            body = r.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {path}") from e
        if not isinstance(body, dict):
            raise ApiError(f"Unexpected response shape from {path}")
        return body

    def fetch_debt_detail(self, debt_id: str) -> DebtDetail:
        body = self._request("GET", self._debt_path(debt_id))
        data = body.get("data") or {}
        receipt = data.get("receipt") if isinstance(data, dict) else None
        if not receipt:
            raise NotFoundError(body.get("message") or "Receipt debt not found.")

        record = self._parse_record(receipt)
        items_by_period: dict[str, list[LineItem]] = {}
        for raw_key, raw_items in (data.get("items") or {}).items():
            key = period_key(raw_key, self.tz)
            bucket = items_by_period.setdefault(key, [])
            bucket.extend(self._parse_item(it, record.id, key) for it in raw_items or [])
        return DebtDetail(record=record, items_by_period=items_by_period)

    def fetch_product(self, code_or_id: str) -> Product:
        code_or_id = (code_or_id or "").strip()
        if not code_or_id:
            raise NotFoundError("Product code is required.")
        body = self._request("GET", f"products/{quote(code_or_id, safe='')}")
        data = body.get("data")
        if not data:
            raise NotFoundError(body.get("message") or f"Product not found: {code_or_id}")
        return self._parse_product(data)

    def submit_period_update(self, debt_id: str, request: SyncRequest) -> SubmitResult:
        body = self._request("PATCH", f"{self._debt_path(debt_id)}/inventory/update", request.to_payload())
        return _outcome(body, "Failed to update inventory for new period")

    def pay_debt(self, debt_id: str, request: PaymentRequest) -> SubmitResult:
        body = self._request("POST", f"{self._debt_path(debt_id)}/payment", request.to_payload())
        return _outcome(body, "Payment failed")

    def fetch_payment_transactions(self, debt_id: str) -> list[PaymentTransaction]:
        body = self._request("GET", f"{self._debt_path(debt_id)}/payment")
        if not body.get("success"):
            raise RemoteRejectedError(body.get("message") or "Failed to fetch payment transactions")
        data = body.get("data") or {}
        raw = data.get("transactions") if isinstance(data, dict) else None
        return [self._parse_transaction(t) for t in raw or []]

    def cancel_debt(self, debt_id: str, note: Optional[str] = None) -> SubmitResult:
        payload = {"note": note} if note else {}
        body = self._request("PATCH", f"{self._debt_path(debt_id)}/cancel", payload)
        return _outcome(body, "Failed to cancel receipt debt")

    def _debt_path(self, debt_id: str) -> str:
        return f"{DEBT_PREFIX}/{quote(str(debt_id), safe='')}"

    def _parse_record(self, raw: dict) -> DebtRecord:
        try:
            kind = DebtKind(raw.get("type") or DebtKind.CUSTOMER_DEBT.value)
            status = DebtStatus(raw.get("status") or DebtStatus.PENDING.value)
            if kind is DebtKind.SUPPLIER_DEBT:
                counterparty = raw.get("supplierName") or raw.get("customerName")
            else:
                counterparty = raw.get("customerName") or raw.get("supplierName")
            return DebtRecord(
                id=str(raw["id"]),
                code=str(raw.get("code") or ""),
                kind=kind,
                total_amount=_money(raw.get("totalAmount")),
                paid_amount=_money(raw.get("paidAmount")),
                remaining_amount=_money(raw.get("remainingAmount")),
                status=status,
                due_date=_date(raw.get("dueDate"), self.tz),
                payment_date=_date(raw.get("paymentDate"), self.tz),
                note=raw.get("note") or "",
                counterparty_name=counterparty,
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            raise ApiError(f"Malformed receipt debt: {e}") from e

    def _parse_item(self, raw: dict, receipt_id: str, key: str) -> LineItem:
        try:
            quantity = int(raw.get("quantity") or 0)
            cost = _money(raw.get("costPrice"))
            selling = _money(raw["sellingPrice"]) if raw.get("sellingPrice") is not None else cost
            returned = raw.get("returnedQuantity")
            return LineItem(
                id=str(raw["id"]),
                receipt_id=str(raw.get("receiptId") or receipt_id),
                period_id=raw.get("periodId") or raw.get("receiptPeriodId"),
                product_id=str(raw["productId"]),
                product_code=_code(raw),
                product_name=raw.get("productName") or "",
                quantity=quantity,
                original_quantity=quantity,
                cost_price=cost,
                selling_price=selling,
                available_inventory=max(int(float(raw.get("inventory") or 0)), 0),
                discount=_money(raw.get("discount")),
                ship_now=bool(raw.get("shipNow", False)),
                returned_quantity=int(returned) if returned is not None else None,
                dirty=False,
                created_at=_timestamp(raw.get("createdAt")),
                updated_at=_timestamp(raw.get("updatedAt")),
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            raise ApiError(f"Malformed line item in period {key}: {e}") from e

    def _parse_product(self, raw: dict) -> Product:
        try:
            return Product(
                id=str(raw["id"]),
                code=str(raw.get("code") or ""),
                product_name=raw.get("productName") or "",
                cost_price=_money(raw.get("costPrice")),
                selling_price=_money(raw.get("sellingPrice") if raw.get("sellingPrice") is not None else raw.get("costPrice")),
                inventory=int(float(raw.get("inventory") or 0)),
                product_code=_code(raw),
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            raise ApiError(f"Malformed product: {e}") from e

    def _parse_transaction(self, raw: dict) -> PaymentTransaction:
        try:
            return PaymentTransaction(
                id=str(raw["id"]),
                code=str(raw.get("code") or ""),
                amount=_money(raw.get("amount")),
                description=raw.get("description") or "",
                method=PaymentMethod(int(raw.get("paymentMethod") or PaymentMethod.CASH)),
                status=TransactionStatus(int(raw.get("status") or TransactionStatus.PENDING)),
                processed_at=_timestamp(raw.get("processedAt")),
                created_at=_timestamp(raw.get("createdAt")),
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            raise ApiError(f"Malformed payment transaction: {e}") from e


def _money(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _outcome(body: dict, fallback: str) -> SubmitResult:
    success = bool(body.get("success"))
    message = body.get("message") or (None if success else fallback)
    return SubmitResult(success=success, message=message)


def _code(raw: dict) -> Optional[str]:
    value = raw.get("productCode")
    if value is None or value == "":
        value = raw.get("code")
    return str(value) if value not in (None, "") else None


def _timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return parse_timestamp(value)


def _date(value: Optional[str], tz: tzinfo) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(period_key(value, tz))
