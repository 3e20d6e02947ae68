from .models import (
    DebtDetail,
    DebtKind,
    DebtRecord,
    DebtStatus,
    LineItem,
    PaymentLine,
    PaymentMethod,
    PaymentRequest,
    PaymentTransaction,
    Product,
    SyncItem,
    SyncRequest,
    SubmitResult,
    TransactionStatus,
    TransactionType,
)
from .results import Result
from .store import LineItemStore
from .errors import (
    ApiError,
    DebtClosed,
    InvalidPaymentAmount,
    ItemLocked,
    ItemNotFound,
    MissingDueDate,
    NegativePrice,
    NetworkError,
    NotFoundError,
    NothingToSubmit,
    PaymentExceedsRemaining,
    PeriodLocked,
    PriceOutOfRange,
    QuantityBelowBaseline,
    QuantityExceedsAvailable,
    QuantityOutOfRange,
    ValidationError,
)

__all__ = [
    "DebtDetail",
    "DebtKind",
    "DebtRecord",
    "DebtStatus",
    "LineItem",
    "PaymentLine",
    "PaymentMethod",
    "PaymentRequest",
    "PaymentTransaction",
    "Product",
    "SyncItem",
    "SyncRequest",
    "SubmitResult",
    "TransactionStatus",
    "TransactionType",
    "Result",
    "LineItemStore",
    "ApiError",
    "DebtClosed",
    "InvalidPaymentAmount",
    "ItemLocked",
    "ItemNotFound",
    "MissingDueDate",
    "NegativePrice",
    "NetworkError",
    "NotFoundError",
    "NothingToSubmit",
    "PaymentExceedsRemaining",
    "PeriodLocked",
    "PriceOutOfRange",
    "QuantityBelowBaseline",
    "QuantityExceedsAvailable",
    "QuantityOutOfRange",
    "ValidationError",
]
