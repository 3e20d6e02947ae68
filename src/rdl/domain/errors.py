class AppError(Exception):
    """Base app error."""


class ConfigError(AppError):
    pass


class ValidationError(AppError):
    """Business-rule violation. Returned inside a Result rather than raised."""

    default_message = "Invalid change."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class QuantityBelowBaseline(ValidationError):
    default_message = "Quantity cannot be lowered below what was already collected."


class QuantityExceedsAvailable(ValidationError):
    default_message = "Quantity exceeds available inventory."


class QuantityOutOfRange(ValidationError):
    default_message = "Quantity is out of range."


class ItemLocked(ValidationError):
    default_message = "Item has returned quantity and can no longer be edited."


class ItemNotFound(ValidationError):
    default_message = "Item not found."


class PeriodLocked(ValidationError):
    default_message = "Past collection periods cannot be changed."


class NegativePrice(ValidationError):
    default_message = "Price must be >= 0."


class PriceOutOfRange(ValidationError):
    default_message = "Price is out of range."


class NothingToSubmit(ValidationError):
    default_message = "Add at least one product to the new collection period."


class MissingDueDate(ValidationError):
    default_message = "Choose an expected collection date."


class InvalidPaymentAmount(ValidationError):
    default_message = "Payment amount must be greater than 0."


class PaymentExceedsRemaining(ValidationError):
    default_message = "Payment exceeds the remaining amount."


class DebtClosed(ValidationError):
    default_message = "Receipt debt is already completed or cancelled."


class ApiError(AppError):
    pass


class NetworkError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class AuthorizationError(ApiError):
    pass


class RemoteRejectedError(ApiError):
    pass


class LedgerStateError(AppError):
    pass
