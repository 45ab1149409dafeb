"""
Typed failures raised by the service layer.

Every error carries the HTTP status and the machine readable code that the
exception handlers put on the wire, so routes never translate them by hand.
"""
from fastapi import status


class ServiceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "service_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or self.code)

    @property
    def message(self) -> str:
        return str(self)


# ----------- Lookups -----------

class NotFoundError(ServiceError):
    """Requested record does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class MenuItemNotFound(NotFoundError):
    """Menu item not found."""


class OrderNotFound(NotFoundError):
    """Order not found."""


# ----------- Stock adjustment -----------

class AdjustmentError(ServiceError):
    code = "adjustment_error"


class MissingReason(AdjustmentError):
    """A reason is required for every stock adjustment."""
    code = "missing_reason"


class ZeroDelta(AdjustmentError):
    """Adjustment amount must not be zero."""
    code = "zero_delta"


class NegativeStock(AdjustmentError):
    """Stock quantity cannot be negative."""
    code = "negative_stock"


class ConcurrentModification(AdjustmentError):
    """Stock was changed by another session. Reload the item and try again."""
    status_code = status.HTTP_409_CONFLICT
    code = "concurrent_modification"


class PersistenceFailure(AdjustmentError):
    """The store rejected the stock update. Nothing was changed."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "persistence_failure"


class LedgerEntryImmutable(ServiceError):
    """Inventory log entries are append-only."""
    status_code = status.HTTP_409_CONFLICT
    code = "ledger_immutable"
