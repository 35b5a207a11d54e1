"""Domain errors raised by services and rendered by the API error handlers."""

from fastapi import status


class PizzeriaError(Exception):
    """Base class for errors that map to a client-visible response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PizzeriaError):
    """Unknown order, ingredient or user."""

    status_code = status.HTTP_404_NOT_FOUND


class BusinessRuleError(PizzeriaError):
    """Request is well-formed but not allowed in the current state."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidIngredientError(BusinessRuleError):
    """A selected ingredient does not exist or cannot be ordered."""


class InsufficientStockError(BusinessRuleError):
    """Requested quantity exceeds current stock at order creation."""


class PaymentVerificationError(PizzeriaError):
    """Gateway signature did not match."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(PizzeriaError):
    """Uniqueness or concurrent-update conflict."""

    status_code = status.HTTP_409_CONFLICT


class StockConflictError(ConflictError):
    """Stock ran out between checkout and payment capture."""


class PaymentGatewayError(PizzeriaError):
    """The payment gateway could not be reached or rejected the call."""

    status_code = status.HTTP_502_BAD_GATEWAY
