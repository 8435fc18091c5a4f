"""
Domain exceptions for orders app.

Every order failure maps to one HTTP status and one stable ``code`` that
the till uses to decide what to show the cashier.
"""
from rest_framework.exceptions import APIException


class OrderServiceError(APIException):
    """Base exception for order service errors."""
    status_code = 400
    default_detail = 'Order request could not be processed.'
    default_code = 'order_error'


class MissingFieldError(OrderServiceError):
    """A required order field was not supplied."""
    default_detail = 'Missing required fields: customerId, items, total, paymentMethod'
    default_code = 'missing_field'


class InvalidPaymentMethodError(OrderServiceError):
    """Payment method is not one of CASH, CARD, ON_COLLECTION."""
    default_detail = 'Invalid payment method. Must be CASH, CARD, or ON_COLLECTION'
    default_code = 'invalid_payment_method'


class InvalidItemError(OrderServiceError):
    """An order item has an empty name, negative price or quantity below 1."""
    default_detail = 'Invalid order item.'
    default_code = 'invalid_item'


class TotalMismatchError(OrderServiceError):
    """Declared total differs from the sum of the items."""
    default_detail = "Order total doesn't match item prices."
    default_code = 'total_mismatch'


class InvalidStatusError(OrderServiceError):
    """Status value is not part of the lifecycle."""
    default_detail = 'Invalid status.'
    default_code = 'invalid_status'


class InvalidTransitionError(OrderServiceError):
    """Status change not allowed from the current state."""
    default_detail = 'Invalid status transition.'
    default_code = 'invalid_transition'


class InvalidDenominationError(OrderServiceError):
    """Tendered note or coin is not part of the configured currency."""
    default_detail = 'Unknown denomination.'
    default_code = 'invalid_denomination'


class InvalidTenderError(OrderServiceError):
    """Tendered quantity is negative or not a whole number."""
    default_detail = 'Tendered quantities must be whole numbers of zero or more.'
    default_code = 'invalid_tender'


class InsufficientTenderError(OrderServiceError):
    """Cash handed over does not cover the order total."""
    default_detail = 'Cash tendered does not cover the order total.'
    default_code = 'insufficient_tender'


class OrderNotFoundError(OrderServiceError):
    """Order does not exist."""
    status_code = 404
    default_detail = 'Order not found.'
    default_code = 'order_not_found'


class OrderNumberAllocationError(OrderServiceError):
    """Could not allocate a unique order number."""
    status_code = 409
    default_detail = 'Could not allocate an order number, please retry.'
    default_code = 'conflict'
