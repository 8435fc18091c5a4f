"""
Domain exceptions for customers app.

Each exception carries its HTTP status so views can let them propagate
to the project exception handler.
"""
from rest_framework.exceptions import APIException


class CustomerServiceError(APIException):
    """Base exception for customer service errors."""
    status_code = 400
    default_detail = 'Customer request could not be processed.'
    default_code = 'customer_error'


class CustomerNotFoundError(CustomerServiceError):
    """Customer does not exist."""
    status_code = 404
    default_detail = 'Customer not found.'
    default_code = 'customer_not_found'


class DuplicatePhoneError(CustomerServiceError):
    """Another customer already uses this phone number."""
    status_code = 409
    default_detail = 'Phone number already exists for another customer.'
    default_code = 'conflict'


class CustomerHasOrdersError(CustomerServiceError):
    """Customer cannot be deleted while orders reference it."""
    status_code = 400
    default_detail = 'Cannot delete customer with existing orders. Consider archiving instead.'
    default_code = 'customer_has_orders'
