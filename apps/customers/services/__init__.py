"""
Customers app services layer.

Customer records are thin CRUD; the one piece of shared business logic is
``record_order_placed``, which order creation calls inside its transaction.
"""

from .exceptions import (
    CustomerServiceError,
    CustomerNotFoundError,
    DuplicatePhoneError,
    CustomerHasOrdersError,
)

from .customer_management import (
    get_customer,
    search_customers,
    upsert_customer,
    update_customer,
    delete_customer,
    record_order_placed,
    record_order_removed,
)


__all__ = [
    # Exceptions
    'CustomerServiceError',
    'CustomerNotFoundError',
    'DuplicatePhoneError',
    'CustomerHasOrdersError',

    # Customer management
    'get_customer',
    'search_customers',
    'upsert_customer',
    'update_customer',
    'delete_customer',
    'record_order_placed',
    'record_order_removed',
]
