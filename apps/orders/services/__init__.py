"""
Orders app services layer.

This module provides business logic for the order lifecycle, cash
settlement, order creation and reporting. Views call these functions
and never touch the models directly.

Services:
    - lifecycle: Status parsing, transitions and the processing board
    - payments: Cash tender calculation against configured denominations
    - order_management: Order creation gate, queries and maintenance
    - statistics: Dashboard aggregates
"""

from .exceptions import (
    OrderServiceError,
    MissingFieldError,
    InvalidPaymentMethodError,
    InvalidItemError,
    TotalMismatchError,
    InvalidStatusError,
    InvalidTransitionError,
    InvalidDenominationError,
    InvalidTenderError,
    InsufficientTenderError,
    OrderNotFoundError,
    OrderNumberAllocationError,
)

from .lifecycle import (
    normalize_status,
    next_status,
    can_transition,
    transition_order,
    advance_order,
    processing_board,
)

from .payments import (
    Currency,
    TenderResult,
    get_currency,
    tender,
)

from .order_management import (
    format_order_number,
    next_order_number,
    normalize_payment_method,
    create_order,
    get_order,
    list_orders,
    update_order_details,
    delete_order,
)

from .statistics import (
    period_starts,
    order_overview,
)


__all__ = [
    # Exceptions
    'OrderServiceError',
    'MissingFieldError',
    'InvalidPaymentMethodError',
    'InvalidItemError',
    'TotalMismatchError',
    'InvalidStatusError',
    'InvalidTransitionError',
    'InvalidDenominationError',
    'InvalidTenderError',
    'InsufficientTenderError',
    'OrderNotFoundError',
    'OrderNumberAllocationError',

    # Lifecycle
    'normalize_status',
    'next_status',
    'can_transition',
    'transition_order',
    'advance_order',
    'processing_board',

    # Payments
    'Currency',
    'TenderResult',
    'get_currency',
    'tender',

    # Order management
    'format_order_number',
    'next_order_number',
    'normalize_payment_method',
    'create_order',
    'get_order',
    'list_orders',
    'update_order_details',
    'delete_order',

    # Statistics
    'period_starts',
    'order_overview',
]
