"""
Order creation and maintenance service.

``create_order`` is the gate every new order goes through: it validates
the payload in a fixed order, settles cash, and then writes the order,
its items, its order number and the customer's statistics in one
transaction.
"""

import logging
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction, IntegrityError
from django.db.models import Case, IntegerField, QuerySet, Value, When

from apps.accounts.models import User
from apps.customers.models import Customer
from apps.customers.services import (
    CustomerNotFoundError,
    record_order_placed,
    record_order_removed,
)
from apps.orders.models import Order, OrderItem, OrderNumberSequence, OrderStatus, PaymentMethod

from .exceptions import (
    OrderServiceError,
    MissingFieldError,
    InvalidPaymentMethodError,
    InvalidItemError,
    TotalMismatchError,
    InvalidTenderError,
    InsufficientTenderError,
    OrderNotFoundError,
    OrderNumberAllocationError,
)
from .lifecycle import normalize_status
from .payments import tender

logger = logging.getLogger(__name__)

ORDER_NUMBER_SEQUENCE = 'order_number'
TOTAL_TOLERANCE = Decimal('0.01')
CENT = Decimal('0.01')

SORT_FIELDS = {
    'createdAt': 'created_at',
    'orderNumber': 'order_number',
    'total': 'total',
    'status': 'status_rank',
}

_UNSET = object()


# =============================================================================
# Order numbers
# =============================================================================

def format_order_number(value: int) -> str:
    prefix = settings.LAUNDRY_ORDER_NUMBER_PREFIX
    width = settings.LAUNDRY_ORDER_NUMBER_WIDTH
    return f'{prefix}-{value:0{width}d}'


def next_order_number() -> str:
    """
    Allocate the next order number, e.g. ``LOS-000042``.

    Must be called inside the transaction that inserts the order: the
    counter row stays locked until that transaction ends, and a rollback
    hands the number back.
    """
    sequence = (
        OrderNumberSequence.objects
        .select_for_update()
        .filter(name=ORDER_NUMBER_SEQUENCE)
        .first()
    )
    if sequence is None:
        OrderNumberSequence.objects.get_or_create(name=ORDER_NUMBER_SEQUENCE)
        sequence = OrderNumberSequence.objects.select_for_update().get(name=ORDER_NUMBER_SEQUENCE)

    value = sequence.last_value + 1
    # Skip numbers already taken by orders written outside the counter
    while Order.objects.filter(order_number=format_order_number(value)).exists():
        value += 1

    sequence.last_value = value
    sequence.save(update_fields=['last_value'])
    return format_order_number(value)


# =============================================================================
# Validation helpers
# =============================================================================

def normalize_payment_method(value) -> str:
    """
    Parse a payment method case-insensitively.

    Raises:
        InvalidPaymentMethodError: If not CASH, CARD or ON_COLLECTION
    """
    if isinstance(value, str):
        candidate = value.strip().upper().replace('-', '_').replace(' ', '_')
        if candidate in PaymentMethod.values:
            return candidate
    raise InvalidPaymentMethodError()


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_decimal(value) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def _clean_items(items):
    """Validate raw items and return ``(cleaned, items_total)``."""
    cleaned = []
    items_total = Decimal('0')

    for index, item in enumerate(items, start=1):
        if not isinstance(item, Mapping):
            raise InvalidItemError(f'Item {index} must be an object with name, price and quantity')

        name = item.get('name')
        if not isinstance(name, str) or not name.strip():
            raise InvalidItemError(f'Item {index}: name is required')

        price = _to_decimal(item.get('price'))
        if price is None or price < 0:
            raise InvalidItemError(f'Item {index} ({name.strip()}): price must be 0 or more')

        quantity = _to_decimal(item.get('quantity'))
        if quantity is None or quantity != quantity.to_integral_value() or quantity < 1:
            raise InvalidItemError(f'Item {index} ({name.strip()}): quantity must be at least 1')

        notes = item.get('notes')
        if notes is not None and not isinstance(notes, str):
            notes = str(notes)

        cleaned.append({
            'name': name.strip(),
            'price': price,
            'quantity': int(quantity),
            'notes': notes.strip() if notes and notes.strip() else None,
        })
        items_total += price * int(quantity)

    return cleaned, items_total


def _clean_stains(stains):
    if stains is None:
        return []
    if not isinstance(stains, (list, tuple)):
        raise OrderServiceError('Stains must be a list of strings')
    return [str(stain).strip() for stain in stains if str(stain).strip()]


def _settle_cash(total: Decimal, details):
    """
    Re-run the tender for a cash breakdown and return the stored JSON.

    Raises:
        InvalidTenderError: Breakdown is not an object
        InsufficientTenderError: Cash does not cover the total
    """
    if not isinstance(details, Mapping):
        raise InvalidTenderError('cashPaymentDetails must be an object with notes and coins')

    result = tender(total, details.get('notes'), details.get('coins'))
    if not result.sufficient:
        raise InsufficientTenderError(
            f'Cash tendered ({result.total_paid}) is {result.shortfall} short of the order total ({result.order_total})'
        )
    return result.as_payment_details()


def _load_order(order_id) -> Order:
    try:
        return (
            Order.objects
            .select_related('customer', 'user')
            .prefetch_related('items')
            .get(id=order_id)
        )
    except (Order.DoesNotExist, DjangoValidationError, ValueError):
        raise OrderNotFoundError()


# =============================================================================
# Creation
# =============================================================================

def create_order(
    *,
    user: Optional[User],
    customer_id,
    items,
    total,
    payment_method,
    cash_payment_details=None,
    is_express: bool = False,
    stains=None,
    max_retries: int = 3
) -> Order:
    """
    Validate and create an order.

    Checks run in this order and stop at the first failure: required
    fields, payment method, customer, each item, the total against the
    items, and for cash orders with a breakdown, the tender.

    Args:
        user: Staff member creating the order
        customer_id: Customer UUID
        items: List of ``{name, price, quantity, notes?}``
        total: Declared order total
        payment_method: CASH, CARD or ON_COLLECTION (any case)
        cash_payment_details: ``{notes, coins}`` breakdown for cash orders
        is_express: Express handling flag
        stains: Free-text stain notes
        max_retries: Attempts when an order number collides

    Returns:
        Created Order with customer, user and items loaded

    Raises:
        MissingFieldError: customerId, items, total or paymentMethod absent
        InvalidPaymentMethodError: Unknown payment method
        CustomerNotFoundError: Customer doesn't exist
        InvalidItemError: Empty name, negative price or quantity below 1
        TotalMismatchError: Items don't add up to total
        InsufficientTenderError: Cash breakdown doesn't cover total
    """
    if (
        _is_missing(customer_id)
        or not isinstance(items, (list, tuple))
        or not items
        or _is_missing(total)
        or _is_missing(payment_method)
    ):
        raise MissingFieldError()

    payment_method = normalize_payment_method(payment_method)

    try:
        customer = Customer.objects.get(id=customer_id)
    except (Customer.DoesNotExist, DjangoValidationError, ValueError):
        raise CustomerNotFoundError()

    cleaned_items, items_total = _clean_items(items)

    declared_total = _to_decimal(total)
    if declared_total is None or declared_total < 0:
        raise TotalMismatchError('Order total must be a number of 0 or more')
    if abs(items_total - declared_total) > TOTAL_TOLERANCE:
        raise TotalMismatchError(
            f"Order total ({declared_total}) doesn't match item prices ({items_total})"
        )
    declared_total = declared_total.quantize(CENT, rounding=ROUND_HALF_UP)

    payment_details = None
    if payment_method == PaymentMethod.CASH and cash_payment_details is not None:
        payment_details = _settle_cash(declared_total, cash_payment_details)

    stains = _clean_stains(stains)

    for attempt in range(max_retries):
        try:
            with transaction.atomic():
                order = Order.objects.create(
                    order_number=next_order_number(),
                    customer=customer,
                    user=user,
                    total=declared_total,
                    payment_method=payment_method,
                    cash_payment_details=payment_details,
                    is_express=bool(is_express),
                    stains=stains,
                    status=OrderStatus.TODO,
                )
                OrderItem.objects.bulk_create([
                    OrderItem(order=order, position=position, **item)
                    for position, item in enumerate(cleaned_items)
                ])
                record_order_placed(customer_id=customer.id, placed_at=order.created_at)
            break
        except IntegrityError:
            # Order number taken by a concurrent insert
            if attempt == max_retries - 1:
                logger.error('Order number allocation failed after %d attempts', max_retries)
                raise OrderNumberAllocationError()
            logger.warning('Order number collision, retrying (attempt %d)', attempt + 1)
            continue

    logger.info(
        'Created order %s for customer %s: %s %s',
        order.order_number, customer.id, order.total, payment_method
    )
    return _load_order(order.id)


# =============================================================================
# Queries
# =============================================================================

def get_order(*, order_id: UUID) -> Order:
    """
    Get an order with customer, user and items.

    Raises:
        OrderNotFoundError: If order doesn't exist
    """
    return _load_order(order_id)


def list_orders(
    *,
    status=None,
    customer_id=None,
    payment_method=None,
    is_express: Optional[bool] = None,
    sort_by: str = 'createdAt',
    sort_order: str = 'desc'
) -> QuerySet:
    """
    Orders filtered and sorted for the order list screen.

    ``sort_by`` is one of createdAt, orderNumber, total, status; status
    sorts in lifecycle order rather than alphabetically.

    Raises:
        InvalidStatusError: Unknown status filter
        InvalidPaymentMethodError: Unknown payment method filter
    """
    queryset = (
        Order.objects
        .select_related('customer', 'user')
        .prefetch_related('items')
        .annotate(status_rank=Case(
            *[When(status=value, then=Value(rank)) for rank, value in enumerate(OrderStatus.values)],
            output_field=IntegerField(),
        ))
    )

    if status:
        queryset = queryset.filter(status=normalize_status(status))
    if customer_id:
        queryset = queryset.filter(customer_id=customer_id)
    if payment_method:
        queryset = queryset.filter(payment_method=normalize_payment_method(payment_method))
    if is_express is not None:
        queryset = queryset.filter(is_express=is_express)

    field = SORT_FIELDS.get(sort_by, 'created_at')
    prefix = '' if str(sort_order).lower() == 'asc' else '-'
    return queryset.order_by(f'{prefix}{field}', f'{prefix}created_at')


# =============================================================================
# Maintenance
# =============================================================================

def update_order_details(
    *,
    order_id: UUID,
    is_express: Optional[bool] = None,
    stains=None,
    payment_method=None,
    cash_payment_details=_UNSET
) -> Order:
    """
    Change an order's handling and payment details.

    Status is not editable here; use ``transition_order``. Switching away
    from CASH clears the stored cash breakdown, and a new breakdown is
    settled against the order total like at creation.

    Raises:
        OrderNotFoundError: If order doesn't exist
        InvalidPaymentMethodError: Unknown payment method
        InsufficientTenderError: Cash breakdown doesn't cover total
    """
    with transaction.atomic():
        try:
            order = Order.objects.select_for_update().get(id=order_id)
        except (Order.DoesNotExist, DjangoValidationError, ValueError):
            raise OrderNotFoundError()

        update_fields = []

        if is_express is not None:
            order.is_express = bool(is_express)
            update_fields.append('is_express')

        if stains is not None:
            order.stains = _clean_stains(stains)
            update_fields.append('stains')

        if payment_method is not None:
            order.payment_method = normalize_payment_method(payment_method)
            update_fields.append('payment_method')

        if order.payment_method != PaymentMethod.CASH:
            if order.cash_payment_details is not None:
                order.cash_payment_details = None
                update_fields.append('cash_payment_details')
        elif cash_payment_details is not _UNSET:
            order.cash_payment_details = (
                None if cash_payment_details is None
                else _settle_cash(order.total, cash_payment_details)
            )
            update_fields.append('cash_payment_details')

        if update_fields:
            update_fields.append('updated_at')
            order.save(update_fields=update_fields)

    logger.info('Updated order %s: %s', order.order_number, ', '.join(update_fields) or 'no changes')
    return _load_order(order.id)


@transaction.atomic
def delete_order(*, order_id: UUID) -> None:
    """
    Delete an order and its items.

    The customer's order counter is decremented in the same transaction.

    Raises:
        OrderNotFoundError: If order doesn't exist
    """
    try:
        order = Order.objects.select_for_update().get(id=order_id)
    except (Order.DoesNotExist, DjangoValidationError, ValueError):
        raise OrderNotFoundError()

    order_number = order.order_number
    customer_id = order.customer_id
    order.delete()
    record_order_removed(customer_id=customer_id)

    logger.info('Deleted order %s', order_number)
