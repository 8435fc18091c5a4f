"""
Order lifecycle service.

Orders move through TODO, WASHERS, WAITING, DRYERS, READY, COMPLETED and
PICKED_UP. ``completed_at`` and ``picked_up_at`` are stamped the first time
an order reaches those states and are never cleared afterwards.
"""

import logging
from collections import OrderedDict
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from apps.orders.models import Order, OrderStatus

from .exceptions import (
    InvalidStatusError,
    InvalidTransitionError,
    OrderNotFoundError,
)

logger = logging.getLogger(__name__)


def normalize_status(value) -> str:
    """
    Parse a status case-insensitively.

    ``"picked-up"``, ``"Picked Up"`` and ``"PICKED_UP"`` are all accepted.

    Raises:
        InvalidStatusError: If value is not a lifecycle state
    """
    if isinstance(value, str):
        candidate = value.strip().upper().replace('-', '_').replace(' ', '_')
        if candidate in OrderStatus.values:
            return candidate
    raise InvalidStatusError(
        f"Invalid status. Must be one of: {', '.join(OrderStatus.values)}"
    )


def next_status(status) -> Optional[str]:
    """The state after ``status``, or ``None`` once picked up."""
    sequence = OrderStatus.values
    index = sequence.index(normalize_status(status))
    if index + 1 < len(sequence):
        return sequence[index + 1]
    return None


def can_transition(current, target, *, enforce_forward=None) -> bool:
    """
    Whether an order in ``current`` may move to ``target``.

    Staying put and moving forward (skipping states included) are always
    allowed. Moving backwards is allowed only when forward-only
    enforcement is switched off.
    """
    if enforce_forward is None:
        enforce_forward = settings.LAUNDRY_ENFORCE_FORWARD_TRANSITIONS
    if not enforce_forward:
        return True
    return OrderStatus.rank(target) >= OrderStatus.rank(current)


def _lock_order(order_id) -> Order:
    try:
        return Order.objects.select_for_update().get(id=order_id)
    except (Order.DoesNotExist, DjangoValidationError, ValueError):
        raise OrderNotFoundError()


def _reload(order_id) -> Order:
    return (
        Order.objects
        .select_related('customer', 'user')
        .prefetch_related('items')
        .get(id=order_id)
    )


def transition_order(*, order_id: UUID, status) -> Order:
    """
    Move an order to ``status``.

    The order row is locked for the duration so two tills marking the
    same order COMPLETED stamp ``completed_at`` exactly once.

    Args:
        order_id: Order UUID
        status: Target state, any case

    Returns:
        The updated order with customer, user and items loaded

    Raises:
        InvalidStatusError: Unknown status value
        OrderNotFoundError: Order doesn't exist
        InvalidTransitionError: Backwards move with enforcement on
    """
    target = normalize_status(status)

    with transaction.atomic():
        order = _lock_order(order_id)
        previous = order.status

        if not can_transition(previous, target):
            raise InvalidTransitionError(
                f'Cannot move order {order.order_number} from {previous} back to {target}'
            )

        changed = order.apply_status(target, timezone.now())
        if changed:
            changed.append('updated_at')
            order.save(update_fields=changed)

    if previous != target:
        logger.info('Order %s moved %s -> %s', order.order_number, previous, target)

    return _reload(order.id)


def advance_order(*, order_id: UUID) -> Order:
    """
    Move an order to the next state in the sequence.

    Raises:
        OrderNotFoundError: Order doesn't exist
        InvalidTransitionError: Order is already picked up
    """
    try:
        order = Order.objects.only('status', 'order_number').get(id=order_id)
    except (Order.DoesNotExist, DjangoValidationError, ValueError):
        raise OrderNotFoundError()

    target = next_status(order.status)
    if target is None:
        raise InvalidTransitionError(
            f'Order {order.order_number} has already been picked up'
        )
    return transition_order(order_id=order_id, status=target)


def processing_board():
    """
    Active orders grouped by state, in lifecycle order.

    Picked-up orders are finished and left off the board. Each column is
    oldest first so the longest waiting order is at the top.
    """
    columns = OrderedDict(
        (status, []) for status in OrderStatus.values if status != OrderStatus.PICKED_UP
    )
    orders = (
        Order.objects
        .exclude(status=OrderStatus.PICKED_UP)
        .select_related('customer', 'user')
        .prefetch_related('items')
        .order_by('created_at')
    )
    for order in orders:
        columns[order.status].append(order)
    return columns
