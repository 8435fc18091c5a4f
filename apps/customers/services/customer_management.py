"""
Customer management service.

Customers are keyed by phone number: creating a customer whose phone is
already on file updates that record instead.
"""

import logging
from typing import Optional, Tuple
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction, IntegrityError
from django.db.models import F, Q, QuerySet
from django.db.models.functions import Greatest
from django.utils import timezone

from apps.customers.models import Customer

from .exceptions import (
    CustomerNotFoundError,
    DuplicatePhoneError,
    CustomerHasOrdersError,
)

logger = logging.getLogger(__name__)

_UNSET = object()


def _clean_email(email: Optional[str]) -> Optional[str]:
    return email.strip().lower() if email else None


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_customer(*, customer_id: UUID) -> Customer:
    """
    Get a customer by ID.

    Raises:
        CustomerNotFoundError: If customer doesn't exist
    """
    try:
        return Customer.objects.get(id=customer_id)
    except (Customer.DoesNotExist, DjangoValidationError, ValueError):
        raise CustomerNotFoundError()


def search_customers(*, search: Optional[str] = None) -> QuerySet:
    """Customers matching ``search`` on name, phone or email, newest first."""
    queryset = Customer.objects.all()
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) |
            Q(phone__icontains=search) |
            Q(email__icontains=search)
        )
    return queryset.order_by('-created_at')


@transaction.atomic
def upsert_customer(
    *,
    name: str,
    phone: str,
    email: Optional[str] = None,
    address: Optional[str] = None
) -> Tuple[Customer, bool]:
    """
    Create a customer, or update the existing one with the same phone.

    Returns:
        (customer, created)
    """
    phone = phone.strip()
    defaults = {
        'name': name.strip(),
        'email': _clean_email(email),
        'address': _clean_text(address),
    }

    customer, created = Customer.objects.update_or_create(
        phone=phone,
        defaults=defaults,
    )

    logger.info(
        '%s customer %s (%s)',
        'Created' if created else 'Updated', customer.id, customer.phone
    )
    return customer, created


def update_customer(
    *,
    customer_id: UUID,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    address=_UNSET
) -> Customer:
    """
    Partially update a customer.

    ``address`` may be passed as ``None`` to clear it; omitted fields are
    left untouched.

    Raises:
        CustomerNotFoundError: If customer doesn't exist
        DuplicatePhoneError: If phone belongs to another customer
    """
    try:
        with transaction.atomic():
            try:
                customer = Customer.objects.select_for_update().get(id=customer_id)
            except Customer.DoesNotExist:
                raise CustomerNotFoundError()

            update_fields = []
            if name:
                customer.name = name.strip()
                update_fields.append('name')
            if phone:
                customer.phone = phone.strip()
                update_fields.append('phone')
            if email:
                customer.email = _clean_email(email)
                update_fields.append('email')
            if address is not _UNSET:
                customer.address = _clean_text(address)
                update_fields.append('address')

            if update_fields:
                update_fields.append('updated_at')
                customer.save(update_fields=update_fields)
    except IntegrityError:
        raise DuplicatePhoneError()

    return customer


@transaction.atomic
def delete_customer(*, customer_id: UUID) -> None:
    """
    Delete a customer that has never placed an order.

    Raises:
        CustomerNotFoundError: If customer doesn't exist
        CustomerHasOrdersError: If the customer has orders
    """
    customer = get_customer(customer_id=customer_id)

    if customer.orders.exists():
        raise CustomerHasOrdersError()

    customer.delete()
    logger.info('Deleted customer %s', customer_id)


def record_order_placed(*, customer_id: UUID, placed_at=None) -> None:
    """
    Bump the customer's order counter and last order date.

    Must run inside the caller's order creation transaction so the
    statistics and the order commit or roll back together.

    Raises:
        CustomerNotFoundError: If customer doesn't exist
    """
    placed_at = placed_at or timezone.now()
    updated = Customer.objects.filter(id=customer_id).update(
        total_orders=F('total_orders') + 1,
        last_order_date=placed_at,
    )
    if not updated:
        raise CustomerNotFoundError()


def record_order_removed(*, customer_id: UUID) -> None:
    """Decrement the order counter when an order is deleted."""
    Customer.objects.filter(id=customer_id).update(
        total_orders=Greatest(F('total_orders') - 1, 0)
    )
