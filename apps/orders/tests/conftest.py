import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.accounts.roles import Role
from apps.customers.models import Customer
from apps.orders.models import PaymentMethod
from apps.orders.services import create_order


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def cashier(db):
    """Create and return a cashier."""
    return User.objects.create_user(
        email='cashier@example.com',
        password='TestPass123!',
        name='Till Cashier',
        role=Role.CASHIER,
    )


@pytest.fixture
def admin_user(db):
    """Create and return a store admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        name='Store Admin',
        role=Role.ADMIN,
    )


@pytest.fixture
def cashier_client(cashier):
    """Return API client authenticated as cashier."""
    return _client_for(cashier)


@pytest.fixture
def admin_client(admin_user):
    """Return API client authenticated as admin."""
    return _client_for(admin_user)


@pytest.fixture
def customer(db):
    """Create and return a customer."""
    return Customer.objects.create(
        name='Thandi Nkosi',
        phone='+27 82 555 0101',
        email='thandi@example.com',
    )


@pytest.fixture
def other_customer(db):
    """Create and return a second customer."""
    return Customer.objects.create(
        name='Pieter van Wyk',
        phone='+27 83 555 0202',
    )


@pytest.fixture
def shirt_items():
    """Two shirts at 9.00."""
    return [{'name': 'Shirt', 'price': '9.00', 'quantity': 2}]


@pytest.fixture
def order(cashier, customer, shirt_items):
    """Create a CARD order for 18.00 through the order service."""
    return create_order(
        user=cashier,
        customer_id=customer.id,
        items=shirt_items,
        total=Decimal('18.00'),
        payment_method=PaymentMethod.CARD,
    )


@pytest.fixture
def cash_order(cashier, customer):
    """Create a settled CASH order for 137.50."""
    return create_order(
        user=cashier,
        customer_id=customer.id,
        items=[
            {'name': 'Duvet', 'price': '120.00', 'quantity': 1},
            {'name': 'Pillowcase', 'price': '8.75', 'quantity': 2},
        ],
        total=Decimal('137.50'),
        payment_method=PaymentMethod.CASH,
        cash_payment_details={'notes': {'100': 1, '50': 1}, 'coins': {}},
    )
