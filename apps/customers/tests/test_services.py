import uuid
import pytest
from apps.customers.models import Customer
from apps.customers.services import (
    get_customer,
    search_customers,
    upsert_customer,
    update_customer,
    delete_customer,
    record_order_placed,
    record_order_removed,
    CustomerNotFoundError,
    DuplicatePhoneError,
    CustomerHasOrdersError,
)


@pytest.mark.django_db
class TestUpsertCustomer:
    """Tests for upsert_customer."""

    def test_creates_new_customer(self, db):
        customer, created = upsert_customer(
            name='  Lerato Mokoena ',
            phone='082 555 0303',
            email='Lerato@Example.com',
        )

        assert created is True
        assert customer.name == 'Lerato Mokoena'
        assert customer.email == 'lerato@example.com'
        assert customer.total_orders == 0

    def test_same_phone_updates_existing(self, customer):
        updated, created = upsert_customer(
            name='Thandi M. Nkosi',
            phone=customer.phone,
            address='',
        )

        assert created is False
        assert updated.id == customer.id
        assert updated.name == 'Thandi M. Nkosi'
        assert updated.address is None
        assert Customer.objects.count() == 1


@pytest.mark.django_db
class TestUpdateCustomer:
    """Tests for update_customer."""

    def test_partial_update(self, customer):
        updated = update_customer(customer_id=customer.id, name='Thandi Dlamini')

        assert updated.name == 'Thandi Dlamini'
        assert updated.phone == customer.phone
        assert updated.address == customer.address

    def test_clear_address(self, customer):
        updated = update_customer(customer_id=customer.id, address=None)

        assert updated.address is None

    def test_duplicate_phone(self, customer, other_customer):
        with pytest.raises(DuplicatePhoneError):
            update_customer(customer_id=customer.id, phone=other_customer.phone)

        customer.refresh_from_db()
        assert customer.phone == '+27 82 555 0101'

    def test_unknown_customer(self, db):
        with pytest.raises(CustomerNotFoundError):
            update_customer(customer_id=uuid.uuid4(), name='Nobody')


@pytest.mark.django_db
class TestSearchAndGet:
    """Tests for search_customers and get_customer."""

    def test_search_by_name_phone_email(self, customer, other_customer):
        assert list(search_customers(search='thandi')) == [customer]
        assert list(search_customers(search='0202')) == [other_customer]
        assert list(search_customers(search='example.com')) == [customer]

    def test_search_without_term_returns_all(self, customer, other_customer):
        assert search_customers().count() == 2

    def test_get_unknown(self, db):
        with pytest.raises(CustomerNotFoundError):
            get_customer(customer_id=uuid.uuid4())

    def test_get_malformed_id(self, db):
        with pytest.raises(CustomerNotFoundError):
            get_customer(customer_id='not-a-uuid')


@pytest.mark.django_db
class TestDeleteCustomer:
    """Tests for delete_customer."""

    def test_delete_without_orders(self, customer):
        delete_customer(customer_id=customer.id)

        assert not Customer.objects.filter(id=customer.id).exists()

    def test_refused_with_orders(self, customer, customer_order):
        with pytest.raises(CustomerHasOrdersError):
            delete_customer(customer_id=customer.id)

        assert Customer.objects.filter(id=customer.id).exists()


@pytest.mark.django_db
class TestOrderStatistics:
    """Tests for the order counters kept on customers."""

    def test_record_order_placed(self, customer):
        record_order_placed(customer_id=customer.id)
        record_order_placed(customer_id=customer.id)

        customer.refresh_from_db()
        assert customer.total_orders == 2
        assert customer.last_order_date is not None

    def test_record_order_placed_unknown_customer(self, db):
        with pytest.raises(CustomerNotFoundError):
            record_order_placed(customer_id=uuid.uuid4())

    def test_record_order_removed_never_negative(self, customer):
        record_order_removed(customer_id=customer.id)

        customer.refresh_from_db()
        assert customer.total_orders == 0
