import uuid
import pytest
from decimal import Decimal
from unittest import mock
from django.db import IntegrityError
from apps.customers.services import CustomerNotFoundError
from apps.orders.models import Order, OrderItem, OrderNumberSequence, OrderStatus, PaymentMethod
from apps.orders.services import (
    create_order,
    delete_order,
    get_order,
    list_orders,
    next_order_number,
    update_order_details,
    MissingFieldError,
    InvalidPaymentMethodError,
    InvalidItemError,
    TotalMismatchError,
    InsufficientTenderError,
    InvalidStatusError,
    OrderNotFoundError,
    OrderNumberAllocationError,
)
from apps.orders.services import order_management


def _create(cashier, customer, **overrides):
    kwargs = {
        'user': cashier,
        'customer_id': customer.id,
        'items': [{'name': 'Shirt', 'price': '9.00', 'quantity': 2}],
        'total': Decimal('18.00'),
        'payment_method': 'CARD',
    }
    kwargs.update(overrides)
    return create_order(**kwargs)


# =============================================================================
# Order creation gate
# =============================================================================

@pytest.mark.django_db
class TestCreateOrder:
    """Tests for create_order."""

    def test_create_order(self, cashier, customer):
        """Two shirts at 9.00 for 18.00 is accepted."""
        order = _create(cashier, customer)

        assert order.status == OrderStatus.TODO
        assert order.total == Decimal('18.00')
        assert order.payment_method == PaymentMethod.CARD
        assert order.user == cashier
        assert order.customer == customer
        assert order.completed_at is None
        assert order.picked_up_at is None
        assert order.cash_payment_details is None

        items = list(order.items.all())
        assert len(items) == 1
        assert items[0].name == 'Shirt'
        assert items[0].price == Decimal('9.00')
        assert items[0].quantity == 2

    def test_order_number_format(self, cashier, customer):
        order = _create(cashier, customer)

        assert order.order_number.startswith('LOS-')
        assert len(order.order_number) == len('LOS-000001')

    def test_order_numbers_are_sequential(self, cashier, customer):
        first = _create(cashier, customer)
        second = _create(cashier, customer)

        first_value = int(first.order_number.split('-')[1])
        second_value = int(second.order_number.split('-')[1])
        assert second_value == first_value + 1

    def test_updates_customer_statistics(self, cashier, customer):
        order = _create(cashier, customer)
        _create(cashier, customer)

        customer.refresh_from_db()
        assert customer.total_orders == 2
        assert customer.last_order_date is not None
        assert customer.last_order_date >= order.created_at

    def test_payment_method_case_insensitive(self, cashier, customer):
        order = _create(cashier, customer, payment_method='on_collection')

        assert order.payment_method == PaymentMethod.ON_COLLECTION

    def test_total_within_one_cent_accepted(self, cashier, customer):
        order = _create(cashier, customer, total=Decimal('18.01'))

        assert order.total == Decimal('18.01')

    def test_multiple_items_keep_their_order(self, cashier, customer):
        order = _create(
            cashier, customer,
            items=[
                {'name': 'Suit', 'price': '85.00', 'quantity': 1, 'notes': 'Dry clean only'},
                {'name': 'Shirt', 'price': '9.00', 'quantity': 3},
            ],
            total=Decimal('112.00'),
        )

        names = [item.name for item in order.items.all()]
        assert names == ['Suit', 'Shirt']
        assert order.items.all()[0].notes == 'Dry clean only'
        assert sum(item.line_total for item in order.items.all()) == Decimal('112.00')

    def test_express_and_stains_recorded(self, cashier, customer):
        order = _create(
            cashier, customer,
            is_express=True,
            stains=['Red wine on collar', '  ', 'Grease'],
        )

        assert order.is_express is True
        assert order.stains == ['Red wine on collar', 'Grease']

    def test_cash_order_is_settled(self, cashier, customer):
        order = _create(
            cashier, customer,
            payment_method='CASH',
            cash_payment_details={'notes': {'20': 1}, 'coins': {}},
        )

        assert order.cash_payment_details == {
            'notes': {'20': 1},
            'coins': {},
            'totalPaid': '20.00',
            'change': '2.00',
        }

    def test_client_totals_are_recomputed(self, cashier, customer):
        """totalPaid and change sent by the till are replaced."""
        order = _create(
            cashier, customer,
            payment_method='CASH',
            cash_payment_details={
                'notes': {'10': 2},
                'coins': {},
                'totalPaid': 999,
                'change': 981,
            },
        )

        assert order.cash_payment_details['totalPaid'] == '20.00'
        assert order.cash_payment_details['change'] == '2.00'

    def test_cash_without_breakdown_allowed(self, cashier, customer):
        order = _create(cashier, customer, payment_method='CASH')

        assert order.cash_payment_details is None

    def test_card_order_ignores_cash_details(self, cashier, customer):
        order = _create(
            cashier, customer,
            payment_method='CARD',
            cash_payment_details={'notes': {'20': 1}},
        )

        assert order.cash_payment_details is None


@pytest.mark.django_db
class TestCreateOrderValidation:
    """Tests for create_order rejections, in the order they are checked."""

    @pytest.mark.parametrize('field,value', [
        ('customer_id', None),
        ('customer_id', ''),
        ('items', None),
        ('items', []),
        ('total', None),
        ('payment_method', None),
        ('payment_method', ''),
    ])
    def test_missing_field(self, cashier, customer, field, value):
        with pytest.raises(MissingFieldError):
            _create(cashier, customer, **{field: value})

    def test_invalid_payment_method(self, cashier, customer):
        with pytest.raises(InvalidPaymentMethodError):
            _create(cashier, customer, payment_method='BITCOIN')

    def test_unknown_customer(self, cashier, customer):
        with pytest.raises(CustomerNotFoundError):
            _create(cashier, customer, customer_id=uuid.uuid4())

    def test_malformed_customer_id(self, cashier, customer):
        with pytest.raises(CustomerNotFoundError):
            _create(cashier, customer, customer_id='12345')

    @pytest.mark.parametrize('item', [
        {'name': '', 'price': '9.00', 'quantity': 2},
        {'name': '   ', 'price': '9.00', 'quantity': 2},
        {'price': '9.00', 'quantity': 2},
        {'name': 'Shirt', 'price': '-1.00', 'quantity': 2},
        {'name': 'Shirt', 'price': 'free', 'quantity': 2},
        {'name': 'Shirt', 'price': '9.00', 'quantity': 0},
        {'name': 'Shirt', 'price': '9.00', 'quantity': 1.5},
        {'name': 'Shirt', 'price': '9.00'},
        'Shirt',
    ])
    def test_invalid_item(self, cashier, customer, item):
        with pytest.raises(InvalidItemError):
            _create(cashier, customer, items=[item])

    def test_total_mismatch(self, cashier, customer):
        """Two shirts at 9.00 declared as 20.00 is rejected."""
        with pytest.raises(TotalMismatchError):
            _create(cashier, customer, total=Decimal('20.00'))

    def test_total_off_by_more_than_a_cent(self, cashier, customer):
        with pytest.raises(TotalMismatchError):
            _create(cashier, customer, total=Decimal('17.98'))

    def test_sub_cent_total_rounded_to_cents(self, cashier, customer):
        order = _create(cashier, customer, total='18.005')

        order.refresh_from_db()
        assert order.total == Decimal('18.01')

    def test_insufficient_cash(self, cashier, customer):
        with pytest.raises(InsufficientTenderError):
            _create(
                cashier, customer,
                payment_method='CASH',
                cash_payment_details={'notes': {'10': 1}, 'coins': {'5': 1}},
            )

    def test_payment_method_checked_before_customer(self, cashier, customer):
        with pytest.raises(InvalidPaymentMethodError):
            _create(cashier, customer, payment_method='BITCOIN', customer_id=uuid.uuid4())

    def test_customer_checked_before_items(self, cashier, customer):
        with pytest.raises(CustomerNotFoundError):
            _create(cashier, customer, customer_id=uuid.uuid4(), items=[{'name': ''}])

    def test_items_checked_before_total(self, cashier, customer):
        with pytest.raises(InvalidItemError):
            _create(
                cashier, customer,
                items=[{'name': 'Shirt', 'price': '9.00', 'quantity': 0}],
                total=Decimal('999.00'),
            )

    def test_rejection_writes_nothing(self, cashier, customer):
        with pytest.raises(TotalMismatchError):
            _create(cashier, customer, total=Decimal('20.00'))

        customer.refresh_from_db()
        assert Order.objects.count() == 0
        assert OrderItem.objects.count() == 0
        assert customer.total_orders == 0

    def test_failure_inside_transaction_rolls_back(self, cashier, customer):
        """A failing customer update undoes the order and its number."""
        with mock.patch.object(
            order_management, 'record_order_placed', side_effect=RuntimeError('boom')
        ):
            with pytest.raises(RuntimeError):
                _create(cashier, customer)

        assert Order.objects.count() == 0
        assert OrderItem.objects.count() == 0
        assert not OrderNumberSequence.objects.filter(last_value__gt=0).exists()


# =============================================================================
# Order numbers
# =============================================================================

@pytest.mark.django_db
class TestOrderNumbers:
    """Tests for order number allocation."""

    def test_next_order_number(self, db):
        assert next_order_number() == 'LOS-000001'
        assert next_order_number() == 'LOS-000002'

    def test_prefix_and_width_from_settings(self, settings):
        settings.LAUNDRY_ORDER_NUMBER_PREFIX = 'WASH'
        settings.LAUNDRY_ORDER_NUMBER_WIDTH = 4

        assert next_order_number() == 'WASH-0001'

    def test_recreates_missing_counter(self, db):
        OrderNumberSequence.objects.all().delete()

        assert next_order_number() == 'LOS-000001'

    def test_skips_numbers_already_taken(self, cashier, customer, order):
        OrderNumberSequence.objects.filter(name='order_number').update(last_value=0)

        second = _create(cashier, customer)

        assert second.order_number != order.order_number

    def test_retries_on_collision(self, cashier, customer):
        real_create = Order.objects.create
        calls = {'count': 0}

        def flaky_create(**kwargs):
            calls['count'] += 1
            if calls['count'] == 1:
                raise IntegrityError('duplicate order number')
            return real_create(**kwargs)

        with mock.patch.object(Order.objects, 'create', side_effect=flaky_create):
            order = _create(cashier, customer)

        assert calls['count'] == 2
        assert Order.objects.filter(id=order.id).exists()

    def test_gives_up_after_max_retries(self, cashier, customer):
        with mock.patch.object(
            Order.objects, 'create', side_effect=IntegrityError('duplicate order number')
        ):
            with pytest.raises(OrderNumberAllocationError):
                _create(cashier, customer, max_retries=2)

        customer.refresh_from_db()
        assert customer.total_orders == 0


# =============================================================================
# Queries and maintenance
# =============================================================================

@pytest.mark.django_db
class TestListOrders:
    """Tests for list_orders."""

    def test_filter_by_status(self, order, cash_order):
        Order.objects.filter(id=cash_order.id).update(status=OrderStatus.READY)

        result = list(list_orders(status='ready'))

        assert [o.id for o in result] == [cash_order.id]
        assert result[0].status == OrderStatus.READY

    def test_invalid_status_filter(self, db):
        with pytest.raises(InvalidStatusError):
            list_orders(status='FOLDING')

    def test_filter_by_customer(self, cashier, order, other_customer):
        other = _create(cashier, other_customer)

        result = list(list_orders(customer_id=other_customer.id))

        assert [o.id for o in result] == [other.id]

    def test_filter_by_payment_method(self, order, cash_order):
        result = list(list_orders(payment_method='cash'))

        assert [o.id for o in result] == [cash_order.id]

    def test_filter_by_express(self, cashier, customer, order):
        express = _create(cashier, customer, is_express=True)

        assert [o.id for o in list_orders(is_express=True)] == [express.id]
        assert [o.id for o in list_orders(is_express=False)] == [order.id]

    def test_sort_by_total(self, order, cash_order):
        ascending = [o.id for o in list_orders(sort_by='total', sort_order='asc')]
        descending = [o.id for o in list_orders(sort_by='total', sort_order='desc')]

        assert ascending == [order.id, cash_order.id]
        assert descending == [cash_order.id, order.id]

    def test_sort_by_status_uses_lifecycle_order(self, order, cash_order):
        """Status sorts by lifecycle position, not alphabetically."""
        Order.objects.filter(id=order.id).update(status=OrderStatus.WASHERS)
        Order.objects.filter(id=cash_order.id).update(status=OrderStatus.COMPLETED)

        result = [o.id for o in list_orders(sort_by='status', sort_order='asc')]

        assert result == [order.id, cash_order.id]


@pytest.mark.django_db
class TestGetOrder:
    """Tests for get_order."""

    def test_get_order(self, order):
        assert get_order(order_id=order.id) == order

    def test_unknown_order(self, db):
        with pytest.raises(OrderNotFoundError):
            get_order(order_id=uuid.uuid4())


@pytest.mark.django_db
class TestUpdateOrderDetails:
    """Tests for update_order_details."""

    def test_update_express_and_stains(self, order):
        updated = update_order_details(order_id=order.id, is_express=True, stains=['Ink'])

        assert updated.is_express is True
        assert updated.stains == ['Ink']
        assert updated.status == OrderStatus.TODO

    def test_switch_to_cash_with_breakdown(self, order):
        updated = update_order_details(
            order_id=order.id,
            payment_method='cash',
            cash_payment_details={'notes': {'20': 1}},
        )

        assert updated.payment_method == PaymentMethod.CASH
        assert updated.cash_payment_details['change'] == '2.00'

    def test_switch_away_from_cash_clears_details(self, cash_order):
        updated = update_order_details(order_id=cash_order.id, payment_method='CARD')

        assert updated.payment_method == PaymentMethod.CARD
        assert updated.cash_payment_details is None

    def test_insufficient_cash_rejected(self, cash_order):
        with pytest.raises(InsufficientTenderError):
            update_order_details(
                order_id=cash_order.id,
                cash_payment_details={'notes': {'10': 1}},
            )

    def test_invalid_payment_method(self, order):
        with pytest.raises(InvalidPaymentMethodError):
            update_order_details(order_id=order.id, payment_method='IOU')

    def test_unknown_order(self, db):
        with pytest.raises(OrderNotFoundError):
            update_order_details(order_id=uuid.uuid4(), is_express=True)


@pytest.mark.django_db
class TestDeleteOrder:
    """Tests for delete_order."""

    def test_delete_order(self, order, customer):
        delete_order(order_id=order.id)

        customer.refresh_from_db()
        assert not Order.objects.filter(id=order.id).exists()
        assert OrderItem.objects.count() == 0
        assert customer.total_orders == 0

    def test_unknown_order(self, db):
        with pytest.raises(OrderNotFoundError):
            delete_order(order_id=uuid.uuid4())
