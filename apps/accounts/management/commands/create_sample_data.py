"""
Management command to create sample data for trying out the till.

Usage:
    python manage.py create_sample_data [--clear]

This creates:
- 2 staff accounts (admin, cashier)
- 5 customers
- 12 orders spread across the processing pipeline, paid by cash, card
  and on collection
"""

import random
from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.accounts.models import User
from apps.accounts.roles import Role
from apps.customers.models import Customer
from apps.customers.services import upsert_customer
from apps.orders.models import Order, OrderNumberSequence, OrderStatus, PaymentMethod
from apps.orders.services import create_order, tender, transition_order


CUSTOMERS = [
    ('Thandi Nkosi', '+27 82 555 0101', 'thandi@example.com'),
    ('Pieter van Wyk', '+27 83 555 0202', None),
    ('Lerato Mokoena', '+27 84 555 0303', 'lerato@example.com'),
    ('Ayesha Patel', '+27 72 555 0404', None),
    ('Johan Botha', '+27 71 555 0505', 'johan@example.com'),
]

PRICE_LIST = [
    ('Shirt', Decimal('9.00')),
    ('Trousers', Decimal('15.00')),
    ('Suit (2pc)', Decimal('85.00')),
    ('Dress', Decimal('45.00')),
    ('Duvet (double)', Decimal('120.00')),
    ('Wash & fold (per kg)', Decimal('25.00')),
]

STAINS = ['Red wine', 'Coffee', 'Grease', 'Ink', 'Grass']


class Command(BaseCommand):
    help = 'Create sample staff, customers and orders'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete existing orders and customers first',
        )
        parser.add_argument(
            '--seed',
            type=int,
            default=42,
            help='Random seed so repeated runs produce the same orders',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        rng = random.Random(options['seed'])

        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        staff = self.create_staff()
        customers = self.create_customers()
        orders = self.create_orders(staff['cashier'], customers, rng)

        self.stdout.write(self.style.SUCCESS(
            f'Created {len(customers)} customers and {len(orders)} orders.'
        ))
        self.stdout.write('')
        self.stdout.write('Staff accounts:')
        self.stdout.write('  admin@laundryos.local / admin123 (ADMIN)')
        self.stdout.write('  cashier@laundryos.local / cashier123 (CASHIER)')

    def clear_data(self):
        """Delete orders, customers and reset order numbering."""
        Order.objects.all().delete()
        Customer.objects.all().delete()
        OrderNumberSequence.objects.update(last_value=0)

    def create_staff(self):
        self.stdout.write('  Creating staff...')
        admin, created = User.objects.get_or_create(
            email='admin@laundryos.local',
            defaults={'name': 'Store Admin', 'role': Role.ADMIN, 'is_staff': True, 'is_superuser': True},
        )
        if created:
            admin.set_password('admin123')
            admin.save()

        cashier, created = User.objects.get_or_create(
            email='cashier@laundryos.local',
            defaults={'name': 'Front Counter', 'role': Role.CASHIER},
        )
        if created:
            cashier.set_password('cashier123')
            cashier.save()

        return {'admin': admin, 'cashier': cashier}

    def create_customers(self):
        self.stdout.write('  Creating customers...')
        customers = []
        for name, phone, email in CUSTOMERS:
            customer, _ = upsert_customer(name=name, phone=phone, email=email)
            customers.append(customer)
        return customers

    def create_orders(self, cashier, customers, rng):
        self.stdout.write('  Creating orders...')
        orders = []
        statuses = OrderStatus.values

        for _ in range(12):
            lines = rng.sample(PRICE_LIST, k=rng.randint(1, 3))
            items = [
                {'name': name, 'price': price, 'quantity': rng.randint(1, 4)}
                for name, price in lines
            ]
            total = sum((item['price'] * item['quantity'] for item in items), Decimal('0.00'))
            payment_method = rng.choice(PaymentMethod.values)

            cash_details = None
            if payment_method == PaymentMethod.CASH:
                cash_details = self.pay_in_notes(total)

            order = create_order(
                user=cashier,
                customer_id=rng.choice(customers).id,
                items=items,
                total=total,
                payment_method=payment_method,
                cash_payment_details=cash_details,
                is_express=rng.random() < 0.25,
                stains=rng.sample(STAINS, k=rng.randint(0, 2)),
            )

            target = rng.choice(statuses)
            if target != OrderStatus.TODO:
                order = transition_order(order_id=order.id, status=target)
            orders.append(order)

        return orders

    @staticmethod
    def pay_in_notes(total):
        """Smallest pile of R200/R100/R50 notes that covers ``total``."""
        notes = {}
        remaining = total
        for note in (200, 100, 50):
            count = int(remaining // note)
            if count:
                notes[str(note)] = count
                remaining -= note * count
        if remaining > 0:
            notes['50'] = notes.get('50', 0) + 1

        if not tender(total, notes, {}).sufficient:
            raise CommandError(f"Could not cover {total} in notes")
        return {'notes': notes, 'coins': {}}
