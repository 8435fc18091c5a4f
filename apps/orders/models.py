from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class OrderStatus(models.TextChoices):
    """
    Processing pipeline, in the order an order moves through the store.

    The declaration order is the lifecycle order; ``rank`` relies on it.
    """

    TODO = 'TODO', 'To-Do'
    WASHERS = 'WASHERS', 'Washers'
    WAITING = 'WAITING', 'Waiting'
    DRYERS = 'DRYERS', 'Dryers'
    READY = 'READY', 'Ready'
    COMPLETED = 'COMPLETED', 'Awaiting Pickup'
    PICKED_UP = 'PICKED_UP', 'Picked Up'

    @classmethod
    def rank(cls, value):
        return cls.values.index(str(value))


class PaymentMethod(models.TextChoices):
    CASH = 'CASH', 'Cash'
    CARD = 'CARD', 'Card'
    ON_COLLECTION = 'ON_COLLECTION', 'On Collection'


class Order(models.Model):
    """A customer drop-off: line items, payment and processing status."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=32, unique=True, editable=False)

    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.PROTECT,
        related_name='orders'
    )
    # Staff member who rang up the order
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )

    # Financial details
    total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    cash_payment_details = models.JSONField(null=True, blank=True)

    # Handling
    is_express = models.BooleanField(default=False)
    stains = models.JSONField(default=list, blank=True)

    # Lifecycle
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.TODO
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    picked_up_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'orders'
        indexes = [
            models.Index(fields=['status', 'created_at'], name='orders_status_created_idx'),
            models.Index(fields=['customer', 'created_at'], name='orders_customer_created_idx'),
            models.Index(fields=['payment_method'], name='orders_payment_method_idx'),
            models.Index(fields=['created_at'], name='orders_created_at_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.order_number} - {self.total} ({self.status})"

    def apply_status(self, new_status, at):
        """
        Move to ``new_status`` and stamp lifecycle timestamps.

        ``completed_at`` is stamped the first time the order reaches
        COMPLETED or any later state; ``picked_up_at`` the first time it
        reaches PICKED_UP. Existing timestamps are never overwritten.

        Returns the list of changed field names.
        """
        changed = []
        if self.status != new_status:
            self.status = new_status
            changed.append('status')

        rank = OrderStatus.rank(new_status)
        if rank >= OrderStatus.rank(OrderStatus.COMPLETED) and self.completed_at is None:
            self.completed_at = at
            changed.append('completed_at')
        if new_status == OrderStatus.PICKED_UP and self.picked_up_at is None:
            self.picked_up_at = at
            changed.append('picked_up_at')
        return changed


class OrderItem(models.Model):
    """One line on an order (e.g. 2 x Shirt)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='items'
    )
    name = models.CharField(max_length=200)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    notes = models.TextField(null=True, blank=True)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'order_items'
        ordering = ['position']

    def __str__(self):
        return f"{self.quantity} x {self.name}"

    @property
    def line_total(self):
        return self.price * self.quantity


class OrderNumberSequence(models.Model):
    """
    Counter row backing human readable order numbers.

    Incremented under ``SELECT ... FOR UPDATE`` in the same transaction
    that inserts the order.
    """

    name = models.CharField(max_length=50, primary_key=True)
    last_value = models.PositiveBigIntegerField(default=0)

    class Meta:
        db_table = 'order_number_sequences'

    def __str__(self):
        return f"{self.name}: {self.last_value}"
