from django.db import models
import uuid


class Customer(models.Model):
    """A walk-in customer identified by phone number."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150)
    phone = models.CharField(max_length=32, unique=True)
    email = models.EmailField(max_length=255, null=True, blank=True)
    address = models.TextField(null=True, blank=True)

    # Order statistics, maintained inside the order creation transaction
    total_orders = models.PositiveIntegerField(default=0)
    last_order_date = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customers'
        indexes = [
            models.Index(fields=['name'], name='customers_name_idx'),
            models.Index(fields=['created_at'], name='customers_created_at_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.phone})"
