import re

from rest_framework import serializers
from .models import Customer
from apps.orders.models import Order


PHONE_PATTERN = re.compile(r'^\+?[0-9\s\-()]{10,}$')


def validate_phone_number(value):
    value = value.strip()
    if not PHONE_PATTERN.match(value):
        raise serializers.ValidationError('Invalid phone number format', code='invalid_phone')
    return value


# =============================================================================
# Input Serializers
# =============================================================================

class CustomerFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for customer search.

    Query Parameters:
        search (str): Match on name, phone or email
    """

    search = serializers.CharField(required=False, allow_blank=True, max_length=100)


class CustomerInputSerializer(serializers.Serializer):
    """Create-or-update payload; phone is the natural key."""

    name = serializers.CharField(max_length=150)
    phone = serializers.CharField(max_length=32, validators=[validate_phone_number])
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Name is required')
        return value


class CustomerUpdateSerializer(serializers.Serializer):
    """Partial update payload."""

    name = serializers.CharField(required=False, max_length=150)
    phone = serializers.CharField(
        required=False,
        max_length=32,
        validators=[validate_phone_number]
    )
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# =============================================================================
# Output Serializers
# =============================================================================

class CustomerSerializer(serializers.ModelSerializer):
    """Customer record as used by the till."""

    totalOrders = serializers.IntegerField(source='total_orders', read_only=True)
    lastOrderDate = serializers.DateTimeField(source='last_order_date', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id',
            'name',
            'phone',
            'email',
            'address',
            'totalOrders',
            'lastOrderDate',
            'createdAt',
            'updatedAt',
        ]
        read_only_fields = fields


class CustomerDisplaySerializer(serializers.ModelSerializer):
    """Customer fields joined onto orders."""

    class Meta:
        model = Customer
        fields = ['id', 'name', 'phone', 'email', 'address']


class RecentOrderSerializer(serializers.ModelSerializer):
    """Compact order line for the customer detail screen."""

    orderNumber = serializers.CharField(source='order_number', read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True)
    isExpress = serializers.BooleanField(source='is_express', read_only=True)
    itemCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'orderNumber',
            'status',
            'total',
            'paymentMethod',
            'isExpress',
            'itemCount',
            'createdAt',
        ]

    def get_itemCount(self, obj):
        return sum(item.quantity for item in obj.items.all())


class CustomerDetailSerializer(CustomerSerializer):
    """Customer with their ten most recent orders."""

    recentOrders = serializers.SerializerMethodField()

    class Meta(CustomerSerializer.Meta):
        fields = CustomerSerializer.Meta.fields + ['recentOrders']
        read_only_fields = fields

    def get_recentOrders(self, obj):
        orders = obj.orders.prefetch_related('items').order_by('-created_at')[:10]
        return RecentOrderSerializer(orders, many=True).data
