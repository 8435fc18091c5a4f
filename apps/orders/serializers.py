from rest_framework import serializers

from apps.accounts.serializers import UserDisplaySerializer
from apps.customers.serializers import CustomerDisplaySerializer
from .models import Order, OrderItem, OrderStatus


# =============================================================================
# Input Serializers
# =============================================================================
#
# Shape only. Required fields, payment methods, item rules and totals are
# checked by the order services so the error codes stay the same whether
# an order arrives over HTTP or from a management command.

class OrderCreateSerializer(serializers.Serializer):
    """Payload for creating an order."""

    customerId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = serializers.JSONField(required=False)
    # Checked against the item prices by create_order, within a cent
    total = serializers.JSONField(required=False, allow_null=True)
    paymentMethod = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    cashPaymentDetails = serializers.JSONField(required=False, allow_null=True)
    isExpress = serializers.BooleanField(required=False, default=False)
    stains = serializers.ListField(
        child=serializers.CharField(allow_blank=True, max_length=200),
        required=False,
        default=list
    )

    def to_service_kwargs(self):
        data = self.validated_data
        return {
            'customer_id': data.get('customerId'),
            'items': data.get('items'),
            'total': data.get('total'),
            'payment_method': data.get('paymentMethod'),
            'cash_payment_details': data.get('cashPaymentDetails'),
            'is_express': data.get('isExpress', False),
            'stains': data.get('stains'),
        }


class OrderUpdateSerializer(serializers.Serializer):
    """Partial update of an order's handling and payment details."""

    isExpress = serializers.BooleanField(required=False)
    stains = serializers.ListField(
        child=serializers.CharField(allow_blank=True, max_length=200),
        required=False
    )
    paymentMethod = serializers.CharField(required=False)
    cashPaymentDetails = serializers.JSONField(required=False, allow_null=True)

    def to_service_kwargs(self):
        data = self.validated_data
        kwargs = {
            'is_express': data.get('isExpress'),
            'stains': data.get('stains'),
            'payment_method': data.get('paymentMethod'),
        }
        if 'cashPaymentDetails' in data:
            kwargs['cash_payment_details'] = data['cashPaymentDetails']
        return kwargs


class OrderStatusSerializer(serializers.Serializer):
    """Status change request; any case, ``-`` or space for ``_``."""

    status = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class TenderSerializer(serializers.Serializer):
    """Tender calculation request."""

    total = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    notes = serializers.JSONField(required=False, allow_null=True)
    coins = serializers.JSONField(required=False, allow_null=True)


class OrderFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the order list.

    Query Parameters:
        status (str): Lifecycle state, any case
        customerId (uuid): Orders of one customer
        paymentMethod (str): CASH, CARD or ON_COLLECTION
        isExpress (bool): Express orders only / non-express only
        sortBy (str): createdAt, orderNumber, total or status
        sortOrder (str): asc or desc
    """

    status = serializers.CharField(required=False, allow_blank=True)
    customerId = serializers.UUIDField(required=False)
    paymentMethod = serializers.CharField(required=False, allow_blank=True)
    isExpress = serializers.BooleanField(required=False, allow_null=True, default=None)
    sortBy = serializers.ChoiceField(
        choices=['createdAt', 'orderNumber', 'total', 'status'],
        required=False,
        default='createdAt'
    )
    sortOrder = serializers.ChoiceField(
        choices=['asc', 'desc'],
        required=False,
        default='desc'
    )

    def to_service_kwargs(self):
        data = self.validated_data
        return {
            'status': data.get('status') or None,
            'customer_id': data.get('customerId'),
            'payment_method': data.get('paymentMethod') or None,
            'is_express': data.get('isExpress'),
            'sort_by': data['sortBy'],
            'sort_order': data['sortOrder'],
        }


# =============================================================================
# Output Serializers
# =============================================================================

class OrderItemSerializer(serializers.ModelSerializer):
    lineTotal = serializers.DecimalField(
        source='line_total',
        max_digits=12,
        decimal_places=2,
        read_only=True
    )

    class Meta:
        model = OrderItem
        fields = ['id', 'name', 'price', 'quantity', 'notes', 'lineTotal']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Order with customer, staff member and items, as shown on the till."""

    orderNumber = serializers.CharField(source='order_number', read_only=True)
    customerId = serializers.UUIDField(source='customer_id', read_only=True)
    customer = CustomerDisplaySerializer(read_only=True)
    userId = serializers.UUIDField(source='user_id', read_only=True)
    user = UserDisplaySerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True)
    cashPaymentDetails = serializers.JSONField(source='cash_payment_details', read_only=True)
    isExpress = serializers.BooleanField(source='is_express', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    completedAt = serializers.DateTimeField(source='completed_at', read_only=True)
    pickedUpAt = serializers.DateTimeField(source='picked_up_at', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'orderNumber',
            'customerId',
            'customer',
            'userId',
            'user',
            'items',
            'total',
            'paymentMethod',
            'cashPaymentDetails',
            'isExpress',
            'stains',
            'status',
            'createdAt',
            'updatedAt',
            'completedAt',
            'pickedUpAt',
        ]
        read_only_fields = fields


class BoardColumnSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    label = serializers.CharField()
    count = serializers.IntegerField()
    orders = OrderSerializer(many=True)


class TenderResultSerializer(serializers.Serializer):
    """Output of the cash tender calculator."""

    total = serializers.DecimalField(source='order_total', max_digits=12, decimal_places=2)
    totalPaid = serializers.DecimalField(source='total_paid', max_digits=12, decimal_places=2)
    change = serializers.DecimalField(max_digits=12, decimal_places=2)
    sufficient = serializers.BooleanField()
    shortfall = serializers.DecimalField(max_digits=12, decimal_places=2)
    notes = serializers.DictField(child=serializers.IntegerField())
    coins = serializers.DictField(child=serializers.IntegerField())


class CurrencySerializer(serializers.Serializer):
    code = serializers.CharField()
    symbol = serializers.CharField()
    notes = serializers.ListField(child=serializers.CharField())
    coins = serializers.ListField(child=serializers.CharField())


class PeriodSerializer(serializers.Serializer):
    today = serializers.IntegerField()
    thisWeek = serializers.IntegerField()
    thisMonth = serializers.IntegerField()
    total = serializers.IntegerField()


class RevenueSerializer(serializers.Serializer):
    today = serializers.DecimalField(max_digits=14, decimal_places=2)
    thisWeek = serializers.DecimalField(max_digits=14, decimal_places=2)
    thisMonth = serializers.DecimalField(max_digits=14, decimal_places=2)
    total = serializers.DecimalField(max_digits=14, decimal_places=2)


class OrderOverviewSerializer(serializers.Serializer):
    orders = PeriodSerializer()
    revenue = RevenueSerializer()
    statusBreakdown = serializers.DictField(child=serializers.IntegerField())
