from django.contrib import admin
from django.utils.html import format_html

from .models import Order, OrderItem, OrderStatus


class OrderItemInline(admin.TabularInline):
    """Line items within an order."""
    model = OrderItem
    extra = 0
    fields = ['position', 'name', 'price', 'quantity', 'notes']
    ordering = ['position']

    def has_add_permission(self, request, obj=None):
        """Items are written with the order by the order service."""
        return False


STATUS_COLORS = {
    OrderStatus.TODO: '#64748B',
    OrderStatus.WASHERS: '#0EA5E9',
    OrderStatus.WAITING: '#F59E0B',
    OrderStatus.DRYERS: '#F97316',
    OrderStatus.READY: '#8B5CF6',
    OrderStatus.COMPLETED: '#16A34A',
    OrderStatus.PICKED_UP: '#1F2937',
}


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin interface for orders.

    Status is read-only here; lifecycle changes go through the API so the
    completion timestamps stay consistent.
    """

    list_display = [
        'order_number',
        'customer',
        'total',
        'payment_method',
        'is_express',
        'status_badge',
        'created_at',
    ]

    list_filter = [
        'status',
        'payment_method',
        'is_express',
        'created_at',
    ]

    search_fields = [
        'order_number',
        'customer__name',
        'customer__phone',
    ]

    readonly_fields = [
        'order_number',
        'status',
        'cash_payment_details',
        'created_at',
        'updated_at',
        'completed_at',
        'picked_up_at',
    ]

    fieldsets = (
        ('Order', {
            'fields': ('order_number', 'customer', 'user', 'status', 'is_express', 'stains')
        }),
        ('Payment', {
            'fields': ('total', 'payment_method', 'cash_payment_details'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'completed_at', 'picked_up_at'),
            'classes': ('collapse',),
        }),
    )

    raw_id_fields = ['customer', 'user']
    inlines = [OrderItemInline]
    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    def status_badge(self, obj):
        """Display status as colored badge."""
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLORS.get(obj.status, '#ccc'), obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'
