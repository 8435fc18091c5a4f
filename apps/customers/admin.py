from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    """Admin interface for customers."""

    list_display = [
        'name',
        'phone',
        'email',
        'total_orders',
        'last_order_date',
        'created_at',
    ]

    search_fields = [
        'name',
        'phone',
        'email',
    ]

    readonly_fields = [
        'total_orders',
        'last_order_date',
        'created_at',
        'updated_at',
    ]

    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Contact', {
            'fields': ('name', 'phone', 'email', 'address')
        }),
        ('Order Statistics', {
            'fields': ('total_orders', 'last_order_date'),
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )
