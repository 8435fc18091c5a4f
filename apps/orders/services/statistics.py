"""
Order reporting.

Read-only aggregates for the dashboard: order counts and revenue for
today, this week, this month and all time, plus how many orders sit in
each lifecycle state.

Example:
    Dashboard overview::

        from apps.orders.services import order_overview

        overview = order_overview()
        overview['orders']['today']        # 12
        overview['revenue']['thisMonth']   # Decimal('8450.00')
        overview['statusBreakdown']['washers']  # 3
"""

from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, DecimalField, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.orders.models import Order, OrderStatus

WINDOWS = ('today', 'thisWeek', 'thisMonth')


def period_starts(now=None):
    """
    Start of today, this week and this month in local time.

    Weeks start on Sunday at midnight.
    """
    now = timezone.localtime(now or timezone.now())
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    # weekday(): Monday is 0, Sunday is 6
    week = today - timedelta(days=(today.weekday() + 1) % 7)
    month = today.replace(day=1)
    return {'today': today, 'thisWeek': week, 'thisMonth': month}


def order_overview(now=None):
    """
    Order counts, revenue and status breakdown.

    Args:
        now: Reference time; defaults to the current time

    Returns:
        dict: {
            'orders': {'today', 'thisWeek', 'thisMonth', 'total'},
            'revenue': {'today', 'thisWeek', 'thisMonth', 'total'},
            'statusBreakdown': {'todo': n, 'washers': n, ...}
        }
    """
    starts = period_starts(now)
    money = DecimalField(max_digits=12, decimal_places=2)
    zero = Decimal('0.00')

    aggregates = {'orders_total': Count('id'), 'revenue_total': Coalesce(Sum('total'), zero, output_field=money)}
    for window in WINDOWS:
        in_window = Q(created_at__gte=starts[window])
        aggregates[f'orders_{window}'] = Count('id', filter=in_window)
        aggregates[f'revenue_{window}'] = Coalesce(
            Sum('total', filter=in_window), zero, output_field=money
        )

    totals = Order.objects.aggregate(**aggregates)

    counts = dict(
        Order.objects
        .values_list('status')
        .annotate(count=Count('id'))
        .order_by()
    )
    breakdown = {status.lower(): counts.get(status, 0) for status in OrderStatus.values}

    return {
        'orders': {
            'today': totals['orders_today'],
            'thisWeek': totals['orders_thisWeek'],
            'thisMonth': totals['orders_thisMonth'],
            'total': totals['orders_total'],
        },
        'revenue': {
            'today': totals['revenue_today'],
            'thisWeek': totals['revenue_thisWeek'],
            'thisMonth': totals['revenue_thisMonth'],
            'total': totals['revenue_total'],
        },
        'statusBreakdown': breakdown,
    }
