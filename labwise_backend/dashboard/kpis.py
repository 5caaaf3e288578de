"""
KPI calculations for the lab manager dashboard.

- Turnaround time (received -> verified) over the last 7 days
- Sample rejection rate
- Instrument status counts
- Pending order backlog
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any

from django.db.models import Count, Q
from django.utils import timezone

from labwise_backend.instruments.models import Instrument
from labwise_backend.orders.models import Order, OrderSample, OrderTest

TAT_WINDOW_DAYS = 7


# ============================================================================
# Individual KPIs
# ============================================================================

def get_avg_tat_minutes(days: int = TAT_WINDOW_DAYS) -> int:
    """Mean minutes between sample receipt and test verification, rounded."""
    since = timezone.now() - timedelta(days=days)
    pairs = OrderTest.objects.filter(
        status=OrderTest.STATUS_VERIFIED,
        verified_at__isnull=False,
        sample__received_timestamp__gte=since,
    ).values_list('sample__received_timestamp', 'verified_at')

    minutes = [(verified - received).total_seconds() / 60 for received, verified in pairs]
    if not minutes:
        return 0
    return round(sum(minutes) / len(minutes))


def get_rejection_rate() -> float:
    """Share of all samples that were rejected, in percent with one decimal."""
    counts = OrderSample.objects.aggregate(
        total=Count('id'),
        rejected=Count('id', filter=Q(status=OrderSample.STATUS_REJECTED)),
    )
    if not counts['total']:
        return 0.0
    return round(counts['rejected'] / counts['total'] * 100, 1)


def get_instrument_status_counts() -> list[dict[str, Any]]:
    rows = Instrument.objects.values('status').annotate(count=Count('id')).order_by('status')
    return [{'status': row['status'], 'count': row['count']} for row in rows]


def get_pending_orders_count() -> int:
    return Order.objects.filter(order_status=Order.STATUS_PENDING).count()


# ============================================================================
# Aggregate
# ============================================================================

def get_all_kpis() -> dict[str, Any]:
    return {
        'avg_tat': get_avg_tat_minutes(),
        'rejection_rate': get_rejection_rate(),
        'instrument_status': get_instrument_status_counts(),
        'pending_orders': get_pending_orders_count(),
    }
