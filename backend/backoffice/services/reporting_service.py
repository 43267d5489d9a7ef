# Overview: Read-only dashboard metrics and per-region delivery success rates.

from __future__ import annotations

"""
Every figure is recomputed from the orders and leads on each call; nothing is
maintained incrementally. Financials come from order_totals over Delivered
orders only.
"""

from datetime import date

from ..extensions import db
from ..models import Order, Region, WebLead, DeliveryStatus
from ..time_utils import today_utc
from .order_totals import summarize_delivered, status_counts


def _same_day(dt, day: date) -> bool:
    return dt is not None and dt.date() == day


def dashboard_metrics(*, today: date | None = None) -> dict:
    """
    Business-wide dashboard figures over every order and lead, whoever asks.

    - sales_today: total_amount of Delivered orders created today
    - conversion_rate: orders with a lead_id / all leads, in percent
    - reminders_today: Rescheduled orders due today with the reminder on
    """
    today = today or today_utc()
    orders = db.session.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).all()
    leads = db.session.query(WebLead).all()

    summary = summarize_delivered(orders)
    sales_today = sum(
        o.total_amount for o in orders
        if o.delivery_status == DeliveryStatus.DELIVERED and _same_day(o.created_at, today)
    )

    converted = sum(1 for o in orders if o.lead_id is not None)
    conversion_rate = (converted / len(leads) * 100) if leads else 0.0

    reminders = [
        o for o in orders
        if o.delivery_status == DeliveryStatus.RESCHEDULED
        and o.reschedule_date == today
        and o.reminder_enabled
    ]

    return {
        "date": today.isoformat(),
        "sales_today": sales_today,
        "realized_revenue": summary.realized_revenue,
        "logistics_expense": summary.logistics_expense,
        "cost_of_goods": summary.cost_of_goods,
        "net_profit": summary.net_profit,
        "status_counts": status_counts(orders),
        "leads_today": sum(1 for lead in leads if _same_day(lead.created_at, today)),
        "lead_count": len(leads),
        "converted_leads": converted,
        "conversion_rate": round(conversion_rate, 2),
        "reminders_today": [o.to_dict() for o in reminders],
    }


def region_success_rates() -> list[dict]:
    """Per region: delivered / total orders x 100 (0 when a region has no orders)."""
    regions = db.session.query(Region).order_by(Region.name.asc()).all()
    orders = db.session.query(Order.region_id, Order.delivery_status).all()

    totals: dict[int, int] = {}
    delivered: dict[int, int] = {}
    for region_id, status in orders:
        totals[region_id] = totals.get(region_id, 0) + 1
        if status == DeliveryStatus.DELIVERED:
            delivered[region_id] = delivered.get(region_id, 0) + 1

    result = []
    for region in regions:
        total = totals.get(region.id, 0)
        done = delivered.get(region.id, 0)
        result.append({
            "region_id": region.id,
            "name": region.name,
            "total": total,
            "delivered": done,
            "rate": round(done / total * 100, 2) if total else 0.0,
        })
    return result
