# Overview: Pure order arithmetic: line/order totals and delivered-order financials.

from __future__ import annotations

"""
No database access here. Everything works on plain numbers or on any object
exposing the OrderItem / Order attribute names, so the same functions serve
services, reports and tests.

Money is integer Naira; no rounding happens anywhere.
"""

from collections import Counter
from dataclasses import dataclass, asdict
from typing import Iterable

from ..models.statuses import DeliveryStatus


@dataclass(frozen=True)
class FinancialSummary:
    realized_revenue: int
    logistics_expense: int
    cost_of_goods: int
    net_profit: int
    delivered_count: int

    def to_dict(self) -> dict:
        return asdict(self)


def line_total(unit_price: int, quantity: int) -> int:
    return unit_price * quantity


def _pair(line) -> tuple[int, int]:
    if isinstance(line, (tuple, list)):
        price, qty = line
        return price, qty
    return line.price_at_order, line.quantity


def order_total(lines: Iterable) -> int:
    """
    Sum of unit price x quantity.

    lines: (unit_price, quantity) pairs or objects with price_at_order/quantity.
    """
    total = 0
    for line in lines:
        price, qty = _pair(line)
        total += line_total(price, qty)
    return total


def order_cogs(order) -> int:
    return sum(item.cost_at_order * item.quantity for item in order.items)


def summarize_delivered(orders: Iterable) -> FinancialSummary:
    """
    Realized figures over Delivered orders only.

    Revenue is the stored total_amount snapshot, never recomputed from lines.
    net_profit = revenue - logistics - cost of goods.
    """
    revenue = logistics = cogs = count = 0
    for order in orders:
        if order.delivery_status != DeliveryStatus.DELIVERED:
            continue
        count += 1
        revenue += order.total_amount
        logistics += order.logistics_cost or 0
        cogs += order_cogs(order)
    return FinancialSummary(
        realized_revenue=revenue,
        logistics_expense=logistics,
        cost_of_goods=cogs,
        net_profit=revenue - logistics - cogs,
        delivered_count=count,
    )


def status_counts(orders: Iterable) -> dict[str, int]:
    """Count per delivery status; every status is present (possibly 0)."""
    counts = Counter(o.delivery_status for o in orders)
    return {status: counts.get(status, 0) for status in DeliveryStatus.ALL}
