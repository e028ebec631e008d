"""Monthly revenue aggregation over resolved work days."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from daybook.services.calendar_grid import WorkDayRecord
from daybook.services.rates import NET_RATE_FACTOR, ZERO


@dataclass(slots=True)
class BreakdownRow:
    client_name: str
    days: int = 0
    gross_revenue: Decimal = ZERO
    net_revenue: Decimal = ZERO


@dataclass(slots=True)
class MonthlyBreakdown:
    rows: list[BreakdownRow] = field(default_factory=list)
    total_days: int = 0
    total_gross: Decimal = ZERO
    total_net: Decimal = ZERO
    orphaned_days: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total_days == 0


def aggregate_month(records: Iterable[WorkDayRecord]) -> MonthlyBreakdown:
    """Group a month's work days by client name and total them.

    Each row's net is summed day by day from the gross rate, while
    ``total_net`` is derived once from ``total_gross``. Rows are ordered by
    gross revenue, highest first, with ties left in first-seen order.
    Orphaned work days produce no row but are still counted in
    ``total_days``.
    """

    groups: dict[str, BreakdownRow] = {}
    total_days = 0
    orphaned_days = 0

    for record in records:
        total_days += 1
        if record.client_name is None or record.gross_daily_rate is None:
            orphaned_days += 1
            continue

        row = groups.get(record.client_name)
        if row is None:
            row = BreakdownRow(client_name=record.client_name)
            groups[record.client_name] = row

        rate = Decimal(record.gross_daily_rate)
        row.days += 1
        row.gross_revenue += rate
        row.net_revenue += rate * NET_RATE_FACTOR

    # sorted() is stable, so equal gross keeps dict insertion (first-seen) order.
    rows = sorted(groups.values(), key=lambda row: row.gross_revenue, reverse=True)
    total_gross = sum((row.gross_revenue for row in rows), ZERO)

    return MonthlyBreakdown(
        rows=rows,
        total_days=total_days,
        total_gross=total_gross,
        total_net=total_gross * NET_RATE_FACTOR,
        orphaned_days=orphaned_days,
    )
