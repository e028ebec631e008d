from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from daybook.services.calendar_grid import WorkDayRecord
from daybook.services.revenue_aggregator import aggregate_month


def _record(day: int, name: str | None, rate: str | None, client_id: uuid.UUID | None = None) -> WorkDayRecord:
    return WorkDayRecord(
        work_day_id=uuid.uuid4(),
        day=date(2024, 3, day),
        client_id=client_id or uuid.uuid4(),
        client_name=name,
        gross_daily_rate=Decimal(rate) if rate is not None else None,
    )


def test_two_clients_breakdown_and_totals() -> None:
    client_a = uuid.uuid4()
    client_b = uuid.uuid4()
    records = [
        _record(4, "A", "300", client_a),
        _record(5, "A", "300", client_a),
        _record(6, "B", "200", client_b),
    ]

    breakdown = aggregate_month(records)

    assert [(row.client_name, row.days, row.gross_revenue, row.net_revenue) for row in breakdown.rows] == [
        ("A", 2, Decimal("600"), Decimal("390")),
        ("B", 1, Decimal("200"), Decimal("130")),
    ]
    assert breakdown.total_days == 3
    assert breakdown.total_gross == Decimal("800")
    assert breakdown.total_net == Decimal("520")
    assert breakdown.orphaned_days == 0
    assert not breakdown.is_empty


def test_empty_month() -> None:
    breakdown = aggregate_month([])

    assert breakdown.rows == []
    assert breakdown.total_days == 0
    assert breakdown.total_gross == Decimal("0")
    assert breakdown.total_net == Decimal("0")
    assert breakdown.is_empty


def test_rows_sorted_by_gross_descending_with_stable_ties() -> None:
    records = [
        _record(1, "Small", "100"),
        _record(2, "Tie first", "400"),
        _record(3, "Big", "900"),
        _record(4, "Tie second", "400"),
    ]

    breakdown = aggregate_month(records)

    assert [row.client_name for row in breakdown.rows] == ["Big", "Tie first", "Tie second", "Small"]


def test_clients_sharing_a_name_collapse_into_one_row() -> None:
    records = [
        _record(1, "Acme", "300"),
        _record(2, "Acme", "100"),
    ]

    breakdown = aggregate_month(records)

    assert len(breakdown.rows) == 1
    row = breakdown.rows[0]
    assert row.days == 2
    assert row.gross_revenue == Decimal("400")
    assert row.net_revenue == Decimal("260")


def test_orphaned_days_counted_but_not_grouped() -> None:
    records = [
        _record(1, "Acme", "300"),
        _record(2, None, None),
        _record(3, None, None),
    ]

    breakdown = aggregate_month(records)

    assert [row.client_name for row in breakdown.rows] == ["Acme"]
    assert breakdown.total_days == 3
    assert breakdown.orphaned_days == 2
    assert breakdown.total_gross == Decimal("300")
    assert sum(row.days for row in breakdown.rows) == 1


def test_only_orphaned_days_is_not_empty() -> None:
    breakdown = aggregate_month([_record(1, None, None)])

    assert breakdown.rows == []
    assert breakdown.total_days == 1
    assert not breakdown.is_empty


def test_row_net_is_summed_per_day_and_total_net_from_gross() -> None:
    records = [_record(day, "Cents", "0.01") for day in range(1, 4)]

    breakdown = aggregate_month(records)

    row = breakdown.rows[0]
    assert row.net_revenue == Decimal("0.0065") * 3
    assert breakdown.total_net == Decimal("0.03") * Decimal("0.65")
    assert row.net_revenue == breakdown.total_net


def test_zero_rate_client_still_gets_a_row() -> None:
    breakdown = aggregate_month([_record(1, "Pro bono", "0"), _record(2, "Paid", "50")])

    assert [row.client_name for row in breakdown.rows] == ["Paid", "Pro bono"]
    assert breakdown.rows[1].days == 1
    assert breakdown.rows[1].gross_revenue == Decimal("0")
