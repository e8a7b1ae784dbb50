# Statistics and dashboard: day filters, totals, profit

from datetime import date, datetime
from decimal import Decimal

from core.models.expense import Expense
from core.services.stats_service import compute_statistics, dashboard, resolve_day
from tests.conftest import make_ticket

TODAY = date(2026, 10, 19)


def expense(day: datetime, price: str) -> Expense:
    return Expense(date=day, description="Frais", price=Decimal(price))


class TestResolveDay:
    def test_filters(self):
        assert resolve_day("today", today=TODAY) == TODAY
        assert resolve_day("yesterday", today=TODAY) == date(2026, 10, 18)
        assert resolve_day("custom", date(2026, 1, 3), today=TODAY) == date(2026, 1, 3)

    def test_custom_without_date_falls_back_to_today(self):
        assert resolve_day("custom", None, today=TODAY) == TODAY


class TestStatistics:
    def test_totals_for_one_day(self):
        tickets = [
            make_ticket(datetime(2026, 10, 19, 8, 0), price="100"),
            make_ticket(datetime(2026, 10, 19, 23, 59), price="50", payments=["50"]),
            make_ticket(datetime(2026, 10, 18, 12, 0), price="999"),
        ]
        expenses = [expense(datetime(2026, 10, 19, 9, 0), "30"), expense(datetime(2026, 10, 17), "5")]
        s = compute_statistics(tickets, expenses, TODAY)
        assert s.total_bons == 150
        assert s.total_frais == 30
        assert s.profit == 120
        assert (s.bons_count, s.frais_count) == (2, 1)

    def test_negative_profit_and_empty_day(self):
        s = compute_statistics([], [expense(datetime(2026, 10, 19), "12.5")], TODAY)
        assert s.profit == Decimal("-12.5")
        empty = compute_statistics([], [], date(2020, 1, 1))
        assert (empty.total_bons, empty.total_frais, empty.profit) == (0, 0, 0)


class TestDashboard:
    def test_recent_lists_limited(self):
        tickets = [make_ticket(datetime(2026, 10, 19, h, 0)) for h in range(8)]
        d = dashboard(tickets, [], today=TODAY, recent=5)
        assert d.stats.bons_count == 8
        assert len(d.recent_bons) == 5
        assert d.recent_bons[0].date.hour == 0
