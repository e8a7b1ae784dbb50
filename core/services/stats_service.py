from __future__ import annotations
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Literal, Optional

from pydantic import BaseModel, Field

from core.models.expense import Expense
from core.models.ticket import Ticket

DateFilter = Literal["today", "yesterday", "custom"]


class Statistics(BaseModel):
    day: date
    total_bons: Decimal = Decimal(0)
    total_frais: Decimal = Decimal(0)
    bons: List[Ticket] = Field(default_factory=list)
    frais: List[Expense] = Field(default_factory=list)

    @property
    def profit(self) -> Decimal:
        return self.total_bons - self.total_frais

    @property
    def bons_count(self) -> int:
        return len(self.bons)

    @property
    def frais_count(self) -> int:
        return len(self.frais)


class Dashboard(BaseModel):
    stats: Statistics
    recent_bons: List[Ticket] = Field(default_factory=list)
    recent_frais: List[Expense] = Field(default_factory=list)


def resolve_day(flt: DateFilter, custom: Optional[date] = None, today: Optional[date] = None) -> date:
    today = today or date.today()
    if flt == "yesterday":
        return today - timedelta(days=1)
    if flt == "custom" and custom is not None:
        return custom.date() if isinstance(custom, datetime) else custom
    return today


def _same_day(dt: datetime, day: date) -> bool:
    return dt.date() == day


def compute_statistics(tickets: Iterable[Ticket], expenses: Iterable[Expense], day: date) -> Statistics:
    bons = [t for t in tickets if _same_day(t.date, day)]
    frais = [e for e in expenses if _same_day(e.date, day)]
    return Statistics(
        day=day,
        total_bons=sum((t.gross_amount for t in bons), Decimal(0)),
        total_frais=sum((e.price for e in frais), Decimal(0)),
        bons=bons,
        frais=frais,
    )


def dashboard(
    tickets: Iterable[Ticket],
    expenses: Iterable[Expense],
    today: Optional[date] = None,
    recent: int = 5,
) -> Dashboard:
    stats = compute_statistics(tickets, expenses, today or date.today())
    return Dashboard(stats=stats, recent_bons=stats.bons[:recent], recent_frais=stats.frais[:recent])
