from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import List, Literal, Optional
from datetime import datetime
from decimal import Decimal
from .common import gen_id, now

TicketStatus = Literal["UNPAID", "PARTIAL", "PAID"]

STATUS_LABELS = {
    "UNPAID": "Impayé",
    "PARTIAL": "Payé partiellement",
    "PAID": "Payé",
}

class Payment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=gen_id)
    date: datetime = Field(default_factory=now)
    amount: Decimal
    note: Optional[str] = None

class Ticket(BaseModel):
    """
    Bon de pesée. Seuls les champs saisis sont stockés ;
    montant, payé, reste et statut sont toujours recalculés.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=gen_id)
    date: datetime = Field(default_factory=now)
    client_name: str
    weight_empty: Decimal
    weight_full: Decimal
    material: str
    unit_price: Decimal
    payments: List[Payment] = Field(default_factory=list)

    @computed_field
    @property
    def net_weight(self) -> Decimal:
        return self.weight_full - self.weight_empty

    @computed_field
    @property
    def gross_amount(self) -> Decimal:
        return self.net_weight * self.unit_price

    @computed_field
    @property
    def paid_amount(self) -> Decimal:
        return sum((p.amount for p in self.payments), Decimal(0))

    @computed_field
    @property
    def remaining_amount(self) -> Decimal:
        return self.gross_amount - self.paid_amount

    @computed_field
    @property
    def status(self) -> TicketStatus:
        # égalité stricte à zéro (Decimal : pas d'epsilon nécessaire) ;
        # un reste négatif après modification compte comme soldé
        if self.remaining_amount <= 0:
            return "PAID"
        if self.paid_amount > 0:
            return "PARTIAL"
        return "UNPAID"

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]

    @property
    def is_overpaid(self) -> bool:
        return self.remaining_amount < 0
