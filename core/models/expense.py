from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from decimal import Decimal
from .common import gen_id, now

class Expense(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=gen_id)
    date: datetime = Field(default_factory=now)
    description: str
    price: Decimal
