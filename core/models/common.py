from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import uuid

def gen_id() -> str:
    return str(uuid.uuid4())

def now() -> datetime:
    # heure locale : le regroupement par jour se fait sur le calendrier local
    return datetime.now()

def to_decimal(val: Any) -> Optional[Decimal]:
    """
    "12,50" / "12.50" / 12.5 / Decimal -> Decimal("12.50").
    None si vide ou illisible. Les floats passent par leur repr str (pas de bruit binaire).
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, Decimal):
        return val if val.is_finite() else None
    s = str(val).strip().replace(" ", "").replace(" ", "").replace(",", ".")
    if s == "":
        return None
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    return d if d.is_finite() else None

def money_to_str(amount: Decimal | float | int | None, currency: str = "DH") -> str:
    d = to_decimal(amount) or Decimal(0)
    return f"{d:.2f} {currency}"