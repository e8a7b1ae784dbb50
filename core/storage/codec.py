from __future__ import annotations

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as SchemaError

from core.models.common import now, to_decimal
from core.models.expense import Expense
from core.models.ticket import Payment, Ticket

log = logging.getLogger(__name__)

STATUS_TO_SHEET = {"UNPAID": "impaye", "PARTIAL": "paye_partiel", "PAID": "paye"}

# clé applicative -> en-tête de colonne de la feuille
TICKET_HEADERS = {
    "id": "ID",
    "date": "Date",
    "nomClient": "Nom Client",
    "poidsVide": "Poids Vide",
    "poidsComplet": "Poids Complet",
    "materiel": "Materiel",
    "prixUnitaire": "Prix Unitaire",
    "montant": "Montant",
    "statut": "Statut",
    "versements": "Versements",
    "montantPaye": "Montant Paye",
    "montantRestant": "Montant Restant",
}
EXPENSE_HEADERS = {
    "id": "ID",
    "date": "Date",
    "description": "Description",
    "prix": "Prix",
}


def _get(row: Mapping[str, Any], key: str, headers: Mapping[str, str]) -> Any:
    val = row.get(key)
    if val is None or val == "":
        val = row.get(headers.get(key, key))
    return val


def _num(d: Decimal) -> float | int:
    # la feuille stocke des nombres, pas des chaînes
    return int(d) if d == d.to_integral_value() else float(d)


def parse_date(val: Any) -> Optional[datetime]:
    """ISO 8601 (avec ou sans 'Z') ou 'jj/mm/aaaa' tel qu'écrit par le script de la feuille."""
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val
    if isinstance(val, date):
        return datetime.combine(val, datetime.min.time())
    s = str(val).strip()
    try:
        return datetime.strptime(s, "%d/%m/%Y")
    except ValueError:
        pass
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def _load_payments(raw: Any) -> List[Dict[str, Any]]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            log.warning("Versements illisibles, ignorés : %r", raw)
            return []
    if not isinstance(raw, list):
        return []
    payments = [p for p in raw if isinstance(p, dict)]
    if len(payments) != len(raw):
        log.warning("Versements non conformes ignorés : %r", raw)
    return payments


# ---------------- Bons ---------------- #

def ticket_to_row(t: Ticket) -> Dict[str, Any]:
    payments = [
        {
            "id": p.id,
            "date": p.date.isoformat(),
            "montant": _num(p.amount),
            "note": p.note,
        }
        for p in t.payments
    ]
    return {
        "id": t.id,
        "date": t.date.isoformat(),
        "nomClient": t.client_name,
        "poidsVide": _num(t.weight_empty),
        "poidsComplet": _num(t.weight_full),
        "materiel": t.material,
        "prixUnitaire": _num(t.unit_price),
        "montant": _num(t.gross_amount),
        "statut": STATUS_TO_SHEET[t.status],
        "versements": json.dumps(payments, ensure_ascii=False),
        "montantPaye": _num(t.paid_amount),
        "montantRestant": _num(t.remaining_amount),
    }


def ticket_from_row(row: Mapping[str, Any]) -> Ticket:
    """
    Reconstruit un bon depuis une ligne. Montant, payé, reste et statut
    stockés sont ignorés : ils sont recalculés à partir des champs.
    Lève pydantic.ValidationError si la ligne est inexploitable.
    """
    payments = []
    for p in _load_payments(_get(row, "versements", TICKET_HEADERS)):
        payments.append(Payment(
            id=str(p.get("id") or ""),
            date=parse_date(p.get("date")) or now(),
            amount=to_decimal(p.get("montant", p.get("amount"))),
            note=p.get("note") or None,
        ))
    return Ticket(
        id=str(_get(row, "id", TICKET_HEADERS) or ""),
        date=parse_date(_get(row, "date", TICKET_HEADERS)) or now(),
        client_name=str(_get(row, "nomClient", TICKET_HEADERS) or ""),
        weight_empty=to_decimal(_get(row, "poidsVide", TICKET_HEADERS)) or Decimal(0),
        weight_full=to_decimal(_get(row, "poidsComplet", TICKET_HEADERS)) or Decimal(0),
        material=str(_get(row, "materiel", TICKET_HEADERS) or ""),
        unit_price=to_decimal(_get(row, "prixUnitaire", TICKET_HEADERS)) or Decimal(0),
        payments=payments,
    )


# ---------------- Frais ---------------- #

def expense_to_row(e: Expense) -> Dict[str, Any]:
    return {
        "id": e.id,
        "date": e.date.isoformat(),
        "description": e.description,
        "prix": _num(e.price),
    }


def expense_from_row(row: Mapping[str, Any]) -> Expense:
    return Expense(
        id=str(_get(row, "id", EXPENSE_HEADERS) or ""),
        date=parse_date(_get(row, "date", EXPENSE_HEADERS)) or now(),
        description=str(_get(row, "description", EXPENSE_HEADERS) or ""),
        price=to_decimal(_get(row, "prix", EXPENSE_HEADERS)) or Decimal(0),
    )


def decode_rows(rows, decoder) -> list:
    """Décode une liste de lignes en ignorant celles qui ne passent pas la validation."""
    out = []
    for r in rows:
        try:
            out.append(decoder(r))
        except SchemaError as e:
            log.warning("Ligne ignorée (%s) : %s", r.get("id") or r.get("ID"), e.error_count())
            continue
    return out
