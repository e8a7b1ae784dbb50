# core/services/ledger.py
from __future__ import annotations
import logging
import warnings
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from core.errors import NegativeRemainingWarning, PaymentOutOfRangeError, ValidationError
from core.models.common import now, to_decimal
from core.models.ticket import Payment, Ticket

log = logging.getLogger(__name__)

TicketFields = Tuple[str, Decimal, Decimal, str, Decimal]


def _clean_text(val: Any) -> str:
    return "" if val is None else str(val).strip()


def validate_ticket_fields(
    client: Any,
    weight_empty: Any,
    weight_full: Any,
    material: Any,
    unit_price: Any,
) -> TicketFields:
    """
    Contrôle les saisies d'un bon et renvoie les valeurs nettoyées.
    Toutes les erreurs sont collectées avant de lever ValidationError.
    """
    errors: Dict[str, str] = {}

    client_s = _clean_text(client)
    if not client_s:
        errors["client_name"] = "Le nom du client est obligatoire"

    empty = to_decimal(weight_empty)
    if empty is None:
        errors["weight_empty"] = "Le poids vide est obligatoire"
    elif empty < 0:
        errors["weight_empty"] = "Le poids vide doit être supérieur ou égal à 0"

    full = to_decimal(weight_full)
    if full is None:
        errors["weight_full"] = "Le poids complet est obligatoire"
    elif full <= 0:
        errors["weight_full"] = "Le poids complet doit être supérieur à 0"
    if empty is not None and full is not None and full <= empty:
        errors["weight_full"] = "Le poids complet doit être supérieur au poids vide"

    material_s = _clean_text(material)
    if not material_s:
        errors["material"] = "Le matériel est obligatoire"

    price = to_decimal(unit_price)
    if price is None:
        errors["unit_price"] = "Le prix unitaire est obligatoire"
    elif price <= 0:
        errors["unit_price"] = "Le prix unitaire doit être supérieur à 0"

    if errors:
        raise ValidationError(errors)
    return client_s, empty, full, material_s, price  # type: ignore[return-value]


def create(client, weight_empty, weight_full, material, unit_price) -> Ticket:
    client_s, empty, full, material_s, price = validate_ticket_fields(
        client, weight_empty, weight_full, material, unit_price
    )
    return Ticket(
        client_name=client_s,
        weight_empty=empty,
        weight_full=full,
        material=material_s,
        unit_price=price,
    )


def apply_payment(ticket: Ticket, amount: Any, note: Optional[str] = None) -> Ticket:
    remaining = ticket.remaining_amount
    value = to_decimal(amount)
    if value is None or value <= 0 or value > remaining:
        raise PaymentOutOfRangeError(amount, max(remaining, Decimal(0)))

    pay = Payment(date=now(), amount=value, note=(note or "").strip() or None)
    return ticket.model_copy(update={"payments": [*ticket.payments, pay]})


def suggested_payment(ticket: Ticket) -> Decimal:
    """Reste à payer exact, pour pré-remplir un versement ; 0 si le bon est soldé."""
    return max(ticket.remaining_amount, Decimal(0))


def edit(ticket: Ticket, client, weight_empty, weight_full, material, unit_price) -> Ticket:
    """
    Remplace les champs saisis ; id, date et historique des versements sont conservés.
    Pas de plafonnement : si le déjà-payé dépasse le nouveau montant, le reste
    devient négatif et NegativeRemainingWarning est émis.
    """
    client_s, empty, full, material_s, price = validate_ticket_fields(
        client, weight_empty, weight_full, material, unit_price
    )
    updated = ticket.model_copy(update={
        "client_name": client_s,
        "weight_empty": empty,
        "weight_full": full,
        "material": material_s,
        "unit_price": price,
        "payments": ticket.payments,
    })
    if updated.is_overpaid:
        msg = (f"Bon {updated.id} : reste à payer négatif ({updated.remaining_amount:.2f}) "
               f"après modification, déjà versé {updated.paid_amount:.2f}")
        log.warning(msg)
        warnings.warn(msg, NegativeRemainingWarning, stacklevel=2)
    return updated


def delete(ticket_id: str) -> str:
    # le bon et ses versements partent ensemble : rien d'autre à nettoyer ici
    return ticket_id
