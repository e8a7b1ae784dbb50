from __future__ import annotations
import logging
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from core.errors import NotFoundError, RemoteStoreError, ValidationError
from core.models.common import to_decimal
from core.models.expense import Expense
from core.services.auth_service import Session
from core.services.ticket_service import SyncStatus
from core.storage.codec import decode_rows, expense_from_row, expense_to_row
from core.storage.remote_store import Store

log = logging.getLogger(__name__)

KIND = "frais"


def validate_expense(description: Any, price: Any) -> Tuple[str, Decimal]:
    errors: Dict[str, str] = {}
    desc = "" if description is None else str(description).strip()
    if not desc:
        errors["description"] = "La description est obligatoire"
    value = to_decimal(price)
    if value is None:
        errors["price"] = "Le prix est obligatoire"
    elif value <= 0:
        errors["price"] = "Le prix doit être supérieur à 0"
    if errors:
        raise ValidationError(errors)
    return desc, value  # type: ignore[return-value]


def create_expense(description: Any, price: Any) -> Expense:
    desc, value = validate_expense(description, price)
    return Expense(description=desc, price=value)


class ExpenseService:
    def __init__(self, store: Store):
        self.store = store
        self.expenses: List[Expense] = []
        self.sync_status = SyncStatus()

    def load(self) -> List[Expense]:
        try:
            rows = self.store.list(KIND)
        except RemoteStoreError as e:
            log.warning("Chargement des frais impossible : %s", e)
            self.sync_status = SyncStatus(ok=False, message="Erreur de chargement des données")
            raise
        self.expenses = decode_rows(rows, expense_from_row)
        self.sync_status = SyncStatus(message=f"Synchronisé ({len(self.expenses)} frais)")
        return list(self.expenses)

    def total(self) -> Decimal:
        return sum((e.price for e in self.expenses), Decimal(0))

    def add(self, description: Any, price: Any) -> Expense:
        e = create_expense(description, price)
        self.expenses.append(e)
        try:
            self.store.append(KIND, expense_to_row(e))
        except RemoteStoreError as err:
            log.warning("Synchro des frais en échec : %s", err)
            self.sync_status = SyncStatus(ok=False, message="Erreur de synchronisation - nouvelle tentative")
            return e
        self.sync_status = SyncStatus(message=f"Synchronisé ({len(self.expenses)} frais)")
        return e

    def delete(self, expense_id: str, session: Session) -> None:
        if not session.can_delete:
            raise PermissionError("Suppression réservée à l'accès complet")
        if not any(e.id == expense_id for e in self.expenses):
            raise NotFoundError(KIND, expense_id)
        try:
            self.store.remove(KIND, expense_id)
        except NotFoundError:
            raise
        except RemoteStoreError as err:
            log.warning("Synchro des frais en échec : %s", err)
            self.sync_status = SyncStatus(ok=False, message="Erreur de synchronisation - nouvelle tentative")
        else:
            self.sync_status = SyncStatus(message=f"Synchronisé ({len(self.expenses) - 1} frais)")
        self.expenses = [e for e in self.expenses if e.id != expense_id]
