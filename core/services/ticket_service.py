from __future__ import annotations
import logging
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from core.errors import NotFoundError, RemoteStoreError
from core.models.ticket import Ticket
from core.services import ledger
from core.services.auth_service import Session
from core.storage.codec import decode_rows, ticket_from_row, ticket_to_row
from core.storage.remote_store import Store

log = logging.getLogger(__name__)

KIND = "bons"


class SyncStatus(BaseModel):
    ok: bool = True
    message: str = ""


class TicketService:
    """
    Bons en mémoire + persistance. Mise à jour optimiste : l'état calculé par
    le ledger est gardé même si l'écriture distante échoue (statut de synchro en erreur).
    """

    def __init__(self, store: Store):
        self.store = store
        self.tickets: List[Ticket] = []
        self.sync_status = SyncStatus()

    # ----------- lecture -----------
    def load(self) -> List[Ticket]:
        try:
            rows = self.store.list(KIND)
        except RemoteStoreError as e:
            log.warning("Chargement des bons impossible : %s", e)
            self.sync_status = SyncStatus(ok=False, message="Erreur de chargement des données")
            raise
        self.tickets = decode_rows(rows, ticket_from_row)
        self.sync_status = SyncStatus(message=f"Synchronisé ({len(self.tickets)} bons)")
        return list(self.tickets)

    def get(self, ticket_id: str) -> Ticket:
        for t in self.tickets:
            if t.id == ticket_id:
                return t
        raise NotFoundError(KIND, ticket_id)

    def total(self) -> Decimal:
        return sum((t.gross_amount for t in self.tickets), Decimal(0))

    # ----------- écriture -----------
    def _persist(self, write) -> None:
        try:
            write()
        except NotFoundError:
            raise
        except RemoteStoreError as e:
            log.warning("Synchro des bons en échec : %s", e)
            self.sync_status = SyncStatus(ok=False, message="Erreur de synchronisation - nouvelle tentative")
            return
        self.sync_status = SyncStatus(message=f"Synchronisé ({len(self.tickets)} bons)")

    def _replace(self, ticket: Ticket) -> None:
        self.tickets = [ticket if t.id == ticket.id else t for t in self.tickets]

    def add(self, client, weight_empty, weight_full, material, unit_price) -> Ticket:
        t = ledger.create(client, weight_empty, weight_full, material, unit_price)
        self.tickets.append(t)
        self._persist(lambda: self.store.append(KIND, ticket_to_row(t)))
        return t

    def _save_existing(self, t: Ticket) -> Ticket:
        previous = self.tickets
        self._replace(t)
        try:
            self._persist(lambda: self.store.update(KIND, t.id, ticket_to_row(t)))
        except NotFoundError:
            self.tickets = previous
            raise
        return t

    def edit(self, ticket_id: str, client, weight_empty, weight_full, material, unit_price) -> Ticket:
        current = self.get(ticket_id)
        t = ledger.edit(current, client, weight_empty, weight_full, material, unit_price)
        return self._save_existing(t)

    def pay(self, ticket_id: str, amount, note: Optional[str] = None) -> Ticket:
        current = self.get(ticket_id)
        t = ledger.apply_payment(current, amount, note)
        return self._save_existing(t)

    def delete(self, ticket_id: str, session: Session) -> None:
        if not session.can_delete:
            raise PermissionError("Suppression réservée à l'accès complet")
        removed = ledger.delete(self.get(ticket_id).id)
        previous = self.tickets
        self.tickets = [t for t in self.tickets if t.id != removed]
        try:
            self._persist(lambda: self.store.remove(KIND, removed))
        except NotFoundError:
            self.tickets = previous
            raise
