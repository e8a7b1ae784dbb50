from __future__ import annotations
from decimal import Decimal
from typing import Dict


class LedgerError(Exception):
    """Base des erreurs métier (bons, frais, stockage)."""


class ValidationError(LedgerError):
    """
    Une ou plusieurs saisies invalides. `errors` associe chaque champ fautif
    à son message, pour affichage champ par champ dans le formulaire.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Saisie invalide : {fields}")


class PaymentOutOfRangeError(LedgerError):
    def __init__(self, amount, remaining: Decimal):
        self.amount = amount
        self.remaining = remaining
        self.valid_range = (Decimal(0), remaining)
        super().__init__(
            f"Montant du versement invalide ({amount}) : "
            f"doit être compris entre 0 et {remaining:.2f}"
        )


class NotFoundError(LedgerError):
    def __init__(self, kind: str, obj_id: str):
        self.kind = kind
        self.obj_id = obj_id
        super().__init__(f"{kind} introuvable : id={obj_id}")


class RemoteStoreError(LedgerError):
    """Échec d'un appel de persistance (réseau, réponse illisible, refus du serveur)."""


class AuthenticationError(LedgerError):
    pass


class NegativeRemainingWarning(UserWarning):
    """Une modification de bon laisse un reste à payer négatif (déjà trop versé)."""
