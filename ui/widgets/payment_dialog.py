from __future__ import annotations
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QLineEdit, QLabel, QDialogButtonBox, QMessageBox
)
from typing import Callable, Optional

from core.errors import NotFoundError, PaymentOutOfRangeError
from core.models.common import money_to_str
from core.models.ticket import Ticket
from core.services import ledger


class PaymentDialog(QDialog):
    """Versement sur un bon ; le montant proposé par défaut est le reste à payer."""

    def __init__(self, parent=None, ticket: Optional[Ticket] = None,
                 on_submit: Optional[Callable[[str, Optional[str]], object]] = None,
                 currency: str = "DH"):
        super().__init__(parent)
        self.setWindowTitle("Versement")
        self.setModal(True)
        self._on_submit = on_submit
        self.result_obj = None

        self.ed_amount = QLineEdit()
        self.ed_note = QLineEdit()
        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color:#d9534f;")
        self.lbl_error.hide()
        self.ed_amount.textChanged.connect(lambda _=None: self.lbl_error.hide())

        form = QFormLayout()
        if ticket:
            form.addRow("Client", QLabel(ticket.client_name))
            form.addRow("Montant", QLabel(money_to_str(ticket.gross_amount, currency)))
            form.addRow("Déjà payé", QLabel(money_to_str(ticket.paid_amount, currency)))
            form.addRow("Reste à payer", QLabel(money_to_str(ticket.remaining_amount, currency)))
            suggested = ledger.suggested_payment(ticket)
            if suggested > 0:
                self.ed_amount.setText(str(suggested))
        form.addRow(f"Montant du versement ({currency})", self.ed_amount)
        form.addRow("Note", self.ed_note)
        form.addRow("", self.lbl_error)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(btns)

    def accept(self):
        if self._on_submit is None:
            return super().accept()
        try:
            self.result_obj = self._on_submit(self.ed_amount.text(), self.ed_note.text().strip() or None)
        except PaymentOutOfRangeError as e:
            self.lbl_error.setText(str(e))
            self.lbl_error.show()
            return
        except NotFoundError as e:
            QMessageBox.warning(self, "Bons", str(e))
            self.reject()
            return
        super().accept()
