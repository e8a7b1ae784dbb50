from __future__ import annotations
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QLineEdit, QLabel, QDialogButtonBox, QMessageBox
)
from typing import Callable, Dict, Optional

from core.errors import NotFoundError, ValidationError
from core.models.common import money_to_str, to_decimal
from core.models.ticket import Ticket

FIELDS = ("client_name", "weight_empty", "weight_full", "material", "unit_price")


class TicketForm(QDialog):
    """
    Saisie d'un bon. `on_submit(values)` est appelé à la validation ;
    s'il lève ValidationError, les messages s'affichent sous chaque champ et la fenêtre reste ouverte.
    """

    def __init__(self, parent=None, ticket: Optional[Ticket] = None,
                 on_submit: Optional[Callable[[Dict[str, str]], object]] = None,
                 currency: str = "DH"):
        super().__init__(parent)
        self.setWindowTitle("Modifier le bon" if ticket else "Nouveau bon")
        self.setModal(True)
        self._on_submit = on_submit
        self._currency = currency
        self.result_obj = None

        self.edits: Dict[str, QLineEdit] = {f: QLineEdit() for f in FIELDS}
        self.errors: Dict[str, QLabel] = {}
        for f in FIELDS:
            lbl = QLabel("")
            lbl.setStyleSheet("color:#d9534f;")
            lbl.hide()
            self.errors[f] = lbl
            self.edits[f].textChanged.connect(lambda _=None, f=f: self._clear_error(f))
            self.edits[f].textChanged.connect(self._update_preview)

        self.lbl_preview = QLabel("")

        form = QFormLayout()
        for f, title in zip(FIELDS, ("Nom client", "Poids vide (kg)", "Poids complet (kg)",
                                     "Matériel", f"Prix unitaire ({currency})")):
            form.addRow(title, self.edits[f])
            form.addRow("", self.errors[f])
        form.addRow("Montant", self.lbl_preview)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(btns)

        if ticket:
            self.edits["client_name"].setText(ticket.client_name)
            self.edits["weight_empty"].setText(str(ticket.weight_empty))
            self.edits["weight_full"].setText(str(ticket.weight_full))
            self.edits["material"].setText(ticket.material)
            self.edits["unit_price"].setText(str(ticket.unit_price))

    def values(self) -> Dict[str, str]:
        return {f: self.edits[f].text() for f in FIELDS}

    def _clear_error(self, field: str):
        self.errors[field].hide()

    def _update_preview(self):
        v = self.values()
        empty, full, price = (to_decimal(v["weight_empty"]), to_decimal(v["weight_full"]),
                              to_decimal(v["unit_price"]))
        if None in (empty, full, price):
            self.lbl_preview.setText("–")
            return
        self.lbl_preview.setText(money_to_str((full - empty) * price, self._currency))

    def show_errors(self, errors: Dict[str, str]):
        for f, msg in errors.items():
            if f in self.errors:
                self.errors[f].setText(msg)
                self.errors[f].show()

    def accept(self):
        if self._on_submit is None:
            return super().accept()
        try:
            self.result_obj = self._on_submit(self.values())
        except ValidationError as e:
            self.show_errors(e.errors)
            return
        except NotFoundError as e:
            QMessageBox.warning(self, "Bons", str(e))
            self.reject()
            return
        super().accept()
