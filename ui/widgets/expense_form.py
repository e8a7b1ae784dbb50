from __future__ import annotations
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QLineEdit, QLabel, QDialogButtonBox
)
from typing import Callable, Optional

from core.errors import ValidationError


class ExpenseForm(QDialog):
    def __init__(self, parent=None, on_submit: Optional[Callable[[str, str], object]] = None,
                 currency: str = "DH"):
        super().__init__(parent)
        self.setWindowTitle("Nouveau frais")
        self.setModal(True)
        self._on_submit = on_submit
        self.result_obj = None

        self.ed_description = QLineEdit()
        self.ed_price = QLineEdit()
        self.err_description = QLabel("")
        self.err_price = QLabel("")
        for lbl in (self.err_description, self.err_price):
            lbl.setStyleSheet("color:#d9534f;")
            lbl.hide()

        form = QFormLayout()
        form.addRow("Description", self.ed_description)
        form.addRow("", self.err_description)
        form.addRow(f"Prix ({currency})", self.ed_price)
        form.addRow("", self.err_price)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(btns)

    def accept(self):
        if self._on_submit is None:
            return super().accept()
        self.err_description.hide(); self.err_price.hide()
        try:
            self.result_obj = self._on_submit(self.ed_description.text(), self.ed_price.text())
        except ValidationError as e:
            if "description" in e.errors:
                self.err_description.setText(e.errors["description"]); self.err_description.show()
            if "price" in e.errors:
                self.err_price.setText(e.errors["price"]); self.err_price.show()
            return
        super().accept()
