from __future__ import annotations
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QLineEdit, QLabel, QDialogButtonBox
)
from typing import Optional

from core.errors import AuthenticationError
from core.services.auth_service import AuthService, Session


class LoginDialog(QDialog):
    def __init__(self, auth: AuthService, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Web-Pense - Connexion")
        self.setModal(True)
        self.auth = auth
        self.session: Optional[Session] = None

        self.ed_user = QLineEdit()
        self.ed_pass = QLineEdit()
        self.ed_pass.setEchoMode(QLineEdit.EchoMode.Password)
        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color:#d9534f;")

        form = QFormLayout()
        form.addRow("Identifiant", self.ed_user)
        form.addRow("Mot de passe", self.ed_pass)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addWidget(QLabel("Gestion des bons et des frais"))
        lay.addLayout(form)
        lay.addWidget(self.lbl_error)
        lay.addWidget(btns)

    def accept(self):
        try:
            self.session = self.auth.login(self.ed_user.text(), self.ed_pass.text())
        except AuthenticationError as e:
            self.lbl_error.setText(str(e))
            return
        super().accept()
