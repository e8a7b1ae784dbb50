from __future__ import annotations
from PySide6.QtWidgets import QDialog, QVBoxLayout, QHBoxLayout, QTextBrowser, QPushButton, QMessageBox

from core.models.ticket import Ticket
from core.services.receipt_service import ReceiptService


class ReceiptDialog(QDialog):
    """Détail / reçu d'un bon, avec export PDF."""

    def __init__(self, receipts: ReceiptService, ticket: Ticket, parent=None):
        super().__init__(parent)
        self.setWindowTitle(f"Bon {ticket.id}")
        self.resize(640, 720)
        self.receipts = receipts
        self.ticket = ticket

        view = QTextBrowser()
        view.setHtml(receipts.render_receipt_html(ticket))

        btn_pdf = QPushButton("Exporter PDF")
        btn_close = QPushButton("Fermer")
        btn_pdf.clicked.connect(self._export_pdf)
        btn_close.clicked.connect(self.accept)

        bar = QHBoxLayout()
        bar.addStretch(1); bar.addWidget(btn_pdf); bar.addWidget(btn_close)

        lay = QVBoxLayout(self)
        lay.addWidget(view, 1)
        lay.addLayout(bar)

    def _export_pdf(self):
        try:
            out = self.receipts.export_receipt_pdf(self.ticket)
            QMessageBox.information(self, "PDF", f"Fichier généré :\n{out}")
        except Exception as e:
            QMessageBox.critical(self, "PDF", str(e))
