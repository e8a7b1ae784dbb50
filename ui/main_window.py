from __future__ import annotations
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QTabWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QMessageBox, QTableWidget, QTableWidgetItem,
    QHeaderView, QGroupBox, QDialog, QComboBox, QDateEdit
)
from PySide6.QtCore import QDate
import logging

from core.config import Settings
from core.errors import NotFoundError, RemoteStoreError
from core.models.common import money_to_str
from core.services.auth_service import AuthService, Session
from core.services.expense_service import ExpenseService
from core.services.receipt_service import ReceiptService
from core.services.stats_service import compute_statistics, dashboard, resolve_day
from core.services.ticket_service import TicketService
from ui.widgets.expense_form import ExpenseForm
from ui.widgets.payment_dialog import PaymentDialog
from ui.widgets.receipt_dialog import ReceiptDialog
from ui.widgets.ticket_form import TicketForm

log = logging.getLogger(__name__)


def _table(headers) -> QTableWidget:
    tbl = QTableWidget(0, len(headers))
    tbl.setHorizontalHeaderLabels(headers)
    tbl.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
    tbl.setSelectionBehavior(tbl.SelectionBehavior.SelectRows)
    tbl.setEditTriggers(tbl.EditTrigger.NoEditTriggers)
    return tbl


class MainWindow(QMainWindow):
    def __init__(self, settings: Settings, store, auth: AuthService, session: Session):
        super().__init__()
        self.setWindowTitle("Web-Pense - Bons & Frais")
        self.resize(1280, 800)
        self.settings = settings
        self.cur = settings.currency
        self.auth = auth
        self.session = session

        self.ticket_service = TicketService(store)
        self.expense_service = ExpenseService(store)
        self.receipt_service = ReceiptService(settings)

        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)

        if session.can_view_dashboard:
            self.tabs.addTab(self._dashboard_tab(), "Tableau de bord")
        self.tabs.addTab(self._tickets_tab(), "Bons")
        self.tabs.addTab(self._expenses_tab(), "Frais")
        if session.can_view_statistics:
            self.tabs.addTab(self._statistics_tab(), "Statistiques")

        btn_logout = QPushButton("Déconnexion")
        btn_logout.clicked.connect(self._logout)
        self.tabs.setCornerWidget(btn_logout)

        self._reload()

    # ==================== DONNÉES ====================
    def _reload(self):
        for svc in (self.ticket_service, self.expense_service):
            try:
                svc.load()
            except RemoteStoreError as e:
                QMessageBox.warning(self, "Synchronisation", str(e))
        self._refresh_all()

    def _refresh_all(self):
        self._refresh_tickets()
        self._refresh_expenses()
        if self.session.can_view_dashboard:
            self._refresh_dashboard()
        if self.session.can_view_statistics:
            self._refresh_statistics()

    def _logout(self):
        self.session = self.auth.logout()
        self.close()

    # ==================== TABLEAU DE BORD ====================
    def _dashboard_tab(self):
        w = QWidget(); root = QVBoxLayout(w)
        self.lbl_dash = QLabel("")
        root.addWidget(self.lbl_dash)

        grp_b = QGroupBox("Bons récents"); lay_b = QVBoxLayout(grp_b)
        self.tbl_dash_bons = _table(["Client", "Matériel", "Montant"])
        lay_b.addWidget(self.tbl_dash_bons)
        grp_f = QGroupBox("Frais récents"); lay_f = QVBoxLayout(grp_f)
        self.tbl_dash_frais = _table(["Description", "Prix"])
        lay_f.addWidget(self.tbl_dash_frais)

        root.addWidget(grp_b, 1); root.addWidget(grp_f, 1)
        return w

    def _refresh_dashboard(self):
        d = dashboard(self.ticket_service.tickets, self.expense_service.expenses)
        s = d.stats
        self.lbl_dash.setText(
            f"Aujourd'hui : Bons {money_to_str(s.total_bons, self.cur)} ({s.bons_count}) | "
            f"Frais {money_to_str(s.total_frais, self.cur)} ({s.frais_count}) | "
            f"Bénéfice {money_to_str(s.profit, self.cur)}"
        )
        self.tbl_dash_bons.setRowCount(0)
        for t in d.recent_bons:
            r = self.tbl_dash_bons.rowCount(); self.tbl_dash_bons.insertRow(r)
            self.tbl_dash_bons.setItem(r, 0, QTableWidgetItem(t.client_name))
            self.tbl_dash_bons.setItem(r, 1, QTableWidgetItem(t.material))
            self.tbl_dash_bons.setItem(r, 2, QTableWidgetItem(money_to_str(t.gross_amount, self.cur)))
        self.tbl_dash_frais.setRowCount(0)
        for e in d.recent_frais:
            r = self.tbl_dash_frais.rowCount(); self.tbl_dash_frais.insertRow(r)
            self.tbl_dash_frais.setItem(r, 0, QTableWidgetItem(e.description))
            self.tbl_dash_frais.setItem(r, 1, QTableWidgetItem(money_to_str(e.price, self.cur)))

    # ==================== BONS ====================
    def _tickets_tab(self):
        w = QWidget(); root = QVBoxLayout(w)
        bar = QHBoxLayout()
        btn_new = QPushButton("Nouveau bon")
        btn_edit = QPushButton("Modifier")
        btn_pay = QPushButton("Versement")
        btn_view = QPushButton("Détails / Reçu")
        btn_del = QPushButton("Supprimer")
        btn_sync = QPushButton("Recharger")
        for b in (btn_new, btn_edit, btn_pay, btn_view): bar.addWidget(b)
        if self.session.can_delete:
            bar.addWidget(btn_del)
        bar.addStretch(1); bar.addWidget(btn_sync)
        root.addLayout(bar)

        self.lbl_ticket_sync = QLabel("")
        root.addWidget(self.lbl_ticket_sync)

        self.tbl_tickets = _table(["Date", "Client", "Poids vide", "Poids complet", "Matériel",
                                   "Prix unitaire", "Montant", "Payé", "Reste", "Statut", "ID"])
        root.addWidget(self.tbl_tickets, 1)
        self.lbl_ticket_total = QLabel("")
        root.addWidget(self.lbl_ticket_total)

        btn_new.clicked.connect(self._ticket_new)
        btn_edit.clicked.connect(self._ticket_edit)
        btn_pay.clicked.connect(self._ticket_pay)
        btn_view.clicked.connect(self._ticket_view)
        btn_del.clicked.connect(self._ticket_delete)
        btn_sync.clicked.connect(self._reload)
        return w

    def _refresh_tickets(self):
        self.tbl_tickets.setRowCount(0)
        for t in self.ticket_service.tickets:
            r = self.tbl_tickets.rowCount(); self.tbl_tickets.insertRow(r)
            cells = [
                t.date.strftime("%d/%m/%Y"), t.client_name,
                f"{t.weight_empty:.2f} kg", f"{t.weight_full:.2f} kg", t.material,
                money_to_str(t.unit_price, self.cur), money_to_str(t.gross_amount, self.cur),
                money_to_str(t.paid_amount, self.cur), money_to_str(t.remaining_amount, self.cur),
                t.status_label, t.id,
            ]
            for c, val in enumerate(cells):
                self.tbl_tickets.setItem(r, c, QTableWidgetItem(val))
        self.tbl_tickets.resizeRowsToContents()
        self.lbl_ticket_total.setText(f"Total : {money_to_str(self.ticket_service.total(), self.cur)}")
        self._show_sync(self.lbl_ticket_sync, self.ticket_service.sync_status)

    def _show_sync(self, lbl: QLabel, status):
        lbl.setText(status.message)
        lbl.setStyleSheet("" if status.ok else "color:#d9534f;")

    def _selected_ticket_id(self):
        row = self.tbl_tickets.currentRow()
        if row < 0: return None
        return self.tbl_tickets.item(row, 10).text()

    def _ticket_new(self):
        dlg = TicketForm(self, on_submit=lambda v: self.ticket_service.add(
            v["client_name"], v["weight_empty"], v["weight_full"], v["material"], v["unit_price"]
        ), currency=self.cur)
        if dlg.exec() == QDialog.Accepted:
            self._refresh_all()

    def _ticket_edit(self):
        tid = self._selected_ticket_id()
        if not tid:
            QMessageBox.information(self, "Bons", "Sélectionne une ligne d’abord."); return
        try:
            current = self.ticket_service.get(tid)
        except NotFoundError as e:
            QMessageBox.warning(self, "Bons", str(e)); return
        dlg = TicketForm(self, ticket=current, on_submit=lambda v: self.ticket_service.edit(
            tid, v["client_name"], v["weight_empty"], v["weight_full"], v["material"], v["unit_price"]
        ), currency=self.cur)
        if dlg.exec() == QDialog.Accepted:
            t = dlg.result_obj
            if t is not None and t.is_overpaid:
                QMessageBox.warning(self, "Bons", "Attention : le déjà-payé dépasse le nouveau montant.")
            self._refresh_all()

    def _ticket_pay(self):
        tid = self._selected_ticket_id()
        if not tid:
            QMessageBox.information(self, "Bons", "Sélectionne une ligne d’abord."); return
        try:
            current = self.ticket_service.get(tid)
        except NotFoundError as e:
            QMessageBox.warning(self, "Bons", str(e)); return
        dlg = PaymentDialog(self, ticket=current,
                            on_submit=lambda amount, note: self.ticket_service.pay(tid, amount, note),
                            currency=self.cur)
        if dlg.exec() == QDialog.Accepted:
            self._refresh_all()

    def _ticket_view(self):
        tid = self._selected_ticket_id()
        if not tid:
            QMessageBox.information(self, "Bons", "Sélectionne une ligne d’abord."); return
        try:
            current = self.ticket_service.get(tid)
        except NotFoundError as e:
            QMessageBox.warning(self, "Bons", str(e)); return
        ReceiptDialog(self.receipt_service, current, self).exec()

    def _ticket_delete(self):
        tid = self._selected_ticket_id()
        if not tid:
            QMessageBox.information(self, "Bons", "Sélectionne une ligne d’abord."); return
        if QMessageBox.question(self, "Suppression", "Supprimer ce bon et ses versements ?") == QMessageBox.Yes:
            try:
                self.ticket_service.delete(tid, self.session)
            except (NotFoundError, PermissionError) as e:
                QMessageBox.warning(self, "Bons", str(e))
            self._refresh_all()

    # ==================== FRAIS ====================
    def _expenses_tab(self):
        w = QWidget(); root = QVBoxLayout(w)
        bar = QHBoxLayout()
        btn_new = QPushButton("Nouveau frais")
        btn_del = QPushButton("Supprimer")
        bar.addWidget(btn_new)
        if self.session.can_delete:
            bar.addWidget(btn_del)
        bar.addStretch(1)
        root.addLayout(bar)

        self.lbl_expense_sync = QLabel("")
        root.addWidget(self.lbl_expense_sync)
        self.tbl_expenses = _table(["Date", "Description", "Prix", "ID"])
        root.addWidget(self.tbl_expenses, 1)
        self.lbl_expense_total = QLabel("")
        root.addWidget(self.lbl_expense_total)

        btn_new.clicked.connect(self._expense_new)
        btn_del.clicked.connect(self._expense_delete)
        return w

    def _refresh_expenses(self):
        self.tbl_expenses.setRowCount(0)
        for e in self.expense_service.expenses:
            r = self.tbl_expenses.rowCount(); self.tbl_expenses.insertRow(r)
            self.tbl_expenses.setItem(r, 0, QTableWidgetItem(e.date.strftime("%d/%m/%Y")))
            self.tbl_expenses.setItem(r, 1, QTableWidgetItem(e.description))
            self.tbl_expenses.setItem(r, 2, QTableWidgetItem(money_to_str(e.price, self.cur)))
            self.tbl_expenses.setItem(r, 3, QTableWidgetItem(e.id))
        self.tbl_expenses.resizeRowsToContents()
        self.lbl_expense_total.setText(f"Total : {money_to_str(self.expense_service.total(), self.cur)}")
        self._show_sync(self.lbl_expense_sync, self.expense_service.sync_status)

    def _expense_new(self):
        dlg = ExpenseForm(self, on_submit=self.expense_service.add, currency=self.cur)
        if dlg.exec() == QDialog.Accepted:
            self._refresh_all()

    def _expense_delete(self):
        row = self.tbl_expenses.currentRow()
        if row < 0:
            QMessageBox.information(self, "Frais", "Sélectionne une ligne d’abord."); return
        eid = self.tbl_expenses.item(row, 3).text()
        if QMessageBox.question(self, "Suppression", "Supprimer ce frais ?") == QMessageBox.Yes:
            try:
                self.expense_service.delete(eid, self.session)
            except (NotFoundError, PermissionError) as e:
                QMessageBox.warning(self, "Frais", str(e))
            self._refresh_all()

    # ==================== STATISTIQUES ====================
    def _statistics_tab(self):
        w = QWidget(); root = QVBoxLayout(w)
        bar = QHBoxLayout()
        self.cb_filter = QComboBox()
        self.cb_filter.addItem("Aujourd'hui", "today")
        self.cb_filter.addItem("Hier", "yesterday")
        self.cb_filter.addItem("Date personnalisée", "custom")
        self.dt_custom = QDateEdit()
        self.dt_custom.setCalendarPopup(True)
        self.dt_custom.setDate(QDate.currentDate())
        self.dt_custom.setMaximumDate(QDate.currentDate())
        bar.addWidget(QLabel("Période :")); bar.addWidget(self.cb_filter); bar.addWidget(self.dt_custom)
        bar.addStretch(1)
        root.addLayout(bar)

        self.lbl_stats = QLabel("")
        root.addWidget(self.lbl_stats)
        self.tbl_stats_bons = _table(["Client", "Matériel", "Montant", "Statut"])
        self.tbl_stats_frais = _table(["Description", "Prix"])
        root.addWidget(self.tbl_stats_bons, 1)
        root.addWidget(self.tbl_stats_frais, 1)

        self.cb_filter.currentIndexChanged.connect(self._refresh_statistics)
        self.dt_custom.dateChanged.connect(self._refresh_statistics)
        return w

    def _refresh_statistics(self):
        flt = self.cb_filter.currentData()
        self.dt_custom.setEnabled(flt == "custom")
        day = resolve_day(flt, self.dt_custom.date().toPython())
        s = compute_statistics(self.ticket_service.tickets, self.expense_service.expenses, day)
        self.lbl_stats.setText(
            f"{day.strftime('%d/%m/%Y')} : Bons {money_to_str(s.total_bons, self.cur)} ({s.bons_count}) | "
            f"Frais {money_to_str(s.total_frais, self.cur)} ({s.frais_count}) | "
            f"Bénéfice {money_to_str(s.profit, self.cur)}"
        )
        self.lbl_stats.setStyleSheet("color:#5cb85c;" if s.profit >= 0 else "color:#d9534f;")
        self.tbl_stats_bons.setRowCount(0)
        for t in s.bons:
            r = self.tbl_stats_bons.rowCount(); self.tbl_stats_bons.insertRow(r)
            self.tbl_stats_bons.setItem(r, 0, QTableWidgetItem(t.client_name))
            self.tbl_stats_bons.setItem(r, 1, QTableWidgetItem(t.material))
            self.tbl_stats_bons.setItem(r, 2, QTableWidgetItem(money_to_str(t.gross_amount, self.cur)))
            self.tbl_stats_bons.setItem(r, 3, QTableWidgetItem(t.status_label))
        self.tbl_stats_frais.setRowCount(0)
        for e in s.frais:
            r = self.tbl_stats_frais.rowCount(); self.tbl_stats_frais.insertRow(r)
            self.tbl_stats_frais.setItem(r, 0, QTableWidgetItem(e.description))
            self.tbl_stats_frais.setItem(r, 1, QTableWidgetItem(money_to_str(e.price, self.cur)))
