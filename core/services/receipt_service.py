# core/services/receipt_service.py
from __future__ import annotations
import logging
import os
import re
from pathlib import Path
from shutil import which
from typing import Optional

import pdfkit
from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.config import EXPORTS_DIR, TEMPLATES_DIR, Settings
from core.models.common import money_to_str
from core.models.ticket import Ticket

log = logging.getLogger(__name__)


def _kg(val) -> str:
    return f"{val:.2f}"


def _slug(text: str) -> str:
    text = (text or "").strip()
    text = re.sub(r'[\\/:*?"<>|\n\r\t]', "_", text)
    text = re.sub(r"\s+", " ", text)
    return text or "Client"


def _clean_path(p: str) -> str:
    """Corrige 'C\\:\\Program Files\\...' -> 'C:\\Program Files\\...' et normalise."""
    if not p:
        return ""
    p = p.strip().strip('"').strip("'")
    p = p.replace("\\:", ":")
    return os.path.normpath(p)


class ReceiptService:
    def __init__(self, settings: Settings, templates_dir: Path = TEMPLATES_DIR):
        self.settings = settings
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def find_wkhtmltopdf(self) -> Optional[str]:
        """Ordre : paramètres / env WKHTMLTOPDF, chemins Windows connus, PATH."""
        candidates = [
            self.settings.wkhtmltopdf_path or "",
            r"C:\Program Files\wkhtmltopdf\bin\wkhtmltopdf.exe",
            r"C:\Program Files (x86)\wkhtmltopdf\bin\wkhtmltopdf.exe",
        ]
        for c in candidates:
            path = _clean_path(c)
            if path and Path(path).is_file():
                return path
        found = which("wkhtmltopdf")
        return _clean_path(found) if found else None

    def render_receipt_html(self, t: Ticket) -> str:
        cur = self.settings.currency
        tpl = self.env.get_template("receipt.html")
        ctx = {
            "company": self.settings.company.model_dump(),
            "ticket": {
                "id": t.id,
                "date": t.date.strftime("%d/%m/%Y %H:%M"),
                "client_name": t.client_name,
                "material": t.material,
                "weight_empty": _kg(t.weight_empty),
                "weight_full": _kg(t.weight_full),
                "net_weight": _kg(t.net_weight),
                "unit_price": money_to_str(t.unit_price, cur),
                "gross_amount": money_to_str(t.gross_amount, cur),
                "paid_amount": money_to_str(t.paid_amount, cur),
                "remaining_amount": money_to_str(t.remaining_amount, cur),
                "status_label": t.status_label,
            },
            "payments": [
                {
                    "date": p.date.strftime("%d/%m/%Y %H:%M"),
                    "amount": money_to_str(p.amount, cur),
                    "note": p.note or "",
                }
                for p in t.payments
            ],
        }
        return tpl.render(**ctx)

    def export_receipt_pdf(self, t: Ticket, out_dir: Optional[str] = None) -> str:
        wkhtml = self.find_wkhtmltopdf()
        if not wkhtml:
            raise RuntimeError(
                "wkhtmltopdf introuvable. Installe-le ou renseigne WKHTMLTOPDF / wkhtmltopdf_path."
            )
        html = self.render_receipt_html(t)

        exports_dir = Path(out_dir) if out_dir else (EXPORTS_DIR / "bons")
        exports_dir.mkdir(parents=True, exist_ok=True)
        out_path = exports_dir / f"BON-{t.id} ({_slug(t.client_name)}).pdf"

        config = pdfkit.configuration(wkhtmltopdf=wkhtml)
        options = {"quiet": "", "encoding": "UTF-8"}
        pdfkit.from_string(html, str(out_path), options=options, configuration=config)
        log.info("Reçu exporté : %s", out_path)
        return str(out_path)
