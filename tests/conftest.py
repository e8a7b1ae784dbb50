# Web-Pense test suite - shared fixtures
#
# - settings pointing at a temporary data directory
# - local JSON store
# - stores that fail on purpose (sync error / missing row)

from datetime import datetime
from decimal import Decimal

import pytest

from core.config import Settings
from core.errors import NotFoundError, RemoteStoreError
from core.models.ticket import Payment, Ticket
from core.services.auth_service import Session
from core.storage.json_store import JsonStore


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("WEBPENSE_DATA_DIR", "WEBPENSE_STORE", "WEBPENSE_APPS_SCRIPT_URL",
                "WEBPENSE_TIMEOUT", "WKHTMLTOPDF"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path, store="json")


@pytest.fixture
def store(tmp_path) -> JsonStore:
    return JsonStore(tmp_path / "store", backup_enabled=False)


@pytest.fixture
def admin() -> Session:
    return Session(username="admin", role="full")


@pytest.fixture
def agent() -> Session:
    return Session(username="agent", role="limited")


def make_ticket(day: datetime, price="10", payments=()) -> Ticket:
    return Ticket(
        date=day,
        client_name="Client",
        weight_empty=Decimal("0"),
        weight_full=Decimal("1"),
        material="Cuivre",
        unit_price=Decimal(price),
        payments=[Payment(amount=Decimal(a)) for a in payments],
    )


class FailingStore:
    """Tout appel échoue comme un réseau coupé."""

    def list(self, kind):
        raise RemoteStoreError("réseau indisponible")

    def append(self, kind, record):
        raise RemoteStoreError("réseau indisponible")

    def update(self, kind, obj_id, record):
        raise RemoteStoreError("réseau indisponible")

    def remove(self, kind, obj_id):
        raise RemoteStoreError("réseau indisponible")

    def check_connection(self):
        return False


class MissingRowStore(FailingStore):
    """Accepte les ajouts mais ne retrouve jamais la ligne à modifier."""

    def append(self, kind, record):
        return None

    def update(self, kind, obj_id, record):
        raise NotFoundError(kind, obj_id)

    def remove(self, kind, obj_id):
        raise NotFoundError(kind, obj_id)
