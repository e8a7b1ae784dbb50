# core/config.py
from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from core.storage.json_store import JsonStore
from core.storage.remote_store import RemoteStore

log = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parents[1]  # web-pense/
DATA_DIR = ROOT_DIR / "data"
TEMPLATES_DIR = ROOT_DIR / "templates"
EXPORTS_DIR = ROOT_DIR / "exports"


class Company(BaseModel):
    name: str = "Web-Pense"
    address: str = ""
    phone: str = ""


class Credential(BaseModel):
    username: str
    password: str


class Settings(BaseModel):
    store: Literal["remote", "json"] = "remote"
    apps_script_url: str = ""
    timeout: float = 30.0
    data_dir: Path = DATA_DIR
    currency: str = "DH"
    company: Company = Field(default_factory=Company)
    admin: Credential = Field(default_factory=lambda: Credential(username="admin", password="1234"))
    agent: Credential = Field(default_factory=lambda: Credential(username="agent", password="1234"))
    wkhtmltopdf_path: Optional[str] = None

    @property
    def settings_file(self) -> Path:
        return self.data_dir / "settings.json"

    @property
    def session_file(self) -> Path:
        return self.data_dir / "session.json"


def _load_json(path: Path):
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        log.warning("Paramètres illisibles (%s) : %s", path, e)
        return None


def load_settings(data_dir: os.PathLike | str | None = None) -> Settings:
    """
    data/settings.json puis surcharges d'environnement :
    WEBPENSE_DATA_DIR, WEBPENSE_STORE, WEBPENSE_APPS_SCRIPT_URL, WEBPENSE_TIMEOUT, WKHTMLTOPDF.
    """
    base = Path(data_dir or os.environ.get("WEBPENSE_DATA_DIR") or DATA_DIR)
    raw = _load_json(base / "settings.json")
    raw = raw if isinstance(raw, dict) else {}
    raw["data_dir"] = base

    env = os.environ
    if env.get("WEBPENSE_STORE"):
        raw["store"] = env["WEBPENSE_STORE"]
    if env.get("WEBPENSE_APPS_SCRIPT_URL"):
        raw["apps_script_url"] = env["WEBPENSE_APPS_SCRIPT_URL"]
    if env.get("WEBPENSE_TIMEOUT"):
        raw["timeout"] = env["WEBPENSE_TIMEOUT"]
    if env.get("WKHTMLTOPDF"):
        raw["wkhtmltopdf_path"] = env["WKHTMLTOPDF"]

    try:
        return Settings(**raw)
    except ValidationError as e:
        log.warning("Paramètres invalides, valeurs par défaut utilisées : %s", e)
        return Settings(data_dir=base)


def build_store(settings: Settings):
    if settings.store == "json":
        return JsonStore(settings.data_dir)
    return RemoteStore(settings.apps_script_url, timeout=settings.timeout)
