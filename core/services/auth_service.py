from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel

from core.config import Settings
from core.errors import AuthenticationError

log = logging.getLogger(__name__)

Role = Literal["full", "limited"]


class Session(BaseModel):
    """Contexte de connexion passé à l'interface (jamais d'état global)."""
    username: Optional[str] = None
    role: Optional[Role] = None

    @property
    def is_authenticated(self) -> bool:
        return self.role is not None

    @property
    def can_view_dashboard(self) -> bool:
        return self.role == "full"

    @property
    def can_view_statistics(self) -> bool:
        return self.role == "full"

    @property
    def can_delete(self) -> bool:
        return self.role == "full"

    @property
    def home_screen(self) -> str:
        return "dashboard" if self.role == "full" else "bons"


class AuthService:
    """Deux identités fixes (admin = accès complet, agent = bons + frais) ; rôle mémorisé dans data/session.json."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.path: Path = settings.session_file

    def login(self, username: str, password: str) -> Session:
        username = (username or "").strip()
        for cred, role in ((self.settings.admin, "full"), (self.settings.agent, "limited")):
            if username == cred.username and password == cred.password:
                session = Session(username=username, role=role)
                self._save(session)
                log.info("Connexion %s (%s)", username, role)
                return session
        raise AuthenticationError("Identifiant ou mot de passe invalide")

    def restore(self) -> Session:
        if not self.path.exists():
            return Session()
        try:
            return Session(**json.loads(self.path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            # session illisible : on repart déconnecté
            log.warning("Session illisible (%s) : %s", self.path, e)
            return Session()

    def logout(self) -> Session:
        self.path.unlink(missing_ok=True)
        return Session()

    def _save(self, session: Session) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(session.model_dump_json(), encoding="utf-8")
