from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Literal, Mapping, Optional, Protocol

import httpx

from core.errors import NotFoundError, RemoteStoreError

log = logging.getLogger(__name__)

Kind = Literal["bons", "frais"]
KINDS = ("bons", "frais")


class Store(Protocol):
    def list(self, kind: Kind) -> List[Dict[str, Any]]: ...
    def append(self, kind: Kind, record: Mapping[str, Any]) -> None: ...
    def update(self, kind: Kind, obj_id: str, record: Mapping[str, Any]) -> None: ...
    def remove(self, kind: Kind, obj_id: str) -> None: ...
    def check_connection(self) -> bool: ...


class RemoteStore:
    """
    Client de l'API Google Apps Script posée devant la feuille (onglets Bons / Frais).

    Toutes les actions passent par un POST JSON en text/plain
    (évite le pré-vol CORS côté Apps Script) :
        {"action": "getAll" | "add" | "update" | "delete", "type": kind, "id"?, "item"?}
    Réponse : {"success": bool, "data"?: [...], "error"?: str, "message"?: str}
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = (url or "").strip()
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        self._client.close()

    def is_configured(self) -> bool:
        return self.url.startswith("https://script.google.com/")

    # ---------------- transport ---------------- #

    def _call(self, action: str, kind: str, **extra: Any) -> Dict[str, Any]:
        if kind not in KINDS:
            raise ValueError(f"Type inconnu : {kind}")
        if not self.url:
            raise RemoteStoreError("URL du script Google non configurée")

        payload = {"action": action, "type": kind, **extra}
        log.debug("POST %s %s", action, kind)
        try:
            resp = self._client.post(
                self.url,
                content=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                headers={"Content-Type": "text/plain"},
            )
            resp.raise_for_status()
            result = resp.json()
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"{action} {kind} : échec HTTP ({e})") from e
        except ValueError as e:
            raise RemoteStoreError(f"{action} {kind} : réponse non JSON") from e

        if not isinstance(result, dict):
            raise RemoteStoreError(f"{action} {kind} : réponse inattendue")
        if not result.get("success"):
            err = str(result.get("error") or f"Échec {action} {kind}")
            if "item not found" in err.lower() and extra.get("id") is not None:
                raise NotFoundError(kind, str(extra["id"]))
            raise RemoteStoreError(err)
        return result

    # ---------------- CRUD ---------------- #

    def list(self, kind: Kind) -> List[Dict[str, Any]]:
        data = self._call("getAll", kind).get("data") or []
        return [d for d in data if isinstance(d, dict)]

    def append(self, kind: Kind, record: Mapping[str, Any]) -> None:
        self._call("add", kind, item=dict(record))

    def update(self, kind: Kind, obj_id: str, record: Mapping[str, Any]) -> None:
        self._call("update", kind, id=obj_id, item=dict(record))

    def remove(self, kind: Kind, obj_id: str) -> None:
        self._call("delete", kind, id=obj_id)

    def check_connection(self) -> bool:
        try:
            self._call("getAll", "bons")
            return True
        except RemoteStoreError as e:
            log.warning("Connexion à la feuille impossible : %s", e)
            return False
