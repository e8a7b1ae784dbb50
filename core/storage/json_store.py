from __future__ import annotations

import glob
import json
import logging
import shutil
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from core.errors import NotFoundError, RemoteStoreError
from core.storage.remote_store import KINDS, Kind

log = logging.getLogger(__name__)


class JsonStore:
    """
    Stockage local, même interface que RemoteStore : un fichier JSON par type
    (data/bons.json, data/frais.json), une liste de lignes au format feuille.
    - Rotation de backups (backup_enabled, backup_keep)
    - N'écrit pas si le contenu ne change pas
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        *,
        backup_enabled: bool = True,
        backup_keep: int = 5,
    ) -> None:
        self.data_dir = Path(data_dir)
        self._lock = threading.RLock()
        self.backup_enabled = backup_enabled
        self.backup_keep = max(0, int(backup_keep))

        self.data_dir.mkdir(parents=True, exist_ok=True)
        for kind in KINDS:
            if not self._path(kind).exists():
                self._write_raw(kind, [])

    def _path(self, kind: str) -> Path:
        if kind not in KINDS:
            raise ValueError(f"Type inconnu : {kind}")
        return self.data_dir / f"{kind}.json"

    # ---------------- I/O bas niveau ---------------- #

    def _read_raw(self, kind: str) -> List[Dict[str, Any]]:
        path = self._path(kind)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except json.JSONDecodeError:
            # fichier corrompu : copie de côté et on repart sur une liste vide
            log.warning("%s corrompu, copie vers .corrupt.json", path.name)
            shutil.copy2(path, path.with_suffix(".corrupt.json"))
            return []
        return data if isinstance(data, list) else []

    def _rotate_backups(self, path: Path) -> None:
        if not self.backup_enabled or self.backup_keep <= 0:
            return
        files = sorted(glob.glob(str(path.with_suffix(".*.bak.json"))))
        for old in files[: max(0, len(files) - self.backup_keep)]:
            Path(old).unlink(missing_ok=True)

    def _write_raw(self, kind: str, data: List[Mapping[str, Any]]) -> None:
        path = self._path(kind)
        new_dump = json.dumps(list(data), ensure_ascii=False, indent=2)
        try:
            with self._lock:
                if path.exists():
                    if path.read_text(encoding="utf-8") == new_dump:
                        return
                    if self.backup_enabled:
                        ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
                        shutil.copy2(path, path.with_suffix(f".{ts}.bak.json"))
                        self._rotate_backups(path)
                path.write_text(new_dump, encoding="utf-8")
        except OSError as e:
            raise RemoteStoreError(f"Écriture impossible dans {path} : {e}") from e

    def _index_of(self, data: List[Dict[str, Any]], obj_id: str) -> int:
        for i, d in enumerate(data):
            if str(d.get("id")) == str(obj_id):
                return i
        return -1

    # ---------------- CRUD ---------------- #

    def list(self, kind: Kind) -> List[Dict[str, Any]]:
        return self._read_raw(kind)

    def append(self, kind: Kind, record: Mapping[str, Any]) -> None:
        with self._lock:
            data = self._read_raw(kind)
            data.append(dict(record))
            self._write_raw(kind, data)

    def update(self, kind: Kind, obj_id: str, record: Mapping[str, Any]) -> None:
        with self._lock:
            data = self._read_raw(kind)
            idx = self._index_of(data, obj_id)
            if idx < 0:
                raise NotFoundError(kind, obj_id)
            data[idx] = dict(record)
            self._write_raw(kind, data)

    def remove(self, kind: Kind, obj_id: str) -> None:
        with self._lock:
            data = self._read_raw(kind)
            idx = self._index_of(data, obj_id)
            if idx < 0:
                raise NotFoundError(kind, obj_id)
            data.pop(idx)
            self._write_raw(kind, data)

    def check_connection(self) -> bool:
        return self.data_dir.is_dir()

    def is_configured(self) -> bool:
        return True

    def close(self) -> None:
        pass
