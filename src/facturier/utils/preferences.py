# utils/preferences.py
"""
Cache clé/valeur des préférences locales (ex. établissement sélectionné).
Fichier JSON dans le dossier utilisateur ; la dernière écriture l'emporte.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CURRENT_ORGANIZATION_KEY = "currentOrganizationId"


class Preferences:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self):
        if not self.path or not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Préférences illisibles (%s) : %s", self.path, e)
            return
        if isinstance(data, dict):
            self._data = data

    def _save(self):
        if not self.path:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("Erreur sauvegarde préférences : %s", e)

    def get(self, key: str, default=None):
        return self._data.get(key, default)

    def set(self, key: str, value) -> None:
        self._data[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()
