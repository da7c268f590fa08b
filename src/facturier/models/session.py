import time
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from facturier.models.organization import User

logger = logging.getLogger(__name__)


class AuthSession:
    """
    Session du fournisseur d'identité (jeton d'accès + utilisateur).
    Persistée dans un fichier JSON pour être restaurée au démarrage ;
    la restauration ne vaut validation qu'après vérification /auth/me.
    """

    def __init__(self, session_file: Optional[Path] = None):
        self.access_token = None
        self.refresh_token = None
        self.user_id = None
        self.email = None
        self.expires_at = None
        self.session_file = Path(session_file) if session_file else None

    def start_session(self, access_token, user_id=None, email=None, refresh_token=None, expires_in=None):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.user_id = user_id
        self.email = email
        self.expires_at = time.time() + float(expires_in) if expires_in else None
        self.save_session()

    def is_session_active(self) -> bool:
        if not self.access_token:
            return False
        if self.expires_at is None:
            return True
        return time.time() < self.expires_at

    def end_session(self):
        self.access_token = None
        self.refresh_token = None
        self.user_id = None
        self.email = None
        self.expires_at = None
        self.save_session()

    def save_session(self):
        if not self.session_file:
            return
        data = {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "user_id": self.user_id,
            "email": self.email,
            "expires_at": self.expires_at,
        }
        try:
            self.session_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.session_file, "w", encoding="utf-8") as f:
                json.dump(data, f)
        except OSError as e:
            logger.error("Erreur sauvegarde session : %s", e)

    def load_session(self):
        if not self.session_file or not self.session_file.exists():
            return
        try:
            with open(self.session_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Erreur chargement session : %s", e)
            return
        self.access_token = data.get("access_token")
        self.refresh_token = data.get("refresh_token")
        self.user_id = data.get("user_id")
        self.email = data.get("email")
        self.expires_at = data.get("expires_at")

    def get_token(self) -> Optional[str]:
        if self.is_session_active():
            return self.access_token
        return None


@dataclass(frozen=True)
class SessionValid:
    user: User


@dataclass(frozen=True)
class SessionInvalid:
    reason: str


SessionCheck = Union[SessionValid, SessionInvalid]
