# api/auth_client.py
"""
Fournisseur d'identité (API REST de type GoTrue).
- sign_in  : POST {auth_url}/token?grant_type=password
- sign_up  : POST {auth_url}/signup
- sign_out : POST {auth_url}/logout puis effacement local
- get_session / access_token : session courante (restaurée depuis le fichier local)
- on_auth_state_change : abonnements aux événements SIGNED_IN / SIGNED_OUT
"""

import logging
from typing import Callable, List, Optional

import requests

from facturier.config import DEFAULT_REQUEST_TIMEOUT
from facturier.models.errors import AuthError, FacturierError, NetworkError
from facturier.models.session import AuthSession

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthListener = Callable[[str, Optional[AuthSession]], None]


def _error_text(response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error_description") or body.get("msg") or body.get("message")
    return None


class AuthClient:
    def __init__(self, auth_url: Optional[str], api_key: Optional[str] = None, session: Optional[AuthSession] = None,
                 timeout: float = DEFAULT_REQUEST_TIMEOUT, http=None):
        self.auth_url = (auth_url or "").rstrip("/")
        self.api_key = api_key
        self.session = session or AuthSession()
        self.timeout = timeout
        self.http = http or requests.Session()
        self._listeners: List[AuthListener] = []

    # --- abonnements ---
    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """Enregistre un écouteur ; retourne la fonction de désabonnement."""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, event: str) -> None:
        current = self.get_session()
        for listener in list(self._listeners):
            listener(event, current)

    # --- session ---
    def restore_session(self) -> Optional[AuthSession]:
        self.session.load_session()
        return self.get_session()

    def get_session(self) -> Optional[AuthSession]:
        return self.session if self.session.is_session_active() else None

    def access_token(self) -> Optional[str]:
        return self.session.get_token()

    def _headers(self, token: Optional[str] = None) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _post(self, path: str, payload=None, token: Optional[str] = None):
        if not self.auth_url:
            raise AuthError("Service d'authentification non configuré (FACTURIER_AUTH_URL)")
        url = self.auth_url + path
        try:
            response = self.http.post(url, json=payload, headers=self._headers(token), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Fournisseur d'identité injoignable : %s", e)
            raise NetworkError("Service d'authentification injoignable") from e
        logger.debug("Code HTTP: %s", response.status_code)
        return response

    def sign_in(self, email: str, password: str) -> AuthSession:
        logger.info("Tentative de connexion avec l'email : %s", email)
        response = self._post("/token?grant_type=password", {"email": email, "password": password})
        if response.status_code in (400, 401, 403, 422):
            raise AuthError(_error_text(response) or "Email ou mot de passe incorrect")
        if not 200 <= response.status_code < 300:
            raise NetworkError("Erreur de connexion", status_code=response.status_code)
        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError("Réponse inattendue du service d'authentification") from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthError("Session invalide")
        user = data.get("user") or {}
        self.session.start_session(
            access_token=token,
            user_id=user.get("id"),
            email=user.get("email") or email,
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
        )
        logger.info("Connexion réussie pour %s", email)
        self._notify(SIGNED_IN)
        return self.session

    def sign_up(self, email: str, password: str) -> None:
        response = self._post("/signup", {"email": email, "password": password})
        if response.status_code in (400, 422):
            raise AuthError(_error_text(response) or "Inscription refusée")
        if not 200 <= response.status_code < 300:
            raise NetworkError("Erreur lors de l'inscription", status_code=response.status_code)
        logger.info("Compte créé pour %s", email)

    def sign_out(self) -> None:
        """Révoque le jeton côté serveur si possible ; la session locale est toujours effacée."""
        token = self.session.access_token
        if token and not self.auth_url:
            logger.warning("Service d'authentification non configuré, effacement local uniquement")
        elif token:
            try:
                response = self._post("/logout", token=token)
                if not 200 <= response.status_code < 300:
                    logger.warning("Révocation du jeton refusée (HTTP %s)", response.status_code)
            except FacturierError as e:
                logger.warning("Déconnexion serveur impossible, effacement local uniquement : %s", e)
        self.session.end_session()
        self._notify(SIGNED_OUT)
