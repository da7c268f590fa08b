# api/http_client.py
"""
Client HTTP de l'API de persistance (requests).
- jeton Bearer récupéré à chaque appel auprès du fournisseur de session
- 401/403 -> AuthError ; autres statuts non 2xx, timeout, connexion, JSON invalide -> NetworkError
- code HTTP et corps bruts journalisés en debug (jamais le jeton)
"""

import logging
from typing import Any, Callable, Optional

import requests

from facturier.config import DEFAULT_REQUEST_TIMEOUT
from facturier.models.errors import AuthError, NetworkError

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class ApiClient:
    def __init__(self, base_url: str, token_provider: Optional[TokenProvider] = None,
                 timeout: float = DEFAULT_REQUEST_TIMEOUT, http=None):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout
        # session requests injectable (tests)
        self.http = http or requests.Session()

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, json: Any = None, error_message: str = "Erreur réseau",
                token: Optional[str] = None) -> Any:
        url = self.base_url + path
        headers = self._headers()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug("%s %s", method, url)
        try:
            response = self.http.request(method, url, json=json, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.error("Délai dépassé pour %s %s : %s", method, url, e)
            raise NetworkError(f"{error_message} (délai dépassé)") from e
        except requests.exceptions.RequestException as e:
            logger.error("Erreur de connexion pour %s %s : %s", method, url, e)
            raise NetworkError(f"{error_message} (connexion impossible)") from e

        logger.debug("Code HTTP: %s", response.status_code)
        logger.debug("Réponse brute: %s", response.text)

        if response.status_code in (401, 403):
            raise AuthError("Session expirée ou accès refusé")
        if not 200 <= response.status_code < 300:
            raise NetworkError(error_message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error("Réponse non-JSON reçue de %s", url)
            raise NetworkError(f"{error_message} (réponse inattendue)", status_code=response.status_code) from e

    def get(self, path: str, error_message: str = "Erreur réseau", **kwargs) -> Any:
        return self.request("GET", path, error_message=error_message, **kwargs)

    def post(self, path: str, json: Any = None, error_message: str = "Erreur réseau", **kwargs) -> Any:
        return self.request("POST", path, json=json, error_message=error_message, **kwargs)

    def put(self, path: str, json: Any = None, error_message: str = "Erreur réseau", **kwargs) -> Any:
        return self.request("PUT", path, json=json, error_message=error_message, **kwargs)

    def delete(self, path: str, error_message: str = "Erreur réseau", **kwargs) -> Any:
        return self.request("DELETE", path, error_message=error_message, **kwargs)
