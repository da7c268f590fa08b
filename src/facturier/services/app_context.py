# services/app_context.py
"""
Contexte applicatif explicite : session d'authentification, clients API
et établissement courant, construits une seule fois depuis Settings.
"""

import logging
from typing import Optional

from facturier.api.admin_api import AdminApi
from facturier.api.auth_client import AuthClient
from facturier.api.http_client import ApiClient
from facturier.api.invoices_api import InvoicesApi
from facturier.api.organizations_api import OrganizationsApi
from facturier.api.storage_client import StorageClient
from facturier.config import Settings
from facturier.models.errors import FacturierError
from facturier.models.organization import User
from facturier.models.session import AuthSession, SessionCheck, SessionValid
from facturier.services.auth_guard import sign_in_admin, sign_in_user, verify_session
from facturier.services.organization_context import OrganizationContext
from facturier.utils.preferences import Preferences

logger = logging.getLogger(__name__)


class AppContext:
    def __init__(self, settings: Settings, http=None):
        self.settings = settings
        self.auth = AuthClient(
            settings.auth_url,
            api_key=settings.auth_key,
            session=AuthSession(settings.session_path),
            timeout=settings.request_timeout,
            http=http,
        )
        self.api = ApiClient(settings.api_url, token_provider=self.auth.access_token,
                             timeout=settings.request_timeout, http=http)
        self.invoices = InvoicesApi(self.api)
        self.organizations_api = OrganizationsApi(self.api)
        self.admin = AdminApi(self.api)
        self.storage: Optional[StorageClient] = None
        if settings.storage_url:
            self.storage = StorageClient(settings.storage_url, api_key=settings.auth_key,
                                         token_provider=self.auth.access_token,
                                         timeout=settings.request_timeout, http=http)
        self.preferences = Preferences(settings.preferences_path)
        self.organizations = OrganizationContext(self.organizations_api, self.preferences)
        self.user: Optional[User] = None

    def _load_organizations(self) -> None:
        try:
            self.organizations.load()
        except FacturierError as e:
            logger.error("Erreur chargement établissements : %s", e)

    def start(self) -> SessionCheck:
        """Restaure la session locale, la revalide, puis charge les établissements."""
        self.auth.restore_session()
        check = verify_session(self.auth, self.organizations_api)
        if isinstance(check, SessionValid):
            self.user = check.user
            if not check.user.is_admin:
                self._load_organizations()
        else:
            logger.info("Démarrage sans session : %s", check.reason)
        return check

    def sign_in(self, email: str, password: str) -> User:
        self.user = sign_in_user(self.auth, self.organizations_api, email, password)
        self._load_organizations()
        return self.user

    def sign_in_admin(self, email: str, password: str) -> User:
        self.user = sign_in_admin(self.auth, self.organizations_api, email, password)
        return self.user

    def teardown(self) -> None:
        """Déconnexion et remise à zéro de l'état établissement."""
        self.auth.sign_out()
        self.organizations.clear()
        self.user = None
