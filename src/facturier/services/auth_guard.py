# services/auth_guard.py
"""
Garde d'authentification.
- verify_session() : vérifie la session courante auprès de /auth/me ;
  une session invalide est immédiatement déconnectée localement
- sign_in_user() / sign_in_admin() : connexion puis contrôle du drapeau is_admin
"""

import logging

from facturier.api.auth_client import AuthClient
from facturier.api.organizations_api import OrganizationsApi
from facturier.models.errors import AuthError, FacturierError
from facturier.models.organization import User
from facturier.models.session import SessionCheck, SessionInvalid, SessionValid

logger = logging.getLogger(__name__)


def verify_session(auth: AuthClient, organizations_api: OrganizationsApi) -> SessionCheck:
    if auth.get_session() is None:
        return SessionInvalid("Aucune session active")
    try:
        user = organizations_api.get_current_user()
    except FacturierError as e:
        logger.info("Session invalide, déconnexion : %s", e)
        auth.sign_out()
        return SessionInvalid(e.message)
    return SessionValid(user)


def verify_admin_session(auth: AuthClient, organizations_api: OrganizationsApi) -> SessionCheck:
    check = verify_session(auth, organizations_api)
    if isinstance(check, SessionValid) and not check.user.is_admin:
        return SessionInvalid("Accès admin requis")
    return check


def _signed_in_user(auth: AuthClient, organizations_api: OrganizationsApi, email: str, password: str) -> User:
    auth.sign_in(email, password)
    try:
        return organizations_api.get_current_user()
    except FacturierError as e:
        auth.sign_out()
        raise AuthError("Erreur lors de la vérification du compte") from e


def sign_in_user(auth: AuthClient, organizations_api: OrganizationsApi, email: str, password: str) -> User:
    """Les comptes administrateurs ne passent pas par la connexion utilisateur."""
    user = _signed_in_user(auth, organizations_api, email, password)
    if user.is_admin:
        auth.sign_out()
        raise AuthError("Email ou mot de passe incorrect")
    return user


def sign_in_admin(auth: AuthClient, organizations_api: OrganizationsApi, email: str, password: str) -> User:
    user = _signed_in_user(auth, organizations_api, email, password)
    if not user.is_admin:
        auth.sign_out()
        raise AuthError("Accès admin requis")
    return user
