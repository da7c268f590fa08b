# api/organizations_api.py
"""
Établissements de l'utilisateur connecté.
- /organizations : création, liste (avec user_role), lecture, modification
- /organizations/{id}/settings : paramètres d'en-tête de facture
- /auth/me : profil de l'utilisateur (drapeau is_admin)
"""

from typing import Any, Dict, List, Optional

from facturier.api.http_client import ApiClient
from facturier.models.organization import Organization, OrganizationSettings, User


class OrganizationsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def create_organization(self, data: Dict[str, Any]) -> Organization:
        created = self.client.post("/organizations", json=data,
                                   error_message="Erreur lors de la création de l'organisation")
        return Organization.from_dict(created or {})

    def get_user_organizations(self) -> List[Organization]:
        data = self.client.get("/organizations", error_message="Erreur lors de la récupération des organisations")
        return [Organization.from_dict(d) for d in (data or [])]

    def get_organization(self, org_id: str) -> Organization:
        data = self.client.get(f"/organizations/{org_id}",
                               error_message="Erreur lors de la récupération de l'organisation")
        return Organization.from_dict(data or {})

    def update_organization(self, org_id: str, data: Dict[str, Any]) -> Organization:
        updated = self.client.put(f"/organizations/{org_id}", json=data,
                                  error_message="Erreur lors de la modification de l'organisation")
        return Organization.from_dict(updated or {})

    def get_organization_settings(self, org_id: str) -> OrganizationSettings:
        data = self.client.get(f"/organizations/{org_id}/settings",
                               error_message="Erreur lors de la récupération des paramètres")
        return OrganizationSettings.from_dict(data or {})

    def update_organization_settings(self, org_id: str, data: Dict[str, Any]) -> OrganizationSettings:
        updated = self.client.put(f"/organizations/{org_id}/settings", json=data,
                                  error_message="Erreur lors de la modification des paramètres")
        return OrganizationSettings.from_dict(updated or {})

    def get_current_user(self, token: Optional[str] = None) -> User:
        data = self.client.get("/auth/me", error_message="Erreur lors de la vérification du compte", token=token)
        return User.from_dict(data or {})
