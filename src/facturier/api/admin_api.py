# api/admin_api.py
"""
Portail administrateur (/admin/*).
- utilisateurs : création, liste, lecture, modification, suppression, établissements d'un utilisateur
- établissements : CRUD (champs vides retirés), utilisateurs d'un établissement, paramètres d'en-tête
- affectations utilisateur <-> établissement : ajout, changement de rôle, retrait
"""

from typing import Any, Dict, List, Mapping, Optional

from facturier.api.http_client import ApiClient
from facturier.models.errors import ValidationError
from facturier.models.organization import (
    ORGANIZATION_FIELDS,
    ROLES,
    Organization,
    OrganizationSettings,
    User,
    UserOrganization,
)


def clean_organization_data(data: Mapping[str, Any], require_name: bool = False) -> Dict[str, str]:
    """Retire les champs vides (après strip) pour éviter les rejets de validation du backend."""
    clean: Dict[str, str] = {}
    for key in ORGANIZATION_FIELDS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            clean[key] = value.strip()
    if require_name:
        if "name" not in clean:
            raise ValidationError("Le nom de l'établissement est requis")
    return clean


def _check_role(role: str) -> None:
    if role not in ROLES:
        raise ValidationError(f"Rôle invalide : {role}")


class AdminApi:
    def __init__(self, client: ApiClient):
        self.client = client

    # --- utilisateurs ---
    def create_user(self, email: str, password: str, full_name: Optional[str] = None,
                    phone: Optional[str] = None, is_admin: bool = False) -> User:
        payload: Dict[str, Any] = {"email": email, "password": password, "is_admin": bool(is_admin)}
        if full_name:
            payload["full_name"] = full_name
        if phone:
            payload["phone"] = phone
        data = self.client.post("/admin/users", json=payload,
                                error_message="Erreur lors de la création de l'utilisateur")
        return User.from_dict(data or {})

    def get_all_users(self) -> List[User]:
        data = self.client.get("/admin/users", error_message="Erreur lors de la récupération des utilisateurs")
        return [User.from_dict(d) for d in (data or [])]

    def get_user(self, user_id: str) -> User:
        data = self.client.get(f"/admin/users/{user_id}",
                               error_message="Erreur lors de la récupération de l'utilisateur")
        return User.from_dict(data or {})

    def update_user(self, user_id: str, **changes) -> User:
        payload = {k: v for k, v in changes.items() if k in ("full_name", "phone", "is_admin") and v is not None}
        data = self.client.put(f"/admin/users/{user_id}", json=payload,
                               error_message="Erreur lors de la modification de l'utilisateur")
        return User.from_dict(data or {})

    def delete_user(self, user_id: str) -> None:
        self.client.delete(f"/admin/users/{user_id}", error_message="Erreur lors de la suppression de l'utilisateur")

    def get_user_organizations(self, user_id: str) -> List[UserOrganization]:
        data = self.client.get(f"/admin/users/{user_id}/organizations",
                               error_message="Erreur lors de la récupération des établissements")
        return [UserOrganization.from_dict(d) for d in (data or [])]

    # --- établissements ---
    def create_organization(self, data: Mapping[str, Any]) -> Organization:
        created = self.client.post("/admin/organizations", json=clean_organization_data(data, require_name=True),
                                   error_message="Erreur lors de la création de l'établissement")
        return Organization.from_dict(created or {})

    def get_all_organizations(self) -> List[Organization]:
        data = self.client.get("/admin/organizations",
                               error_message="Erreur lors de la récupération des établissements")
        return [Organization.from_dict(d) for d in (data or [])]

    def get_organization(self, org_id: str) -> Organization:
        data = self.client.get(f"/admin/organizations/{org_id}",
                               error_message="Erreur lors de la récupération de l'établissement")
        return Organization.from_dict(data or {})

    def update_organization(self, org_id: str, data: Mapping[str, Any]) -> Organization:
        updated = self.client.put(f"/admin/organizations/{org_id}", json=clean_organization_data(data),
                                  error_message="Erreur lors de la modification de l'établissement")
        return Organization.from_dict(updated or {})

    def delete_organization(self, org_id: str) -> None:
        self.client.delete(f"/admin/organizations/{org_id}",
                           error_message="Erreur lors de la suppression de l'établissement")

    def get_organization_users(self, org_id: str) -> List[UserOrganization]:
        data = self.client.get(f"/admin/organizations/{org_id}/users",
                               error_message="Erreur lors de la récupération des utilisateurs")
        return [UserOrganization.from_dict(d) for d in (data or [])]

    def update_organization_settings(self, org_id: str, settings: Mapping[str, Any]) -> OrganizationSettings:
        data = self.client.put(f"/admin/organizations/{org_id}/settings", json=dict(settings),
                               error_message="Erreur lors de la modification des paramètres")
        return OrganizationSettings.from_dict(data or {})

    # --- affectations ---
    def assign_user(self, user_id: str, org_id: str, role: str = "user") -> UserOrganization:
        _check_role(role)
        data = self.client.post("/admin/assignments",
                                json={"user_id": user_id, "organization_id": org_id, "role": role},
                                error_message="Erreur lors de l'affectation")
        return UserOrganization.from_dict(data or {})

    def update_user_role(self, user_id: str, org_id: str, role: str) -> UserOrganization:
        _check_role(role)
        data = self.client.put(f"/admin/assignments/{user_id}/{org_id}", json={"role": role},
                               error_message="Erreur lors du changement de rôle")
        return UserOrganization.from_dict(data or {})

    def remove_user(self, user_id: str, org_id: str) -> None:
        self.client.delete(f"/admin/assignments/{user_id}/{org_id}",
                           error_message="Erreur lors du retrait de l'utilisateur")
