# controllers/admin_controller.py
"""
Actions du portail administrateur.
- utilisateurs, établissements, affectations (CRUD via AdminApi)
- design de l'en-tête : upload de l'image puis enregistrement des paramètres
- tableau de bord (compteurs) et recherche d'établissements
Même convention que les pages factures : (True, valeur) ou (False, message).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from facturier.controllers.invoice_controller import Result, run_action
from facturier.models.errors import ValidationError
from facturier.models.organization import HEADER_POSITIONS, Organization, OrganizationSettings
from facturier.services.app_context import AppContext

logger = logging.getLogger(__name__)

# valeurs initiales du formulaire de design
DESIGN_DEFAULT_HEIGHT = 60
DESIGN_DEFAULT_WIDTH = 100
DESIGN_DEFAULT_POSITION = "center"


@dataclass(frozen=True)
class DashboardStats:
    organizations: int
    users: int
    admin_users: int


def filter_organizations(organizations: List[Organization], term: str) -> List[Organization]:
    """Recherche insensible à la casse sur nom, ville, email et pays."""
    search = (term or "").strip().lower()
    if not search:
        return list(organizations)
    return [
        org for org in organizations
        if any(search in (value or "").lower() for value in (org.name, org.city, org.email, org.country))
    ]


def validate_header_settings(logo_url: Optional[str], header_height, header_width, header_position) -> Dict[str, Any]:
    if not logo_url or not str(logo_url).strip():
        raise ValidationError("Veuillez uploader une image ou coller une URL")
    if header_position not in HEADER_POSITIONS:
        raise ValidationError("Position d'en-tête invalide (left, center ou right)")
    try:
        height = float(header_height)
        width = float(header_width)
    except (TypeError, ValueError) as e:
        raise ValidationError("Dimensions d'en-tête invalides") from e
    if height <= 0:
        raise ValidationError("La hauteur de l'en-tête doit être positive")
    if not 1 <= width <= 100:
        raise ValidationError("La largeur de l'en-tête doit être comprise entre 1 et 100 %")
    return {
        "logo_url": str(logo_url).strip(),
        "header_height": height,
        "header_width": width,
        "header_position": header_position,
    }


class AdminController:
    def __init__(self, ctx: AppContext):
        self.ctx = ctx

    @property
    def admin(self):
        return self.ctx.admin

    # --- tableau de bord ---
    def dashboard_stats(self) -> Result:
        def action():
            orgs = self.admin.get_all_organizations()
            users = self.admin.get_all_users()
            return DashboardStats(
                organizations=len(orgs),
                users=len(users),
                admin_users=sum(1 for u in users if u.is_admin),
            )

        return run_action(action, "Erreur chargement stats")

    # --- utilisateurs ---
    def list_users(self) -> Result:
        return run_action(self.admin.get_all_users, "Erreur lors de la récupération des utilisateurs")

    def create_user(self, email: str, password: str, full_name: Optional[str] = None,
                    phone: Optional[str] = None, is_admin: bool = False) -> Result:
        def action():
            if not email or not password:
                raise ValidationError("Email et mot de passe requis")
            return self.admin.create_user(email, password, full_name=full_name, phone=phone, is_admin=is_admin)

        return run_action(action, "Erreur lors de la création de l'utilisateur")

    def update_user(self, user_id: str, **changes) -> Result:
        return run_action(lambda: self.admin.update_user(user_id, **changes),
                          "Erreur lors de la modification de l'utilisateur")

    def delete_user(self, user_id: str) -> Result:
        return run_action(lambda: self.admin.delete_user(user_id), "Erreur lors de la suppression de l'utilisateur")

    def user_organizations(self, user_id: str) -> Result:
        return run_action(lambda: self.admin.get_user_organizations(user_id),
                          "Erreur lors de la récupération des établissements")

    # --- établissements ---
    def list_organizations(self, search: str = "") -> Result:
        return run_action(lambda: filter_organizations(self.admin.get_all_organizations(), search),
                          "Erreur lors de la récupération des établissements")

    def create_organization(self, data: Mapping[str, Any]) -> Result:
        return run_action(lambda: self.admin.create_organization(data),
                          "Erreur lors de la création de l'établissement")

    def update_organization(self, org_id: str, data: Mapping[str, Any]) -> Result:
        return run_action(lambda: self.admin.update_organization(org_id, data),
                          "Erreur lors de la modification de l'établissement")

    def delete_organization(self, org_id: str) -> Result:
        return run_action(lambda: self.admin.delete_organization(org_id),
                          "Erreur lors de la suppression de l'établissement")

    def organization_users(self, org_id: str) -> Result:
        return run_action(lambda: self.admin.get_organization_users(org_id),
                          "Erreur lors de la récupération des utilisateurs")

    # --- affectations ---
    def assign_user(self, user_id: str, org_id: str, role: str = "user") -> Result:
        return run_action(lambda: self.admin.assign_user(user_id, org_id, role), "Erreur lors de l'affectation")

    def change_role(self, user_id: str, org_id: str, role: str) -> Result:
        return run_action(lambda: self.admin.update_user_role(user_id, org_id, role),
                          "Erreur lors du changement de rôle")

    def remove_assignment(self, user_id: str, org_id: str) -> Result:
        return run_action(lambda: self.admin.remove_user(user_id, org_id),
                          "Erreur lors du retrait de l'utilisateur")

    # --- design de l'en-tête ---
    def load_design(self, org_id: str) -> Result:
        """Paramètres actuels, complétés par les valeurs initiales du formulaire."""
        def action():
            current = self.ctx.organizations_api.get_organization_settings(org_id)
            return OrganizationSettings(
                organization_id=org_id,
                logo_url=current.logo_url,
                header_height=current.header_height or DESIGN_DEFAULT_HEIGHT,
                header_width=current.header_width or DESIGN_DEFAULT_WIDTH,
                header_position=current.header_position or DESIGN_DEFAULT_POSITION,
            )

        return run_action(action, "Erreur lors du chargement des paramètres")

    def upload_header_image(self, org_id: str, file_path) -> Result:
        def action():
            if self.ctx.storage is None:
                raise ValidationError("Stockage non configuré (FACTURIER_STORAGE_URL)")
            url = self.ctx.storage.upload_header_image(org_id, file_path)
            logger.info("Image uploadée avec succès : %s", url)
            return url

        return run_action(action, "Erreur lors de l'upload")

    def save_design(self, org_id: str, logo_url: Optional[str], header_height=DESIGN_DEFAULT_HEIGHT,
                    header_width=DESIGN_DEFAULT_WIDTH, header_position: str = DESIGN_DEFAULT_POSITION) -> Result:
        def action():
            payload = validate_header_settings(logo_url, header_height, header_width, header_position)
            return self.admin.update_organization_settings(org_id, payload)

        return run_action(action, "Erreur lors de la modification des paramètres")
