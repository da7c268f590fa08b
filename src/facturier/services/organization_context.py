# services/organization_context.py
"""
Établissement courant de l'utilisateur connecté.
Le rôle est lu sur le premier établissement ; la sélection est mémorisée
dans les préférences locales (clé currentOrganizationId).
"""

import logging
from typing import List, Optional

from facturier.api.organizations_api import OrganizationsApi
from facturier.models.organization import Organization
from facturier.utils.preferences import CURRENT_ORGANIZATION_KEY, Preferences

logger = logging.getLogger(__name__)


class OrganizationContext:
    def __init__(self, organizations_api: OrganizationsApi, preferences: Preferences):
        self.organizations_api = organizations_api
        self.preferences = preferences
        self.organizations: List[Organization] = []
        self.current_organization: Optional[Organization] = None
        self.user_role: Optional[str] = None

    def load(self) -> List[Organization]:
        orgs = self.organizations_api.get_user_organizations()
        logger.info("%d établissement(s) chargé(s)", len(orgs))
        self.organizations = orgs
        self.user_role = orgs[0].user_role if orgs and orgs[0].user_role else None

        saved_id = self.preferences.get(CURRENT_ORGANIZATION_KEY)
        current = next((o for o in orgs if saved_id and o.id == saved_id), None)
        self.current_organization = current or (orgs[0] if orgs else None)
        if self.current_organization:
            logger.info("Établissement sélectionné : %s", self.current_organization.name)
        else:
            logger.warning("Aucun établissement disponible")
        return orgs

    def set_current_organization(self, org: Organization) -> None:
        self.current_organization = org
        self.preferences.set(CURRENT_ORGANIZATION_KEY, org.id)

    def select_by_id(self, org_id: str) -> Organization:
        for org in self.organizations:
            if org.id == org_id:
                self.set_current_organization(org)
                return org
        raise KeyError(org_id)

    def clear(self) -> None:
        self.organizations = []
        self.current_organization = None
        self.user_role = None
