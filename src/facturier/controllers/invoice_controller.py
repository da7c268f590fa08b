# controllers/invoice_controller.py
"""
Actions des pages factures (création, modification, liste, détail, PDF, export).
Chaque action retourne (True, valeur) ou (False, message) pour un bandeau d'erreur ;
aucune FacturierError ne remonte jusqu'à l'hôte.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

from facturier.core.invoice_session import InvoiceSession
from facturier.exports.excel_export import export_invoices_excel
from facturier.models.errors import FacturierError, ValidationError
from facturier.models.invoice import Invoice
from facturier.models.organization import OrganizationSettings
from facturier.pdf.invoice_renderer import render_invoice
from facturier.services.app_context import AppContext

logger = logging.getLogger(__name__)

Result = Tuple[bool, Any]


def run_action(action: Callable[[], Any], default_error: str) -> Result:
    """Exécute une action de page et convertit les erreurs métier en message."""
    try:
        return True, action()
    except FacturierError as e:
        logger.error("%s : %s", default_error, e)
        return False, e.message or default_error


class InvoiceController:
    def __init__(self, ctx: AppContext, renderer=render_invoice, exporter=export_invoices_excel):
        self.ctx = ctx
        self.renderer = renderer
        self.exporter = exporter

    def _current_organization_id(self) -> str:
        org = self.ctx.organizations.current_organization
        if org is None:
            raise ValidationError("Veuillez sélectionner un établissement")
        return org.id

    # --- édition ---
    def new_session(self) -> InvoiceSession:
        return InvoiceSession()

    def create_invoice(self, session: InvoiceSession) -> Result:
        def action():
            invoice = session.snapshot(self._current_organization_id())
            created = self.ctx.invoices.create_invoice(invoice)
            logger.info("Facture créée : %s", created.invoice_number)
            return created

        return run_action(action, "Erreur lors de la création de la facture")

    def edit_session(self, invoice_id: str) -> Result:
        return run_action(lambda: InvoiceSession.from_invoice(self.ctx.invoices.get_invoice(invoice_id)),
                          "Erreur lors du chargement")

    def update_invoice(self, invoice_id: str, session: InvoiceSession) -> Result:
        def action():
            if not invoice_id:
                raise ValidationError("ID de facture manquant")
            invoice = session.snapshot(self._current_organization_id())
            return self.ctx.invoices.update_invoice(invoice_id, invoice)

        return run_action(action, "Erreur lors de la modification")

    # --- consultation ---
    def list_invoices(self) -> Result:
        return run_action(self.ctx.invoices.list_invoices, "Erreur lors du chargement des factures")

    def fetch_settings(self, organization_id: Optional[str]) -> Optional[OrganizationSettings]:
        """Paramètres d'en-tête ; un échec n'empêche pas l'affichage (titre par défaut)."""
        if not organization_id:
            logger.warning("Pas d'organization_id sur la facture")
            return None
        try:
            return self.ctx.organizations_api.get_organization_settings(organization_id)
        except FacturierError as e:
            logger.error("Erreur lors du chargement des settings : %s", e)
            return None

    def load_invoice(self, invoice_id: str) -> Result:
        """Retourne (True, (facture, paramètres ou None))."""
        def action():
            invoice = self.ctx.invoices.get_invoice(invoice_id)
            return invoice, self.fetch_settings(invoice.organization_id)

        return run_action(action, "Erreur lors du chargement de la facture")

    def delete_invoice(self, invoice_id: str) -> Result:
        return run_action(lambda: self.ctx.invoices.delete_invoice(invoice_id), "Erreur lors de la suppression")

    # --- sorties ---
    def download_pdf(self, invoice: Invoice, settings: Optional[OrganizationSettings] = None,
                     output_dir=None) -> Result:
        target = Path(output_dir) if output_dir else self.ctx.settings.output_dir
        return run_action(lambda: self.renderer(invoice, settings, mode="download", output_dir=target),
                          "Erreur lors de la génération du PDF")

    def print_pdf(self, invoice: Invoice, settings: Optional[OrganizationSettings] = None) -> Result:
        return run_action(lambda: self.renderer(invoice, settings, mode="print"), "Erreur lors de l'impression")

    def export_excel(self, filename) -> Result:
        ok, invoices = self.list_invoices()
        if not ok:
            return False, invoices
        done, err = self.exporter(invoices, filename)
        if not done:
            return False, err or "Erreur lors de l'export"
        return True, Path(filename)
