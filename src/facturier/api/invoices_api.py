# api/invoices_api.py
"""Factures : CRUD sur /invoices."""

from typing import List

from facturier.api.http_client import ApiClient
from facturier.models.invoice import Invoice


class InvoicesApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def create_invoice(self, invoice: Invoice) -> Invoice:
        data = self.client.post("/invoices", json=invoice.to_payload(),
                                error_message="Erreur lors de la création de la facture")
        return Invoice.from_dict(data or {})

    def list_invoices(self) -> List[Invoice]:
        data = self.client.get("/invoices", error_message="Erreur lors de la récupération des factures")
        return [Invoice.from_dict(d) for d in (data or [])]

    def get_invoice(self, invoice_id: str) -> Invoice:
        data = self.client.get(f"/invoices/{invoice_id}",
                               error_message="Erreur lors de la récupération de la facture")
        return Invoice.from_dict(data or {})

    def update_invoice(self, invoice_id: str, invoice: Invoice) -> Invoice:
        data = self.client.put(f"/invoices/{invoice_id}", json=invoice.to_payload(for_update=True),
                               error_message="Erreur lors de la modification de la facture")
        return Invoice.from_dict(data or {})

    def delete_invoice(self, invoice_id: str) -> None:
        self.client.delete(f"/invoices/{invoice_id}", error_message="Erreur lors de la suppression de la facture")
