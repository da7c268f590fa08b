# core/invoice_session.py
"""
État d'édition d'une facture (création ou modification), non persisté.
- lignes d'articles ordonnées (au moins une ligne en permanence)
- taux de TVA, client, main d'oeuvre
- chaque mutation recalcule les totaux pour l'aperçu
Rien n'est envoyé au backend avant snapshot() + soumission explicite.
"""

from __future__ import annotations

from typing import List, Optional

from facturier.core.totals import Totals, compute_totals
from facturier.models.errors import ValidationError
from facturier.models.invoice import INVOICE_TYPES, Invoice, InvoiceItem, parse_amount

ITEM_FIELDS = ("designation", "quantity", "unit_price")
DEFAULT_VAT_RATE = 18.0


class InvoiceSession:
    def __init__(
        self,
        invoice_type: str = "definitive",
        vat_rate: float = DEFAULT_VAT_RATE,
        client_name: str = "",
        client_address: str = "",
        labor_cost: float = 0,
        items: Optional[List[InvoiceItem]] = None,
    ):
        if invoice_type not in INVOICE_TYPES:
            raise ValidationError(f"Type de facture inconnu : {invoice_type}")
        self.invoice_type = invoice_type
        self.vat_rate = float(vat_rate)
        self.client_name = client_name
        self.client_address = client_address
        self.labor_cost = float(labor_cost or 0)
        self.items: List[InvoiceItem] = list(items) if items else [InvoiceItem()]
        self.totals: Totals = self._recalc()

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceSession":
        """Précharge une session d'édition depuis une facture existante."""
        return cls(
            invoice_type=invoice.type,
            vat_rate=invoice.vat_rate,
            client_name=invoice.client_name or "",
            client_address=invoice.client_address or "",
            labor_cost=invoice.labor_cost or 0,
            items=[InvoiceItem(it.designation, it.quantity, it.unit_price) for it in invoice.items],
        )

    def _recalc(self) -> Totals:
        self.totals = compute_totals(self.items, self.vat_rate, self.labor_cost)
        return self.totals

    def add_item(self) -> Totals:
        self.items.append(InvoiceItem(designation="", quantity=1, unit_price=0))
        return self._recalc()

    def remove_item(self, index: int) -> Totals:
        # la dernière ligne restante n'est jamais supprimée
        if len(self.items) > 1 and -len(self.items) <= index < len(self.items):
            del self.items[index]
        return self._recalc()

    def update_item(self, index: int, field: str, value) -> Totals:
        if field not in ITEM_FIELDS:
            raise ValidationError(f"Champ d'article inconnu : {field}")
        item = self.items[index]
        if field == "designation":
            item.designation = str(value or "")
        else:
            setattr(item, field, parse_amount(value, 0.0))
        return self._recalc()

    def set_vat_rate(self, vat_rate) -> Totals:
        self.vat_rate = parse_amount(vat_rate, 0.0)
        return self._recalc()

    def set_labor_cost(self, labor_cost) -> Totals:
        self.labor_cost = parse_amount(labor_cost, 0.0)
        return self._recalc()

    def set_client(self, name: str = "", address: str = "") -> None:
        self.client_name = name or ""
        self.client_address = address or ""

    def snapshot(self, organization_id: str) -> Invoice:
        """Instantané transmis à l'API de factures (main d'oeuvre seulement si > 0)."""
        return Invoice(
            organization_id=organization_id,
            type=self.invoice_type,
            vat_rate=self.vat_rate,
            items=[InvoiceItem(it.designation, it.quantity, it.unit_price) for it in self.items],
            client_name=self.client_name or None,
            client_address=self.client_address or None,
            labor_cost=self.labor_cost if self.labor_cost > 0 else None,
        )
