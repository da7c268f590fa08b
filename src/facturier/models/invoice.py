# models/invoice.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

INVOICE_TYPES = ("definitive", "proforma")


def parse_amount(value, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        try:
            return float(str(value).replace(",", ".").replace(" ", ""))
        except (TypeError, ValueError):
            return default


def _opt_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    return parse_amount(value)


@dataclass
class InvoiceItem:
    designation: str = ""
    quantity: float = 1
    unit_price: float = 0

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InvoiceItem":
        return cls(
            designation=str(data.get("designation") or ""),
            quantity=parse_amount(data.get("quantity"), 0.0),
            unit_price=parse_amount(data.get("unit_price"), 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "designation": self.designation,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
        }


@dataclass
class Invoice:
    organization_id: str
    type: str = "definitive"
    vat_rate: float = 0.0
    items: List[InvoiceItem] = field(default_factory=list)
    client_name: Optional[str] = None
    client_address: Optional[str] = None
    labor_cost: Optional[float] = None
    id: Optional[str] = None
    invoice_number: Optional[str] = None
    total_ht: Optional[float] = None
    total_vat: Optional[float] = None
    total_ttc: Optional[float] = None
    created_at: Optional[str] = None

    @property
    def is_proforma(self) -> bool:
        return self.type == "proforma"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Invoice":
        """Construit une facture depuis la réponse JSON du backend."""
        inv_type = data.get("type") or "definitive"
        if inv_type not in INVOICE_TYPES:
            inv_type = "definitive"
        return cls(
            id=data.get("id"),
            organization_id=str(data.get("organization_id") or ""),
            type=inv_type,
            vat_rate=parse_amount(data.get("vat_rate"), 0.0),
            items=[InvoiceItem.from_dict(it) for it in (data.get("items") or [])],
            client_name=data.get("client_name") or None,
            client_address=data.get("client_address") or None,
            labor_cost=_opt_float(data.get("labor_cost")),
            invoice_number=str(data["invoice_number"]) if data.get("invoice_number") is not None else None,
            total_ht=_opt_float(data.get("total_ht")),
            total_vat=_opt_float(data.get("total_vat")),
            total_ttc=_opt_float(data.get("total_ttc")),
            created_at=data.get("created_at"),
        )

    def to_payload(self, for_update: bool = False) -> Dict[str, Any]:
        """
        Corps envoyé à POST /invoices et PUT /invoices/{id}.
        En mise à jour, les champs vidés sont envoyés explicitement (client à null,
        main d'oeuvre à 0) pour écraser la valeur enregistrée.
        """
        payload: Dict[str, Any] = {
            "organization_id": self.organization_id,
            "type": self.type,
            "vat_rate": self.vat_rate,
            "items": [it.to_dict() for it in self.items],
        }
        if self.client_name or for_update:
            payload["client_name"] = self.client_name or None
        if self.client_address or for_update:
            payload["client_address"] = self.client_address or None
        if self.labor_cost and self.labor_cost > 0:
            payload["labor_cost"] = self.labor_cost
        elif for_update:
            payload["labor_cost"] = 0
        return payload
