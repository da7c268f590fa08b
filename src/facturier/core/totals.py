"""
Calcul des totaux d'une facture : HT, TVA, TTC.
Aucun arrondi ici ; l'affichage tronque à l'unité monétaire.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Union

from facturier.models.invoice import InvoiceItem

ItemLike = Union[InvoiceItem, Mapping]


@dataclass(frozen=True)
class Totals:
    total_ht: float
    total_vat: float
    total_ttc: float


def _line_total(item: ItemLike) -> float:
    if isinstance(item, InvoiceItem):
        return item.line_total
    return float(item.get("quantity", 0) or 0) * float(item.get("unit_price", 0) or 0)


def compute_totals(items: Iterable[ItemLike], vat_rate_percent: float, labor_cost: float = 0) -> Totals:
    """
    total_ht = somme(quantité x prix unitaire) + main d'oeuvre
    total_vat = total_ht x taux / 100
    total_ttc = total_ht + total_vat
    Les valeurs négatives ne sont pas rejetées : la validation revient à l'appelant.
    """
    total_ht = sum(_line_total(it) for it in items) + float(labor_cost or 0)
    total_vat = total_ht * float(vat_rate_percent or 0) / 100
    return Totals(total_ht=total_ht, total_vat=total_vat, total_ttc=total_ht + total_vat)
