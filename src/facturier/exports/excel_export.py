# exports/excel_export.py
"""
Export Excel de la liste des factures (pandas + openpyxl).
  - Factures : une ligne par facture, désignations concaténées par '; '
  - Articles : une ligne par article
En-têtes en gras sur fond bleu clair, largeur de colonnes ajustée au contenu.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from facturier.models.invoice import Invoice
from facturier.utils.formatage import format_date_fr

logger = logging.getLogger(__name__)

TYPE_LABELS = {"definitive": "Définitive", "proforma": "Proforma"}


def _style_sheet(ws, columns) -> None:
    hdr_font = Font(bold=True, size=11)
    hdr_fill = PatternFill(start_color="D9E6F6", end_color="D9E6F6", fill_type="solid")
    for col_idx, col in enumerate(columns, start=1):
        cell = ws.cell(row=1, column=col_idx)
        cell.font = hdr_font
        cell.fill = hdr_fill
        cell.alignment = Alignment(horizontal="center", vertical="center")
        max_len = max((len(str(ws.cell(r, col_idx).value or "")) for r in range(1, ws.max_row + 1)), default=len(col))
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max(max_len + 4, len(col) + 2), 60)


def invoices_dataframe(invoices: List[Invoice]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "N° facture": inv.invoice_number or "",
            "Date": format_date_fr(inv.created_at),
            "Type": TYPE_LABELS.get(inv.type, inv.type),
            "Client": inv.client_name or "",
            "Désignation (articles)": "; ".join(it.designation for it in inv.items if it.designation),
            "Main d'oeuvre": inv.labor_cost or 0,
            "TVA (%)": inv.vat_rate,
            "Total HT": inv.total_ht,
            "Total TVA": inv.total_vat,
            "Total TTC": inv.total_ttc,
        }
        for inv in invoices
    ])


def items_dataframe(invoices: List[Invoice]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "N°": inv.invoice_number or "",
            "Date": format_date_fr(inv.created_at),
            "Type": TYPE_LABELS.get(inv.type, inv.type),
            "Désignation": it.designation,
            "Qté": it.quantity,
            "Prix unitaire": it.unit_price,
            "Total ligne": it.line_total,
        }
        for inv in invoices
        for it in inv.items
    ])


def export_invoices_excel(invoices: List[Invoice], filename) -> Tuple[bool, Optional[str]]:
    """Retourne (True, None) ou (False, message)."""
    df_factures = invoices_dataframe(invoices)
    if df_factures.empty:
        return False, "Aucune donnée"
    df_items = items_dataframe(invoices)

    try:
        Path(filename).parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(filename, engine="openpyxl") as writer:
            df_factures.to_excel(writer, index=False, sheet_name="Factures")
            _style_sheet(writer.book["Factures"], df_factures.columns)
            if not df_items.empty:
                df_items.to_excel(writer, index=False, sheet_name="Articles")
                _style_sheet(writer.book["Articles"], df_items.columns)
    except (OSError, ValueError) as e:
        logger.exception("Export Excel échoué : %s", e)
        return False, str(e)

    logger.info("Export Excel : %d facture(s) -> %s", len(df_factures), filename)
    return True, None
