"""
Constantes de mise en page du PDF de facture (millimètres, A4 portrait)
et calcul du placement de l'image d'en-tête.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from facturier.models.organization import HEADER_POSITIONS, OrganizationSettings

PAGE_W_MM, PAGE_H_MM = 210, 297
MARGIN_MM = 20
PRINTABLE_W_MM = PAGE_W_MM - 2 * MARGIN_MM  # 170

HEADER_TOP_MM = 10
PX_TO_MM = 0.35
DEFAULT_HEADER_HEIGHT_PX = 40
DEFAULT_HEADER_WIDTH_PCT = 100
DEFAULT_HEADER_POSITION = "center"

TITLE_Y_MM = 20
SUBTITLE_Y_MM = 28
FALLBACK_CONTENT_Y_MM = 40

TITLE_DEFINITIVE = "FACTURE"
TITLE_PROFORMA = "FACTURE PROFORMA"
SUBTITLE_PROFORMA = "PROFORMA - Non valable pour paiement"

# Tableau des articles
TABLE_HEADERS = ["Désignation", "Quantité", "Prix unitaire", "Total"]
TABLE_COL_WIDTHS_MM = [76, 26, 34, 34]
TABLE_FONT_SIZE = 10
TABLE_BOTTOM_LIMIT_MM = PAGE_H_MM - MARGIN_MM

# Totaux
TOTALS_X_MM = 120
TOTALS_GAP_MM = 10

COLORS = {
    "header_fill": (41 / 255, 128 / 255, 185 / 255),
    "row_alt": (245 / 255, 245 / 255, 245 / 255),
    "red": (1, 0, 0),
    "black": (0, 0, 0),
    "white": (1, 1, 1),
}


@dataclass(frozen=True)
class HeaderPlacement:
    x_mm: float
    y_mm: float
    width_mm: float
    height_mm: float

    @property
    def content_start_y_mm(self) -> float:
        return 15 + self.height_mm


def compute_header_placement(
    header_height_px: Optional[float] = None,
    header_width_pct: Optional[float] = None,
    header_position: Optional[str] = None,
) -> HeaderPlacement:
    height_px = header_height_px or DEFAULT_HEADER_HEIGHT_PX
    width_pct = header_width_pct or DEFAULT_HEADER_WIDTH_PCT
    position = header_position if header_position in HEADER_POSITIONS else DEFAULT_HEADER_POSITION

    width_mm = PRINTABLE_W_MM * width_pct / 100
    if position == "center":
        x_mm = MARGIN_MM + (PRINTABLE_W_MM - width_mm) / 2
    elif position == "right":
        x_mm = MARGIN_MM + PRINTABLE_W_MM - width_mm
    else:
        x_mm = MARGIN_MM

    return HeaderPlacement(x_mm=x_mm, y_mm=HEADER_TOP_MM, width_mm=width_mm, height_mm=height_px * PX_TO_MM)


def placement_for_settings(settings: Optional[OrganizationSettings]) -> HeaderPlacement:
    if settings is None:
        return compute_header_placement()
    return compute_header_placement(settings.header_height, settings.header_width, settings.header_position)
