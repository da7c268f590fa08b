# pdf/invoice_renderer.py
"""
Rendu PDF d'une facture (A4, reportlab ; le tableau déborde sur les pages suivantes).

Mise en page (millimètres depuis le haut de la page, marges 20 mm) :
- en-tête : image de l'établissement placée selon ses paramètres, sinon titre
  "FACTURE" / "FACTURE PROFORMA" (+ mention rouge pour la proforma)
- numéro et date, bloc client (si nom renseigné)
- tableau des articles (platypus Table : en-tête bleu répété, lignes alternées, désignations
  renvoyées à la ligne, montants en FCFA)
- totaux HT / TVA / TTC alignés à x = 120 mm sous le tableau

Deux sorties partagent la même mise en page :
- download_invoice_pdf() : enregistre {proforma|facture}-{numéro}.pdf
- print_invoice()        : fichier temporaire envoyé à l'imprimante (ou ouvert)
L'échec de l'image d'en-tête est récupéré localement ; toute autre erreur remonte en RenderError.
"""

from __future__ import annotations

import io
import logging
import tempfile
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, Table, TableStyle

from facturier.core.totals import compute_totals
from facturier.models.errors import ImageLoadError, RenderError
from facturier.models.invoice import Invoice
from facturier.models.organization import OrganizationSettings
from facturier.pdf.header_image import HeaderImage, resolve_header_image
from facturier.pdf.layout import (
    COLORS,
    FALLBACK_CONTENT_Y_MM,
    MARGIN_MM,
    PAGE_H_MM,
    PRINTABLE_W_MM,
    SUBTITLE_PROFORMA,
    SUBTITLE_Y_MM,
    TABLE_BOTTOM_LIMIT_MM,
    TABLE_COL_WIDTHS_MM,
    TABLE_FONT_SIZE,
    TABLE_HEADERS,
    TITLE_DEFINITIVE,
    TITLE_PROFORMA,
    TITLE_Y_MM,
    TOTALS_GAP_MM,
    TOTALS_X_MM,
    placement_for_settings,
)
from facturier.utils.formatage import format_date_fr, format_money, format_quantity, format_rate
from facturier.utils.impression import print_or_open

logger = logging.getLogger(__name__)

ImageResolver = Callable[[str], HeaderImage]
SettingsLike = Union[OrganizationSettings, Mapping, None]

CELL_STYLE = ParagraphStyle("cellule", fontName="Helvetica", fontSize=TABLE_FONT_SIZE, leading=TABLE_FONT_SIZE + 2)
AMOUNT_STYLE = ParagraphStyle("montant", parent=CELL_STYLE, alignment=TA_RIGHT)


def _y(y_mm: float) -> float:
    """Ordonnée reportlab (origine en bas) depuis une position en mm depuis le haut."""
    return (PAGE_H_MM - y_mm) * mm


def invoice_filename(invoice: Invoice) -> str:
    prefix = "proforma" if invoice.is_proforma else "facture"
    return f"{prefix}-{invoice.invoice_number or 'brouillon'}.pdf"


def _coerce_settings(settings: SettingsLike) -> Optional[OrganizationSettings]:
    if settings is None or isinstance(settings, OrganizationSettings):
        return settings
    return OrganizationSettings.from_dict(settings)


class InvoiceRenderer:
    def __init__(self, invoice: Invoice, settings: SettingsLike = None, image_resolver: ImageResolver = resolve_header_image):
        self.invoice = invoice
        self.settings = _coerce_settings(settings)
        self.image_resolver = image_resolver
        # titre effectivement dessiné (None si l'image d'en-tête est utilisée)
        self.header_title: Optional[str] = None
        # ordonnée (mm) où commence le contenu sous l'en-tête, connue après render()
        self.content_start_y_mm: Optional[float] = None

    # --- en-tête ---
    def _draw_fallback_title(self, c: canvas.Canvas) -> float:
        c.setFont("Helvetica-Bold", 24)
        if self.invoice.is_proforma:
            c.drawString(MARGIN_MM * mm, _y(TITLE_Y_MM), TITLE_PROFORMA)
            c.setFont("Helvetica", 10)
            c.setFillColorRGB(*COLORS["red"])
            c.drawString(MARGIN_MM * mm, _y(SUBTITLE_Y_MM), SUBTITLE_PROFORMA)
            c.setFillColorRGB(*COLORS["black"])
            self.header_title = TITLE_PROFORMA
        else:
            c.drawString(MARGIN_MM * mm, _y(TITLE_Y_MM), TITLE_DEFINITIVE)
            self.header_title = TITLE_DEFINITIVE
        return FALLBACK_CONTENT_Y_MM

    def _draw_header(self, c: canvas.Canvas) -> float:
        logo_url = self.settings.logo_url if self.settings else None
        if not logo_url:
            return self._draw_fallback_title(c)

        try:
            image = self.image_resolver(logo_url)
        except ImageLoadError as e:
            logger.warning("Image d'en-tête indisponible (%s), titre par défaut utilisé : %s", logo_url, e)
            return self._draw_fallback_title(c)

        placement = placement_for_settings(self.settings)
        c.drawImage(
            ImageReader(io.BytesIO(image.png_bytes)),
            placement.x_mm * mm,
            _y(placement.y_mm + placement.height_mm),
            width=placement.width_mm * mm,
            height=placement.height_mm * mm,
            mask="auto",
        )
        self.header_title = None
        return placement.content_start_y_mm

    # --- numéro, date, client ---
    def _draw_metadata(self, c: canvas.Canvas, start_y: float) -> None:
        c.setFont("Helvetica", 12)
        c.drawString(MARGIN_MM * mm, _y(start_y), f"N° {self.invoice.invoice_number or '-'}")
        date_txt = format_date_fr(self.invoice.created_at)
        if date_txt:
            c.drawString(MARGIN_MM * mm, _y(start_y + 7), f"Date: {date_txt}")

    def _draw_client(self, c: canvas.Canvas, start_y: float) -> float:
        client_y = start_y + 20
        if not self.invoice.client_name:
            return client_y
        c.setFont("Helvetica-Bold", 11)
        c.drawString(MARGIN_MM * mm, _y(client_y), "Client:")
        c.setFont("Helvetica", 11)
        c.drawString(MARGIN_MM * mm, _y(client_y + 7), self.invoice.client_name)
        if self.invoice.client_address:
            c.drawString(MARGIN_MM * mm, _y(client_y + 14), self.invoice.client_address)
        return client_y + 25

    # --- tableau ---
    def _build_items_table(self) -> Table:
        """Tableau des articles : désignations et montants en Paragraph (retour à la ligne, jamais tronqués)."""
        rows: List[List] = [TABLE_HEADERS]
        for item in self.invoice.items:
            rows.append([
                Paragraph(escape(item.designation), CELL_STYLE),
                format_quantity(item.quantity),
                Paragraph(format_money(item.unit_price), AMOUNT_STYLE),
                Paragraph(format_money(item.line_total), AMOUNT_STYLE),
            ])

        tbl = Table(rows, colWidths=[w * mm for w in TABLE_COL_WIDTHS_MM], repeatRows=1)
        tbl.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.Color(*COLORS["header_fill"])),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.Color(*COLORS["white"])),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 0), (-1, -1), TABLE_FONT_SIZE),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.Color(*COLORS["row_alt"]), colors.Color(*COLORS["white"])]),
            ("ALIGN", (1, 1), (1, -1), "RIGHT"),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 4),
            ("RIGHTPADDING", (0, 0), (-1, -1), 4),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]))
        return tbl

    def _draw_items_table(self, c: canvas.Canvas, start_y: float) -> float:
        """Place le tableau à start_y ; la suite passe sur une nouvelle page (en-tête répété)."""
        avail_w = PRINTABLE_W_MM * mm
        pending = [self._build_items_table()]
        y_mm = start_y
        while pending:
            tbl = pending.pop(0)
            avail_h = (TABLE_BOTTOM_LIMIT_MM - y_mm) * mm
            _, h = tbl.wrapOn(c, avail_w, avail_h)
            if h <= avail_h:
                tbl.drawOn(c, MARGIN_MM * mm, _y(y_mm) - h)
                y_mm += h / mm
                continue

            parts = tbl.split(avail_w, avail_h)
            if not parts:
                if y_mm <= MARGIN_MM:
                    # ligne plus haute qu'une page entière : dessinée telle quelle
                    tbl.drawOn(c, MARGIN_MM * mm, _y(y_mm) - h)
                    y_mm += h / mm
                    continue
                c.showPage()
                y_mm = MARGIN_MM
                pending.insert(0, tbl)
                continue

            first = parts[0]
            _, h = first.wrapOn(c, avail_w, avail_h)
            first.drawOn(c, MARGIN_MM * mm, _y(y_mm) - h)
            c.showPage()
            y_mm = MARGIN_MM
            pending = list(parts[1:]) + pending
        return y_mm

    # --- totaux ---
    def _draw_totals(self, c: canvas.Canvas, table_end_y: float) -> None:
        inv = self.invoice
        if inv.total_ht is None or inv.total_vat is None or inv.total_ttc is None:
            # aperçu avant soumission : recalcul local
            preview = compute_totals(inv.items, inv.vat_rate, inv.labor_cost or 0)
            total_ht, total_vat, total_ttc = preview.total_ht, preview.total_vat, preview.total_ttc
        else:
            total_ht, total_vat, total_ttc = inv.total_ht, inv.total_vat, inv.total_ttc

        final_y = table_end_y + TOTALS_GAP_MM
        if final_y + 15 > PAGE_H_MM - 10:
            c.showPage()
            final_y = MARGIN_MM

        c.setFont("Helvetica", 11)
        c.drawString(TOTALS_X_MM * mm, _y(final_y), f"Total HT: {format_money(total_ht)}")
        c.drawString(TOTALS_X_MM * mm, _y(final_y + 7), f"TVA ({format_rate(inv.vat_rate)}%): {format_money(total_vat)}")
        c.setFont("Helvetica-Bold", 12)
        c.drawString(TOTALS_X_MM * mm, _y(final_y + 15), f"Total TTC: {format_money(total_ttc)}")

    def render(self, target) -> None:
        """Dessine la facture dans target (chemin ou flux binaire)."""
        c = canvas.Canvas(target, pagesize=A4, pageCompression=0)
        c.setTitle(invoice_filename(self.invoice)[:-4])
        start_y = self._draw_header(c)
        self.content_start_y_mm = start_y
        self._draw_metadata(c, start_y)
        table_y = self._draw_client(c, start_y)
        table_end = self._draw_items_table(c, table_y)
        self._draw_totals(c, table_end)
        c.showPage()
        c.save()


def render_invoice_bytes(invoice: Invoice, settings: SettingsLike = None, image_resolver: ImageResolver = resolve_header_image) -> bytes:
    buf = io.BytesIO()
    try:
        InvoiceRenderer(invoice, settings, image_resolver).render(buf)
    except Exception as e:
        logger.exception("Échec du rendu PDF de la facture %s", invoice.invoice_number)
        raise RenderError(f"Erreur lors de la génération du PDF : {e}") from e
    return buf.getvalue()


def download_invoice_pdf(invoice: Invoice, settings: SettingsLike = None, output_dir=None, image_resolver: ImageResolver = resolve_header_image) -> Path:
    """Enregistre le PDF sous {proforma|facture}-{numéro}.pdf et retourne son chemin."""
    data = render_invoice_bytes(invoice, settings, image_resolver)
    target_dir = Path(output_dir) if output_dir else Path.cwd()
    path = target_dir / invoice_filename(invoice)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise RenderError(f"Impossible d'enregistrer le PDF : {e}") from e
    logger.info("PDF enregistré : %s", path)
    return path


def print_invoice(invoice: Invoice, settings: SettingsLike = None, image_resolver: ImageResolver = resolve_header_image,
                  printer: Callable[[str], str] = print_or_open) -> Path:
    """Écrit le PDF dans un fichier temporaire et le transmet à l'impression."""
    data = render_invoice_bytes(invoice, settings, image_resolver)
    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix="facturier-"))
        path = tmp_dir / invoice_filename(invoice)
        path.write_bytes(data)
        printer(str(path))
    except (OSError, RuntimeError) as e:
        raise RenderError(f"Impression impossible : {e}") from e
    return path


def render_invoice(invoice: Invoice, settings: SettingsLike = None, mode: str = "download", output_dir=None,
                   image_resolver: ImageResolver = resolve_header_image) -> Path:
    if mode == "download":
        return download_invoice_pdf(invoice, settings, output_dir, image_resolver)
    if mode == "print":
        return print_invoice(invoice, settings, image_resolver)
    raise RenderError(f"Mode de rendu inconnu : {mode}")
