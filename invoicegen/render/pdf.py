"""PDF export of a single document."""

from __future__ import annotations

import io
import logging
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Image, SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from invoicegen.documents.models import Document
from invoicegen.errors import RenderFailure
from invoicegen.render import common
from invoicegen.utils.formatting import format_date, format_money, format_number, format_rate

logger = logging.getLogger(__name__)

PRIMARY = colors.HexColor("#2563EB")
TEXT = colors.HexColor("#374151")
BORDER = colors.HexColor("#D1D5DB")
HEADER_FILL = colors.HexColor("#F3F4F6")
STRIPE_FILL = colors.HexColor("#F9FAFB")
RULE = colors.HexColor("#C8C8C8")

MARGIN = 20 * mm
LOGO_BOX = 35 * mm
FRAME_WIDTH = A4[0] - 2 * MARGIN
# Quantity, Rate and Amount are fixed; Description takes the rest
ITEM_COL_WIDTHS = [FRAME_WIDTH - 90 * mm, 25 * mm, 30 * mm, 35 * mm]
TOTALS_COL_WIDTHS = [25 * mm, 35 * mm]

FONT = "InvoiceSans"
FONT_BOLD = "InvoiceSans-Bold"


def _register_fonts():
    # Core Helvetica has no glyph for symbols such as ₦
    if FONT_BOLD in pdfmetrics.getRegisteredFontNames():
        return
    pdfmetrics.registerFont(TTFont(FONT, str(common.font_path())))
    pdfmetrics.registerFont(TTFont(FONT_BOLD, str(common.font_path(bold=True))))
    pdfmetrics.registerFontFamily(FONT, normal=FONT, bold=FONT_BOLD, italic=FONT, boldItalic=FONT_BOLD)


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    normal = ParagraphStyle("DocNormal", parent=base["Normal"], fontName=FONT,
                            fontSize=10, leading=13, textColor=TEXT)
    return {
        "normal": normal,
        "right": ParagraphStyle("DocRight", parent=normal, alignment=TA_RIGHT),
        "business": ParagraphStyle("DocBusiness", parent=normal, fontName=FONT_BOLD,
                                    fontSize=12, leading=16, alignment=TA_RIGHT, spaceAfter=2),
        "title": ParagraphStyle("DocTitle", parent=normal, fontName=FONT_BOLD,
                                fontSize=28, leading=32, textColor=PRIMARY),
        "heading": ParagraphStyle("DocHeading", parent=normal, fontName=FONT_BOLD,
                                  fontSize=12, leading=16, spaceAfter=4),
        "bold": ParagraphStyle("DocBold", parent=normal, fontName=FONT_BOLD),
        "cell": ParagraphStyle("DocCell", parent=normal, leading=12),
    }


def _p(text: str, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(text).replace("\n", "<br/>"), style)


def _logo(document: Document) -> Image:
    data = common.decode_logo(document.business.logo)
    try:
        logo = Image(io.BytesIO(data), width=LOGO_BOX, height=LOGO_BOX, kind="proportional", lazy=0)
    except Exception as e:
        raise RenderFailure("pdf", f"logo image could not be read ({e})") from e
    logo.hAlign = "RIGHT"
    return logo


def _header(document: Document, styles: dict) -> Table:
    left = [_p(common.document_title(document.document_type), styles["title"])]

    right = []
    if document.business.logo:
        right.append(_logo(document))
        right.append(Spacer(1, 2 * mm))
    right.append(_p(document.business.name or common.BUSINESS_PLACEHOLDER, styles["business"]))
    right.extend(_p(line, styles["right"]) for line in common.business_lines(document))

    header = Table([[left, right]], colWidths=[FRAME_WIDTH / 2, FRAME_WIDTH / 2])
    header.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("RIGHTPADDING", (0, 0), (-1, -1), 0),
    ]))
    return header


def _meta(document: Document, styles: dict) -> list:
    doc_type = document.document_type
    lines = [
        f"{common.document_label(doc_type)} #: {document.document_number or 'XXX'}",
        f"{common.date_issued_label(doc_type)} {format_date(document.date_issued, common.DATE_PLACEHOLDER)}",
    ]
    due_label = common.due_date_label(doc_type)
    if due_label and document.visible_due_date:
        lines.append(f"{due_label} {format_date(document.visible_due_date)}")
    return [_p(line, styles["normal"]) for line in lines]


def _party(document: Document, styles: dict) -> list:
    elements = [
        _p(common.party_label(document.document_type), styles["heading"]),
        _p(document.client.name or common.CLIENT_PLACEHOLDER, styles["normal"]),
    ]
    elements.extend(_p(line, styles["normal"]) for line in common.party_lines(document))
    return elements


def _items_table(document: Document, styles: dict) -> Table:
    table_data = [list(common.TABLE_HEADERS)]
    for item in document.line_items:
        table_data.append([
            _p(item.description or common.ITEM_PLACEHOLDER, styles["cell"]),
            format_number(item.quantity),
            format_money(item.rate),
            format_money(item.amount),
        ])

    t = Table(table_data, colWidths=ITEM_COL_WIDTHS, repeatRows=1)
    t.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("TEXTCOLOR", (0, 0), (-1, -1), TEXT),
        ("FONTNAME", (0, 0), (-1, -1), FONT),
        ("FONTNAME", (0, 0), (-1, 0), FONT_BOLD),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("GRID", (0, 0), (-1, -1), 0.5, BORDER),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("ALIGN", (1, 0), (2, -1), "CENTER"),
        ("ALIGN", (3, 0), (3, -1), "RIGHT"),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE_FILL]),
    ]))
    return t


def _totals_table(document: Document) -> Table:
    totals = document.totals
    rows = [["Subtotal:", format_money(totals.subtotal)]]
    if document.vat_rate > 0:
        rows.append([f"VAT ({format_rate(document.vat_rate)}%):", format_money(totals.vat_amount)])
    rows.append(["Total:", format_money(totals.total)])

    t = Table(rows, colWidths=TOTALS_COL_WIDTHS, hAlign="RIGHT")
    t.setStyle(TableStyle([
        ("TEXTCOLOR", (0, 0), (-1, -1), TEXT),
        ("FONTNAME", (0, 0), (-1, -1), FONT),
        ("FONTSIZE", (0, 0), (-1, -2), 10),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("LINEABOVE", (0, -1), (-1, -1), 0.5, RULE),
        ("FONTNAME", (0, -1), (-1, -1), FONT_BOLD),
        ("FONTSIZE", (0, -1), (-1, -1), 12),
        ("TOPPADDING", (0, -1), (-1, -1), 6),
    ]))
    return t


def _notes(document: Document, styles: dict) -> list:
    if not document.notes:
        return []
    return [
        Spacer(1, 10 * mm),
        _p("Notes:", styles["bold"]),
        Spacer(1, 2 * mm),
        _p(document.notes, styles["normal"]),
    ]


def render_pdf(document: Document) -> common.RenderedFile:
    """Lay out a document on A4 pages and return the PDF bytes."""
    filename = common.export_filename(document, "pdf")
    buffer = io.BytesIO()

    try:
        doc = SimpleDocTemplate(
            buffer, pagesize=A4,
            leftMargin=MARGIN, rightMargin=MARGIN,
            topMargin=MARGIN, bottomMargin=MARGIN,
            title=filename,
        )
        _register_fonts()
        styles = _styles()

        elements = [_header(document, styles), Spacer(1, 8 * mm)]
        elements.extend(_meta(document, styles))
        elements.append(Spacer(1, 8 * mm))
        elements.extend(_party(document, styles))
        elements.append(Spacer(1, 10 * mm))
        elements.append(_items_table(document, styles))
        elements.append(Spacer(1, 10 * mm))
        elements.append(_totals_table(document))
        elements.extend(_notes(document, styles))

        doc.build(elements)
    except RenderFailure as e:
        if e.channel != "pdf":
            raise RenderFailure("pdf", str(e)) from e
        raise
    except Exception as e:
        raise RenderFailure("pdf", str(e)) from e

    logger.info(f"PDF rendered: {filename}")
    return common.RenderedFile(filename=filename, content=buffer.getvalue(), media_type="application/pdf")
