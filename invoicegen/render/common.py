"""Labels, placeholders and file plumbing shared by every renderer."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from pathlib import Path

import config
from invoicegen.documents.models import Document, DocumentType
from invoicegen.errors import RenderFailure

logger = logging.getLogger(__name__)

BUSINESS_PLACEHOLDER = "Your Business"
CLIENT_PLACEHOLDER = "Client Name"
ITEM_PLACEHOLDER = "Item description"
DATE_PLACEHOLDER = "Not set"
NOTES_HINT = "Add notes in the Items tab to include additional terms or information."

TABLE_HEADERS = ["Description", "Quantity", "Rate", "Amount"]

_TITLES = {
    DocumentType.INVOICE: "INVOICE",
    DocumentType.QUOTATION: "QUOTATION",
    DocumentType.RECEIPT: "RECEIPT",
}

_LABELS = {
    DocumentType.INVOICE: "Invoice",
    DocumentType.QUOTATION: "Quote",
    DocumentType.RECEIPT: "Receipt",
}


def document_title(document_type: DocumentType) -> str:
    return _TITLES[document_type]


def document_label(document_type: DocumentType) -> str:
    return _LABELS[document_type]


def date_issued_label(document_type: DocumentType) -> str:
    return "Date:" if document_type is DocumentType.RECEIPT else "Date Issued:"


def due_date_label(document_type: DocumentType) -> str | None:
    if document_type is DocumentType.QUOTATION:
        return "Valid Until:"
    if document_type is DocumentType.INVOICE:
        return "Due Date:"
    return None


def party_label(document_type: DocumentType) -> str:
    return "Received From:" if document_type is DocumentType.RECEIPT else "Bill To:"


def business_lines(document: Document) -> list[str]:
    """Contact lines under the business name, only the ones that are filled in."""
    b = document.business
    lines = []
    if b.address:
        lines.append(b.address)
    if b.city or b.postal_code:
        lines.append(f"{b.city} {b.postal_code}".strip())
    for value in (b.phone, b.email, b.website):
        if value:
            lines.append(value)
    if b.tax_id:
        lines.append(f"Tax ID: {b.tax_id}")
    return lines


def party_lines(document: Document) -> list[str]:
    c = document.client
    lines = []
    if c.address:
        lines.append(c.address)
    if c.city or c.postal_code:
        lines.append(f"{c.city} {c.postal_code}".strip())
    for value in (c.email, c.phone):
        if value:
            lines.append(value)
    return lines


def font_path(bold: bool = False) -> Path:
    """TrueType face shared by the PDF and image exports."""
    return Path(config.FONT_DIR) / (config.FONT_BOLD if bold else config.FONT_REGULAR)


def export_filename(document: Document, extension: str) -> str:
    return f"{document.document_type.value}_{document.document_number or 'XXX'}.{extension}"


def decode_logo(logo: str) -> bytes:
    """Raw image bytes from a data URL (or bare base64)."""
    payload = logo.split(",", 1)[1] if logo.startswith("data:") else logo
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise RenderFailure("logo", f"logo is not valid base64 image data ({e})") from e
    if not data:
        raise RenderFailure("logo", "logo is empty")
    return data


@dataclass
class RenderedFile:
    filename: str
    content: bytes
    media_type: str

    def write_to(self, directory: str | Path) -> Path:
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.content)
        logger.info(f"Wrote {self.filename} ({len(self.content)} bytes) to {directory}")
        return path
