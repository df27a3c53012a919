import pytest

from invoicegen.documents.models import DocumentType
from invoicegen.errors import RenderFailure
from invoicegen.render.common import NOTES_HINT, export_filename
from invoicegen.render.preview import build_preview


def test_invoice_layout(document):
    tree = build_preview(document)

    assert tree.find("title").text == "INVOICE"
    meta = [n.text for n in tree.find(role="meta").children]
    assert meta == ["Invoice #: 001", "Date Issued: October 19, 2026", "Due Date: November 2, 2026"]
    assert tree.find(role="party").children[0].text == "Bill To:"

    business = tree.find(role="business")
    assert business.style["align"] == "right"
    assert business.children[0].text == "Xamtastic Electric"
    assert "Tax ID: TIN-0099" in business.text_content()
    assert "xamtastic.ng" in business.text_content()


def test_item_table(document):
    table = build_preview(document).find("table", role="items")
    header, first, second = table.children
    assert [c.text for c in header.children] == ["Description", "Quantity", "Rate", "Amount"]
    assert [c.text for c in first.children] == ["Wiring inspection", "3", "₦1,000.50", "₦3,001.50"]
    assert first.style["background"] != second.style["background"]
    assert table.children[1].children[3].style["align"] == "right"


def test_totals_with_vat(document):
    totals = build_preview(document).find("totals")
    rows = [[c.text for c in row.children] for row in totals.children if row.kind == "row"]
    assert rows == [
        ["Subtotal:", "₦3,251.50"],
        ["VAT (7.5%):", "₦243.86"],
        ["Total:", "₦3,495.36"],
    ]
    assert totals.children[-1].style["weight"] == "bold"


def test_vat_line_hidden_at_zero(document):
    document.vat_rate = 0
    text = build_preview(document).find("totals").text_content()
    assert "VAT" not in text
    assert "Subtotal:" in text and "Total:" in text


def test_receipt_never_shows_due_date(document):
    document.document_type = DocumentType.RECEIPT
    document.due_date = "2026-11-02"
    tree = build_preview(document)
    text = tree.text_content()

    assert tree.find("title").text == "RECEIPT"
    assert "Due Date" not in text
    assert "Valid Until" not in text
    assert "November 2, 2026" not in text
    assert "Date: October 19, 2026" in text
    assert "Received From:" in text


def test_quotation_labels(document):
    document.document_type = DocumentType.QUOTATION
    text = build_preview(document).text_content()
    assert "Quote #: 001" in text
    assert "Valid Until: November 2, 2026" in text
    assert "Bill To:" in text


def test_due_date_omitted_when_empty(document):
    document.due_date = ""
    assert "Due Date" not in build_preview(document).text_content()


def test_placeholders(document):
    document.business.name = ""
    document.client.name = ""
    document.line_items[0].description = ""
    document.date_issued = ""
    document.document_number = ""
    document.notes = ""
    text = build_preview(document).text_content()

    for placeholder in ("Your Business", "Client Name", "Item description", "Not set", "Invoice #: XXX", NOTES_HINT):
        assert placeholder in text
    assert export_filename(document, "pdf") == "invoice_XXX.pdf"


def test_notes_block(document):
    notes = build_preview(document).find("notes")
    assert [c.text for c in notes.children] == ["Notes:", "Payment within 14 days."]


def test_logo_sits_above_business_name(document, logo_data_url):
    document.business.logo = logo_data_url
    business = build_preview(document).find(role="business")
    assert business.children[0].kind == "logo"
    assert business.children[0].data.startswith(b"\x89PNG")
    assert business.children[1].text == "Xamtastic Electric"


def test_invalid_logo_data(document):
    document.business.logo = "data:image/png;base64,***"
    with pytest.raises(RenderFailure):
        build_preview(document)
