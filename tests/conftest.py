import io

import pytest
from PIL import Image

import config
from invoicegen.documents.calculations import blank_line_item, recompute_line_item
from invoicegen.documents.models import BusinessProfile, Document, DocumentType, PartyInfo
from invoicegen.handlers.exports import EditingSession, ExportOrchestrator
from invoicegen.storage.documents import DocumentStore
from invoicegen.storage.kv import KeyValueStore
from invoicegen.storage.profile import ProfileStore, encode_logo_bytes


@pytest.fixture
def kv(tmp_path):
    store = KeyValueStore(tmp_path / "test.db")
    yield store
    store.close()


@pytest.fixture
def store(kv):
    return DocumentStore(kv)


@pytest.fixture
def profiles(kv):
    return ProfileStore(kv)


@pytest.fixture
def business():
    return BusinessProfile(
        name="Xamtastic Electric", address="12 Allen Avenue", city="Ikeja",
        postal_code="100271", phone="+234 801 234 5678", email="hello@xamtastic.ng",
        website="xamtastic.ng", tax_id="TIN-0099",
    )


def _item(description, quantity, rate):
    item = recompute_line_item(blank_line_item(), "description", description)
    item = recompute_line_item(item, "quantity", quantity)
    return recompute_line_item(item, "rate", rate)


@pytest.fixture
def document(business):
    """Two items (3 x 1000.50, 1 x 250) at 7.5% VAT: total 3495.3625."""
    return Document(
        document_type=DocumentType.INVOICE,
        business=business,
        client=PartyInfo(name="Ada Okafor", address="4 Marina Road", city="Lagos",
                         postal_code="101001", email="ada@example.com"),
        line_items=[_item("Wiring inspection", 3, 1000.50), _item("Socket replacement", 1, 250)],
        document_number="001",
        date_issued="2026-10-19",
        due_date="2026-11-02",
        notes="Payment within 14 days.",
        vat_rate=7.5,
    )


@pytest.fixture
def make_items():
    def make(count):
        return [_item(f"Item {n}", n, 10) for n in range(1, count + 1)]
    return make


@pytest.fixture
def logo_data_url():
    buffer = io.BytesIO()
    Image.new("RGB", (120, 60), "#d97706").save(buffer, "PNG")
    return encode_logo_bytes(buffer.getvalue(), "image/png")


@pytest.fixture
def orchestrator(store, profiles, document, tmp_path):
    session = EditingSession(document=document)
    return ExportOrchestrator(store, profiles, session, export_dir=tmp_path / "exports")


@pytest.fixture(autouse=True)
def naira_symbol(monkeypatch):
    monkeypatch.setattr(config, "CURRENCY_SYMBOL", "₦")
