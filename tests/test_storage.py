import json
import re
from datetime import datetime

from invoicegen.documents.models import BusinessProfile, DocumentType, PartyInfo
from invoicegen.storage.documents import STORAGE_KEY, DocumentStore
from invoicegen.storage.kv import KeyValueStore
from invoicegen.storage.profile import ProfileStore, encode_logo


def test_list_is_empty_without_data(store):
    assert store.list() == []


def test_create_then_list(store, document):
    record_id = store.create(document)

    records = store.list()
    assert [r.id for r in records] == [record_id]
    record = records[0]
    assert record.type is DocumentType.INVOICE
    assert record.document_number == "001"
    assert record.client_name == "Ada Okafor"
    assert record.total == document.totals.total
    assert datetime.fromisoformat(record.date_created)
    assert record.document.line_items == document.line_items


def test_blank_fields_are_denormalized_with_placeholders(store, document):
    document.client = PartyInfo()
    document.document_number = ""
    record = store.get(store.create(document))
    assert record.client_name == "Unknown Client"
    assert record.document_number == "XXX"


def test_saved_record_does_not_alias_live_document(store, document):
    record_id = store.create(document)
    document.line_items[0].description = "Changed after saving"
    document.client.name = "Someone else"

    record = store.get(record_id)
    assert record.document.line_items[0].description == "Wiring inspection"
    assert record.client_name == "Ada Okafor"


def test_update_keeps_id_and_date_created(store, document):
    record_id = store.create(document)
    original = store.get(record_id)

    snapshot = original.document
    snapshot.client.name = "Chidi Eze"
    snapshot.vat_rate = 0
    store.update(record_id, snapshot)

    updated = store.get(record_id)
    assert updated.id == record_id
    assert updated.date_created == original.date_created
    assert updated.client_name == "Chidi Eze"
    assert updated.total == snapshot.totals.subtotal
    assert len(store.list()) == 1


def test_update_unknown_id_is_a_no_op(store, document):
    record_id = store.create(document)
    before = store.kv.get(STORAGE_KEY)

    store.update("missing", document)
    assert store.kv.get(STORAGE_KEY) == before
    assert [r.id for r in store.list()] == [record_id]


def test_delete(store, document):
    first = store.create(document)
    second = store.create(document)

    store.delete(first)
    assert [r.id for r in store.list()] == [second]

    store.delete("does-not-exist")
    assert [r.id for r in store.list()] == [second]


def test_ids_are_unique_and_insertion_ordered(store, document):
    ids = [store.create(document) for _ in range(25)]
    assert len(set(ids)) == 25
    assert [r.id for r in store.list()] == ids


def test_corrupt_blob_lists_as_empty(kv, store, document):
    kv.set(STORAGE_KEY, "{not json")
    assert store.list() == []

    kv.set(STORAGE_KEY, json.dumps({"not": "a list"}))
    assert store.list() == []

    kv.set(STORAGE_KEY, json.dumps([{"id": "1"}]))
    assert store.list() == []

    record_id = store.create(document)
    assert [r.id for r in store.list()] == [record_id]


def test_malformed_record_does_not_cost_the_others(kv, store, document):
    good_id = store.create(document)
    good = json.loads(kv.get(STORAGE_KEY))[0]
    kv.set(STORAGE_KEY, json.dumps([good, {"id": "1"}]))

    assert [r.id for r in store.list()] == [good_id]

    document.client.name = "Chidi Eze"
    new_id = store.create(document)
    assert [r.id for r in store.list()] == [good_id, new_id]
    assert store.get(good_id).client_name == "Ada Okafor"
    assert {"id": "1"} in json.loads(kv.get(STORAGE_KEY))

    store.delete(new_id)
    assert [r.id for r in store.list()] == [good_id]


def test_records_survive_reopening(tmp_path, document):
    first = KeyValueStore(tmp_path / "shared.db")
    record_id = DocumentStore(first).create(document)
    first.close()

    second = KeyValueStore(tmp_path / "shared.db")
    assert [r.id for r in DocumentStore(second).list()] == [record_id]
    second.close()


def test_stored_blob_layout(kv, store, document):
    store.create(document)
    data = json.loads(kv.get(STORAGE_KEY))
    assert set(data[0]) == {"id", "type", "documentNumber", "clientName", "total", "dateCreated", "documentData"}
    snapshot = data[0]["documentData"]
    assert snapshot["documentType"] == "invoice"
    assert snapshot["clientInfo"]["postalCode"] == "101001"
    assert snapshot["vatRate"] == 7.5
    assert abs(snapshot["total"] - 3495.3625) < 1e-9


def test_profile_round_trip(profiles, business):
    assert profiles.load() == BusinessProfile()
    profiles.save(business)
    assert profiles.load() == business


def test_corrupt_profile_loads_blank(kv, profiles):
    kv.set("business_profile", "[1, 2")
    assert profiles.load() == BusinessProfile()


def test_encode_logo_from_file(tmp_path):
    path = tmp_path / "logo.JPG"
    path.write_bytes(b"\xff\xd8\xff\xe0fake")
    assert encode_logo(path).startswith("data:image/jpeg;base64,")


def test_key_value_slot(kv):
    assert kv.get("anything") is None
    kv.set("anything", "one")
    kv.set("anything", "two")
    assert kv.get("anything") == "two"
    kv.delete("anything")
    assert kv.get("anything") is None


def test_record_ids_share_the_line_item_id_shape(store, document):
    record_id = store.create(document)
    assert re.fullmatch(r"\d+-[0-9a-f]{8}", record_id)
    assert re.fullmatch(r"\d+-[0-9a-f]{8}", document.line_items[0].id)
    assert store.create(document) != record_id
