"""Saved documents, kept as one JSON array under a single key."""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone

from invoicegen.documents.calculations import new_id
from invoicegen.documents.models import Document, SavedDocumentRecord
from invoicegen.errors import PersistenceCorrupt
from invoicegen.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "saved_documents"


def _denormalize(record: SavedDocumentRecord, document: Document):
    """Refresh the list-display fields from the snapshot they describe."""
    record.document = document.snapshot()
    record.type = document.document_type
    record.document_number = document.document_number or "XXX"
    record.client_name = document.client.name or "Unknown Client"
    record.total = document.totals.total


class DocumentStore:
    """CRUD over saved documents. Every write rewrites the whole collection."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self._lock = threading.Lock()

    def list(self) -> list[SavedDocumentRecord]:
        """All readable records in insertion order. Missing or corrupt data lists as empty."""
        records, _ = self._load()
        return records

    def get(self, record_id: str) -> SavedDocumentRecord | None:
        for record in self.list():
            if record.id == record_id:
                return record
        return None

    def create(self, document: Document) -> str:
        with self._lock:
            records, unreadable = self._load()
            existing = {r.id for r in records}
            existing.update(item.get("id") for item in unreadable if isinstance(item, dict))
            record_id = new_id()
            while record_id in existing:
                record_id = new_id()

            record = SavedDocumentRecord(
                id=record_id, type=document.document_type, document_number="",
                client_name="", total=0.0,
                date_created=datetime.now(timezone.utc).isoformat(),
                document=document,
            )
            _denormalize(record, document)
            records.append(record)
            self._write(records, unreadable)

        logger.info(f"Saved {record.type.value} #{record.document_number} as {record_id}")
        return record_id

    def update(self, record_id: str, document: Document):
        """Replace a record's contents. Unknown ids are ignored."""
        with self._lock:
            records, unreadable = self._load()
            for record in records:
                if record.id == record_id:
                    _denormalize(record, document)
                    break
            else:
                logger.warning(f"Update skipped, no saved document with id {record_id}")
                return
            self._write(records, unreadable)

        logger.info(f"Updated saved document {record_id}")

    def delete(self, record_id: str):
        with self._lock:
            records, unreadable = self._load()
            remaining = [r for r in records if r.id != record_id]
            if len(remaining) == len(records):
                logger.warning(f"Delete found no saved document with id {record_id}")
            self._write(remaining, unreadable)

    # -- Internal methods --

    def _load(self) -> tuple[list[SavedDocumentRecord], list]:
        """Decoded records plus the raw entries that could not be decoded."""
        try:
            return self._read()
        except PersistenceCorrupt as e:
            logger.warning(f"Ignoring unreadable saved documents: {e}")
            return [], []

    def _read(self) -> tuple[list[SavedDocumentRecord], list]:
        raw = self.kv.get(STORAGE_KEY)
        if not raw:
            return [], []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceCorrupt(f"invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise PersistenceCorrupt(f"expected a list, got {type(data).__name__}")

        records, unreadable = [], []
        for item in data:
            try:
                records.append(SavedDocumentRecord.from_dict(item))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed saved document: {e!r}")
                unreadable.append(item)
        return records, unreadable

    def _write(self, records: list[SavedDocumentRecord], unreadable: list):
        # Entries we cannot decode are written back untouched
        data = [r.to_dict() for r in records] + unreadable
        self.kv.set(STORAGE_KEY, json.dumps(data))
