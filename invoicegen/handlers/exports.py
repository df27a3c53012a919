"""Save and download actions: persist, render, then start a fresh document.

Each action, and every change that swaps the session's document, runs as
one unit under a lock, so a reset only ever clears the document that was
just exported. Failures are reported through ExportResult and
never raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

import config
from invoicegen.documents.calculations import blank_line_item, next_document_number
from invoicegen.documents.models import BusinessProfile, Document, PartyInfo
from invoicegen.errors import PersistenceError, RenderFailure
from invoicegen.render.common import RenderedFile
from invoicegen.render.image import render_image
from invoicegen.render.pdf import render_pdf
from invoicegen.storage.documents import DocumentStore
from invoicegen.storage.profile import ProfileStore
from invoicegen.utils.formatting import today_iso

logger = logging.getLogger(__name__)


class ExportAction(str, Enum):
    SAVE = "save"
    DOWNLOAD_PDF = "download_pdf"
    DOWNLOAD_IMAGE = "download_image"


@dataclass
class EditingSession:
    """The document being edited and, when it came from the saved list, its record id."""
    document: Document
    editing_document_id: str | None = None

    @classmethod
    def fresh(cls, business: BusinessProfile, document_number: str | None = None) -> EditingSession:
        number = document_number or "1".zfill(config.DOCUMENT_NUMBER_WIDTH)
        return cls(document=Document.blank(business, number, today_iso()))


@dataclass
class ExportResult:
    action: ExportAction
    ok: bool
    record_id: str | None = None
    file: RenderedFile | None = None
    path: Path | None = None
    failed_stage: str | None = None     # "persist" or "render"
    error: str = ""


_RENDERERS = {
    ExportAction.DOWNLOAD_PDF: render_pdf,
    ExportAction.DOWNLOAD_IMAGE: render_image,
}


class ExportOrchestrator:
    def __init__(self, store: DocumentStore, profiles: ProfileStore, session: EditingSession,
                 export_dir: str | Path | None = None):
        self.store = store
        self.profiles = profiles
        self.session = session
        self.export_dir = Path(export_dir) if export_dir else None
        self._lock = asyncio.Lock()

    async def save(self) -> ExportResult:
        return await self._run(ExportAction.SAVE)

    async def download_pdf(self) -> ExportResult:
        return await self._run(ExportAction.DOWNLOAD_PDF)

    async def download_image(self) -> ExportResult:
        return await self._run(ExportAction.DOWNLOAD_IMAGE)

    async def download_saved_pdf(self, record_id: str) -> ExportResult:
        """Re-render a saved record as PDF. Nothing is persisted or reset."""
        action = ExportAction.DOWNLOAD_PDF
        async with self._lock:
            try:
                record = self.store.get(record_id)
            except PersistenceError as e:
                logger.error(f"Could not read saved documents: {e}", exc_info=True)
                return ExportResult(action, ok=False, record_id=record_id, failed_stage="persist", error=str(e))
            if record is None:
                logger.warning(f"Download skipped, no saved document with id {record_id}")
                return ExportResult(action, ok=False, record_id=record_id, error="Saved document not found")
            try:
                rendered = await asyncio.to_thread(render_pdf, record.document)
                path = rendered.write_to(self.export_dir) if self.export_dir else None
            except (RenderFailure, OSError) as e:
                logger.error(f"Export error: {e}", exc_info=True)
                return ExportResult(action, ok=False, record_id=record_id, failed_stage="render", error=str(e))
            return ExportResult(action, ok=True, record_id=record_id, file=rendered, path=path)

    async def _run(self, action: ExportAction) -> ExportResult:
        async with self._lock:
            snapshot = self.session.document.snapshot()

            try:
                record_id = self._persist(snapshot)
            except PersistenceError as e:
                logger.error(f"Could not save {snapshot.document_type.value}: {e}", exc_info=True)
                return ExportResult(action, ok=False, failed_stage="persist", error=str(e))

            if action is ExportAction.SAVE:
                return ExportResult(action, ok=True, record_id=record_id)

            try:
                rendered = await asyncio.to_thread(_RENDERERS[action], snapshot)
                path = rendered.write_to(self.export_dir) if self.export_dir else None
            except (RenderFailure, OSError) as e:
                # The record stays saved; only this download failed
                logger.error(f"Export error: {e}", exc_info=True)
                return ExportResult(action, ok=False, record_id=record_id, failed_stage="render", error=str(e))

            self.reset_transient()
            return ExportResult(action, ok=True, record_id=record_id, file=rendered, path=path)

    def _persist(self, snapshot: Document) -> str:
        record_id = self.session.editing_document_id
        if record_id:
            self.store.update(record_id, snapshot)
            return record_id
        record_id = self.store.create(snapshot)
        self.session.editing_document_id = record_id
        return record_id

    def reset_transient(self):
        """Start the next document: same business, next number, everything else cleared."""
        doc = self.session.document
        doc.client = PartyInfo()
        doc.line_items = [blank_line_item()]
        doc.date_issued = today_iso()
        doc.due_date = ""
        doc.notes = ""
        doc.vat_rate = 0.0
        doc.document_number = next_document_number(doc.document_number)
        self.session.editing_document_id = None
        logger.info(f"Started {doc.document_type.value} #{doc.document_number}")

    # -- Saved documents --

    async def load_record(self, record_id: str) -> bool:
        """Load a saved record into the session for editing."""
        async with self._lock:
            try:
                record = self.store.get(record_id)
            except PersistenceError as e:
                logger.error(f"Could not read saved documents: {e}", exc_info=True)
                return False
            if record is None:
                logger.warning(f"Load skipped, no saved document with id {record_id}")
                return False
            self.session.document = record.document.snapshot()
            self.session.editing_document_id = record.id
            logger.info(f"Loaded {record.type.value} #{record.document_number} for editing")
            return True

    async def delete_record(self, record_id: str) -> bool:
        async with self._lock:
            try:
                self.store.delete(record_id)
            except PersistenceError as e:
                logger.error(f"Could not delete saved document {record_id}: {e}", exc_info=True)
                return False
            if self.session.editing_document_id == record_id:
                self.session.editing_document_id = None
            return True

    # -- Business profile --

    async def update_business_profile(self, **fields) -> BusinessProfile:
        """Apply profile edits to the session and remember them for the next start."""
        async with self._lock:
            profile = replace(self.session.document.business, **fields)
            self.session.document.business = profile
            try:
                self.profiles.save(profile)
            except PersistenceError as e:
                logger.error(f"Could not store business profile: {e}", exc_info=True)
            return profile
