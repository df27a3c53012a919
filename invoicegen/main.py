"""Startup wiring for an editing session."""
import sys
import logging

import config
from invoicegen.documents.models import BusinessProfile
from invoicegen.errors import PersistenceError
from invoicegen.handlers.exports import EditingSession, ExportOrchestrator
from invoicegen.storage.documents import DocumentStore
from invoicegen.storage.kv import KeyValueStore
from invoicegen.storage.profile import ProfileStore

logger = logging.getLogger(__name__)


def configure_logging(level=None):
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level or config.LOG_LEVEL,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    # Pillow logs every image plugin it loads
    logging.getLogger("PIL").setLevel(logging.WARNING)


def create_orchestrator(db_path=None, export_dir=None) -> ExportOrchestrator:
    """Open the local store, restore the last business profile and start a fresh document."""
    kv = KeyValueStore(db_path or config.DB_PATH)
    profiles = ProfileStore(kv)
    try:
        business = profiles.load()
    except PersistenceError as e:
        logger.error(f"Could not read business profile: {e}")
        business = BusinessProfile()
    session = EditingSession.fresh(business)

    logger.info(f"Session started for {business.name or 'unnamed business'}")
    return ExportOrchestrator(
        DocumentStore(kv), profiles, session,
        export_dir=export_dir or config.EXPORT_DIR,
    )
