"""Existence checks against the two storage backends."""

import logging

from app.core.storage import ContentStore, LocalFileSystem

logger = logging.getLogger(__name__)


def content_file_exists(store: ContentStore, file_id: str) -> bool:
    """True iff the content store holds at least one object for file_id.

    Malformed ids and lookup errors are reported as absent.
    """
    try:
        return len(store.find(file_id)) > 0
    except Exception as e:
        logger.warning("Error checking content store file existence for %s: %s", file_id, e)
        return False


def filesystem_file_exists(filesystem: LocalFileSystem, path: str | None) -> bool | None:
    """Existence of path on disk, or None when there is no path to check."""
    if not path:
        return None
    return filesystem.exists(path)
