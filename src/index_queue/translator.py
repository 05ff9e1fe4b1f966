"""Conversion between queue table rows and QueueItem records."""

from .models import QueueItemEntry
from .schemas import QueueItem


def db_entry_to_queue_item(entry: QueueItemEntry) -> QueueItem:
    """Convert SQLAlchemy QueueItemEntry to Pydantic QueueItem.

    Returns:
        Pydantic QueueItem with all queue fields
    """
    return QueueItem.model_validate(entry)


def new_db_entry(
    item_type: str,
    item_uid: int,
    root: int,
    changed: int,
    indexing_configuration: str,
    *,
    parameters: object = None,
) -> QueueItemEntry:
    """Create a never-indexed, error-free SQLAlchemy QueueItemEntry.

    Returns:
        SQLAlchemy QueueItemEntry instance (not persisted)
    """
    return QueueItemEntry(
        item_type=item_type,
        item_uid=item_uid,
        root=root,
        changed=changed,
        indexed=0,
        errors="",
        indexing_configuration=indexing_configuration,
        parameters=parameters,
    )
