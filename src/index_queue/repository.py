"""SQLAlchemy storage of index queue items.

The repository owns every query against the index_queue_item table:

- Lookup by (item_type, item_uid, root), by site and by configuration
- Selection of due items for the indexer
- Error bookkeeping and per-state counts for statistics
- Bulk deletes used by re-initialization

A unique constraint on (item_type, item_uid, root) guards the
exists-then-insert sequence of concurrent writers: a losing insert is
reported as False so the caller can update the existing entry instead.
"""

import logging
import time
from collections.abc import Callable, Sequence

from sqlalchemy import and_, case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from .models import QueueItemEntry
from .schemas import QueueItem, QueueStatistic
from .translator import db_entry_to_queue_item, new_db_entry

logger = logging.getLogger(__name__)


def _now() -> int:
    return int(time.time())


class QueueItemRepository:
    """SQLAlchemy repository for index queue items.

    Example:
        session_factory = create_session_factory(engine)
        repository = QueueItemRepository(session_factory)

        repository.add("pages", 12, root=1, changed=1700000000, indexing_configuration="pages")
        items = repository.find_items_to_index(root=1, limit=50)
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Callable[[], int] = _now,
    ):
        """Initialize repository with session factory and clock.

        Args:
            session_factory: SQLAlchemy session factory (sessionmaker)
            clock: Returns the current time as a seconds timestamp
        """
        self.session_factory: sessionmaker[Session] = session_factory
        self.clock: Callable[[], int] = clock

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add(
        self,
        item_type: str,
        item_uid: int,
        root: int,
        changed: int,
        indexing_configuration: str,
        *,
        parameters: object = None,
    ) -> bool:
        """Insert a new, never indexed queue item.

        Returns:
            True if the item was inserted, False if an item with the same
            (item_type, item_uid, root) already exists
        """
        with self.session_factory() as session:
            session.add(
                new_db_entry(
                    item_type,
                    item_uid,
                    root,
                    changed,
                    indexing_configuration,
                    parameters=parameters,
                )
            )
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.debug(
                    f"Queue item {item_type}:{item_uid} for root {root} was inserted concurrently"
                )
                return False
            return True

    def add_many(
        self,
        item_type: str,
        item_uids: Sequence[int],
        root: int,
        changed_times: Sequence[int],
        indexing_configuration: str,
        *,
        parameters: object = None,
    ) -> int:
        """Insert several queue items of one type in a single transaction.

        Items already queued for the root are skipped: when the bulk insert
        hits the unique constraint, the items are inserted one by one.

        Returns:
            Number of inserted items
        """
        if not item_uids:
            return 0

        with self.session_factory() as session:
            session.add_all(
                [
                    new_db_entry(
                        item_type,
                        item_uid,
                        root,
                        changed,
                        indexing_configuration,
                        parameters=parameters,
                    )
                    for item_uid, changed in zip(item_uids, changed_times, strict=True)
                ]
            )
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.debug(
                    f"Bulk insert of {item_type} items for root {root} conflicted, "
                    "inserting one by one"
                )
            else:
                return len(item_uids)

        added = 0
        for item_uid, changed in zip(item_uids, changed_times, strict=True):
            if self.add(
                item_type, item_uid, root, changed, indexing_configuration, parameters=parameters
            ):
                added += 1
        return added

    def update_existing_item(
        self,
        item_type: str,
        item_uid: int,
        root: int,
        changed: int,
        indexing_configuration: str,
    ) -> bool:
        """Refresh an existing item and clear its error state.

        The stored changed time never decreases: the new value only wins
        when it is later than the stored one.

        Returns:
            True if an item was updated, False if none exists
        """
        with self.session_factory() as session:
            stmt = (
                update(QueueItemEntry)
                .where(
                    QueueItemEntry.item_type == item_type,
                    QueueItemEntry.item_uid == item_uid,
                    QueueItemEntry.root == root,
                )
                .values(
                    changed=case(
                        (QueueItemEntry.changed > changed, QueueItemEntry.changed),
                        else_=changed,
                    ),
                    indexing_configuration=indexing_configuration,
                    errors="",
                )
                .execution_options(synchronize_session=False)
            )
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0

    def mark_item_as_failed(self, item: QueueItem | int, error_message: str) -> bool:
        """Store an error message on an item, excluding it from future batches.

        Returns:
            True if the item was found
        """
        item_id = item.uid if isinstance(item, QueueItem) else int(item)
        with self.session_factory() as session:
            stmt = (
                update(QueueItemEntry)
                .where(QueueItemEntry.uid == item_id)
                .values(errors=error_message)
            )
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0

    def update_index_time_by_item(self, item: QueueItem) -> bool:
        """Set the indexed timestamp of an item to now. Errors are left as they are.

        Returns:
            True if the item was found
        """
        with self.session_factory() as session:
            stmt = (
                update(QueueItemEntry)
                .where(QueueItemEntry.uid == item.uid)
                .values(indexed=self.clock())
            )
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0

    def flush_all_errors(self) -> int:
        """Clear the error message of every item.

        Returns:
            Number of items that had an error
        """
        with self.session_factory() as session:
            stmt = update(QueueItemEntry).where(QueueItemEntry.errors != "").values(errors="")
            result = session.execute(stmt)
            session.commit()
            return result.rowcount

    # -------------------------------------------------------------------------
    # Deletes
    # -------------------------------------------------------------------------

    def _delete_where(self, *criteria) -> int:
        stmt = delete(QueueItemEntry)
        if criteria:
            stmt = stmt.where(*criteria)
        with self.session_factory() as session:
            result = session.execute(stmt)
            session.commit()
            return result.rowcount

    def delete_item(self, item_type: str, item_uid: int) -> int:
        """Delete the items of a record for all sites."""
        return self._delete_where(
            QueueItemEntry.item_type == item_type,
            QueueItemEntry.item_uid == item_uid,
        )

    def delete_items_by_type(self, item_type: str) -> int:
        return self._delete_where(QueueItemEntry.item_type == item_type)

    def delete_items_by_site(self, root: int, indexing_configuration: str = "") -> int:
        """Delete the items of a site, optionally only those of one configuration."""
        criteria = [QueueItemEntry.root == root]
        if indexing_configuration:
            criteria.append(QueueItemEntry.indexing_configuration == indexing_configuration)
        return self._delete_where(*criteria)

    def delete_all_items(self) -> int:
        return self._delete_where()

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _exists(self, *criteria) -> bool:
        with self.session_factory() as session:
            stmt = select(QueueItemEntry.uid).where(*criteria).limit(1)
            return session.execute(stmt).first() is not None

    def contains_item(self, item_type: str, item_uid: int) -> bool:
        return self._exists(
            QueueItemEntry.item_type == item_type,
            QueueItemEntry.item_uid == item_uid,
        )

    def contains_item_with_root_page_id(self, item_type: str, item_uid: int, root: int) -> bool:
        return self._exists(
            QueueItemEntry.item_type == item_type,
            QueueItemEntry.item_uid == item_uid,
            QueueItemEntry.root == root,
        )

    def contains_indexed_item(self, item_type: str, item_uid: int) -> bool:
        return self._exists(
            QueueItemEntry.item_type == item_type,
            QueueItemEntry.item_uid == item_uid,
            QueueItemEntry.indexed > 0,
        )

    def _find(self, stmt) -> list[QueueItem]:
        with self.session_factory() as session:
            return [db_entry_to_queue_item(entry) for entry in session.execute(stmt).scalars()]

    def find_item_by_uid(self, uid: int) -> QueueItem | None:
        with self.session_factory() as session:
            entry = session.get(QueueItemEntry, uid)
            return db_entry_to_queue_item(entry) if entry else None

    def find_items_by_item_type_and_item_uid(
        self, item_type: str, item_uid: int
    ) -> list[QueueItem]:
        return self._find(
            select(QueueItemEntry)
            .where(
                QueueItemEntry.item_type == item_type,
                QueueItemEntry.item_uid == item_uid,
            )
            .order_by(QueueItemEntry.uid)
        )

    def find_all(self) -> list[QueueItem]:
        return self._find(select(QueueItemEntry).order_by(QueueItemEntry.uid))

    def count_all(self) -> int:
        with self.session_factory() as session:
            return session.execute(select(func.count(QueueItemEntry.uid))).scalar_one()

    def find_items_to_index(self, root: int, limit: int) -> list[QueueItem]:
        """Find due, error-free items of a site.

        An item is due once it changed after its last indexing and its
        changed time (possibly a scheduled start time) has been reached.
        The longest waiting items come first, ties by queue id.
        """
        now = self.clock()
        return self._find(
            select(QueueItemEntry)
            .where(
                QueueItemEntry.root == root,
                QueueItemEntry.changed > QueueItemEntry.indexed,
                QueueItemEntry.changed <= now,
                QueueItemEntry.errors == "",
            )
            .order_by(QueueItemEntry.changed, QueueItemEntry.uid)
            .limit(limit)
        )

    def find_errors_by_site(self, root: int) -> list[QueueItem]:
        return self._find(
            select(QueueItemEntry)
            .where(QueueItemEntry.root == root, QueueItemEntry.errors != "")
            .order_by(QueueItemEntry.uid)
        )

    def find_last_indexed_row(self, root: int) -> QueueItem | None:
        """Find the most recently indexed item of a site."""
        items = self._find(
            select(QueueItemEntry)
            .where(QueueItemEntry.root == root, QueueItemEntry.indexed > 0)
            .order_by(QueueItemEntry.indexed.desc(), QueueItemEntry.uid.desc())
            .limit(1)
        )
        return items[0] if items else None

    def count_by_state(self, root: int, indexing_configuration: str = "") -> QueueStatistic:
        """Count pending, failed and successful items of a site in one query.

        Failed items are never counted as pending or successful.
        """
        failed = QueueItemEntry.errors != ""
        state = case(
            (failed, "failed"),
            (QueueItemEntry.indexed < QueueItemEntry.changed, "pending"),
            else_="success",
        ).label("state")

        criteria = [QueueItemEntry.root == root]
        if indexing_configuration:
            criteria.append(QueueItemEntry.indexing_configuration == indexing_configuration)

        stmt = (
            select(state, func.count(QueueItemEntry.uid))
            .where(and_(*criteria))
            .group_by(state)
        )

        counts: dict[str, int] = {}
        with self.session_factory() as session:
            for row_state, count in session.execute(stmt):
                counts[row_state] = int(count)

        return QueueStatistic(
            pending_count=counts.get("pending", 0),
            failed_count=counts.get("failed", 0),
            success_count=counts.get("success", 0),
        )
