"""The index queue.

Content changes are recorded as queue items instead of being sent to the
search engine right away. An indexer later takes due items from the queue,
indexes them and reports back success or failure.

Example:
    queue = Queue(
        repository=QueueItemRepository(session_factory),
        record_source=SQLAlchemyRecordSource(content_engine),
        site_repository=StaticSiteRepository([site]),
    )

    queue.initialize(site)
    queue.update_item("pages", 12)

    for item in queue.get_items_to_index(site):
        ...
        queue.update_index_time_by_item(item)
"""

import logging
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager

from .cache import RecordCache
from .change_time import ChangeTimeCalculator
from .config import Config
from .exceptions import InvalidPostProcessorError
from .hooks import InitializationPostProcessor
from .initializers import InitializerRegistry
from .records import PAGES_TABLE, RecordSource
from .repository import QueueItemRepository
from .resolvers import (
    ConfigurationAwareRecordService,
    IndexingConfigurationResolver,
    RootlineRootPageResolver,
    RootPageResolver,
    SiteRepository,
)
from .schemas import QueueItem, QueueStatistic, Site

logger = logging.getLogger(__name__)


class Queue:
    """Decouples content changes from indexing.

    There is no add method: update_item adds items that are not queued yet
    and refreshes those that are.
    """

    def __init__(
        self,
        repository: QueueItemRepository,
        record_source: RecordSource,
        site_repository: SiteRepository,
        *,
        root_page_resolver: RootPageResolver | None = None,
        configuration_resolver: IndexingConfigurationResolver | None = None,
        change_time_calculator: ChangeTimeCalculator | None = None,
        initializer_registry: InitializerRegistry | None = None,
        post_processors: Iterable[InitializationPostProcessor] = (),
    ):
        """Initialize the queue with its store and collaborators.

        Resolvers and the change time calculator default to implementations
        reading from record_source.

        Raises:
            InvalidPostProcessorError: If a post processor does not implement
                InitializationPostProcessor
        """
        self.repository: QueueItemRepository = repository
        self.record_source: RecordSource = record_source
        self.site_repository: SiteRepository = site_repository
        self.root_page_resolver: RootPageResolver = root_page_resolver or RootlineRootPageResolver(
            record_source
        )
        self.configuration_resolver: IndexingConfigurationResolver = (
            configuration_resolver or ConfigurationAwareRecordService(record_source)
        )
        self.change_time_calculator: ChangeTimeCalculator = (
            change_time_calculator or ChangeTimeCalculator(record_source)
        )
        self.initializer_registry: InitializerRegistry = initializer_registry or InitializerRegistry()

        self.post_processors: list[InitializationPostProcessor] = []
        for post_processor in post_processors:
            self.add_post_processor(post_processor)

        self._record_cache: RecordCache | None = None

    def add_post_processor(self, post_processor: InitializationPostProcessor) -> None:
        if not isinstance(post_processor, InitializationPostProcessor):
            raise InvalidPostProcessorError(post_processor)
        self.post_processors.append(post_processor)

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    def initialize(
        self, site: Site, indexing_configuration_name: str | Sequence[str] = ""
    ) -> dict[str, bool]:
        """Rebuild the queue of a site.

        This is the most complete way to force re-indexing, or to build the
        queue for the first time. Items of each initialized configuration are
        deleted and the configuration's initializer queues them again.

        Args:
            site: The site to initialize
            indexing_configuration_name: Initialize only this configuration, or
                these configurations, all enabled ones if empty

        Returns:
            Success flag per indexing configuration

        Raises:
            ConfigurationError: If the configuration or its initializer is unknown
        """
        site_configuration = site.configuration
        if isinstance(indexing_configuration_name, str):
            indexing_configuration_names = (
                [indexing_configuration_name] if indexing_configuration_name else []
            )
        else:
            indexing_configuration_names = list(indexing_configuration_name)
        if not indexing_configuration_names:
            indexing_configuration_names = (
                site_configuration.get_enabled_index_queue_configuration_names()
            )

        initialization_status: dict[str, bool] = {}
        for name in indexing_configuration_names:
            initialization_status[name] = self._initialize_indexing_configuration(site, name)

        logger.info(f"Initialized index queue of site {site.root_page_id}: {initialization_status}")

        for post_processor in self.post_processors:
            post_processor.post_process_index_queue_initialization(
                site, indexing_configuration_names, initialization_status
            )

        return initialization_status

    def _initialize_indexing_configuration(self, site: Site, indexing_configuration_name: str) -> bool:
        site_configuration = site.configuration
        indexing_configuration = site_configuration.get_index_queue_configuration_by_name(
            indexing_configuration_name
        )
        table_to_index = indexing_configuration.table_name
        initializer_class = self.initializer_registry.resolve(
            table_to_index, indexing_configuration.initializer
        )

        # clear queue
        self.delete_items_by_site(site, indexing_configuration_name)

        initializer = initializer_class(
            self.repository, self.record_source, self.change_time_calculator
        )
        return initializer.initialize(
            site, table_to_index, indexing_configuration_name, indexing_configuration
        )

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    @contextmanager
    def batch(self) -> Iterator["Queue"]:
        """Share one record cache across several update_item calls.

        Example:
            with queue.batch():
                for uid in changed_uids:
                    queue.update_item("pages", uid)
        """
        outer_cache = self._record_cache
        self._record_cache = RecordCache(self.record_source)
        try:
            yield self
        finally:
            self._record_cache = outer_cache

    def update_item(self, item_type: str, item_uid: int, forced_change_time: int = 0) -> None:
        """Mark an item as needing (re)indexing in every site containing it.

        Items already in a site's queue get a new changed time and lose their
        error; items not queued yet are added. The stored changed time never
        moves backwards, a forced change time included.

        Args:
            item_type: The item's type, usually a table name
            item_uid: The item's uid
            forced_change_time: Changed time to store for already queued
                items instead of the computed one, if greater than 0
        """
        cache = self._record_cache
        if cache is None:
            cache = RecordCache(self.record_source)

        root_page_ids = self.root_page_resolver.get_responsible_root_page_ids(item_type, item_uid)
        for root_page_id in sorted(root_page_ids):
            if root_page_id == Config.INVALID_ROOT_PAGE_ID:
                logger.debug(f"Skipping {item_type}:{item_uid}, it belongs to no site")
                continue

            site = self.site_repository.get_site_by_root_page_id(root_page_id)
            if site is None:
                logger.debug(f"Skipping {item_type}:{item_uid}, site {root_page_id} is not served")
                continue

            indexing_configuration = self.configuration_resolver.get_indexing_configuration_name(
                item_type, item_uid, site.configuration
            )
            if not indexing_configuration:
                logger.debug(
                    f"Skipping {item_type}:{item_uid}, site {root_page_id} does not index it"
                )
                continue

            if self.contains_item_with_root_page_id(item_type, item_uid, root_page_id):
                changed_time = forced_change_time
                if changed_time <= 0:
                    changed_time = self.change_time_calculator.get_item_changed_time(
                        item_type, item_uid
                    )
                _ = self.repository.update_existing_item(
                    item_type, item_uid, root_page_id, changed_time, indexing_configuration
                )
            else:
                self._add_new_item(item_type, item_uid, indexing_configuration, site, cache)

    def _add_new_item(
        self,
        item_type: str,
        item_uid: int,
        indexing_configuration_name: str,
        site: Site,
        cache: RecordCache,
    ) -> None:
        fields = ["pid"]
        if item_type == PAGES_TABLE:
            fields += ["doktype", "uid"]

        record = cache.get_record(item_type, item_uid, fields)
        if record is None:
            logger.debug(f"Not queueing {item_type}:{item_uid}, record does not exist")
            return

        if item_type == PAGES_TABLE:
            indexing_configuration = site.configuration.get_index_queue_configuration_by_name(
                indexing_configuration_name
            )
            if not indexing_configuration.is_allowed_page_type(record):
                logger.debug(
                    f"Not queueing page {item_uid}, doktype {record.get('doktype')} is not allowed"
                )
                return

        changed_time = self.change_time_calculator.get_item_changed_time(item_type, item_uid)

        added = self.repository.add(
            item_type, item_uid, site.root_page_id, changed_time, indexing_configuration_name
        )
        if not added:
            # lost the race against a concurrent insert of the same item
            _ = self.repository.update_existing_item(
                item_type, item_uid, site.root_page_id, changed_time, indexing_configuration_name
            )

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def contains_item(self, item_type: str, item_uid: int) -> bool:
        """Whether the item is queued for any site."""
        return self.repository.contains_item(item_type, int(item_uid))

    def contains_item_with_root_page_id(self, item_type: str, item_uid: int, root_page_id: int) -> bool:
        return self.repository.contains_item_with_root_page_id(
            item_type, int(item_uid), int(root_page_id)
        )

    def contains_indexed_item(self, item_type: str, item_uid: int) -> bool:
        """Whether the item is queued and has been indexed at least once."""
        return self.repository.contains_indexed_item(item_type, int(item_uid))

    def get_item(self, item_id: int) -> QueueItem | None:
        return self.repository.find_item_by_uid(item_id)

    def get_items(self, item_type: str, item_uid: int) -> list[QueueItem]:
        """Queue items of a record, one per site it is queued for."""
        return self.repository.find_items_by_item_type_and_item_uid(item_type, int(item_uid))

    def get_all_items(self) -> list[QueueItem]:
        return self.repository.find_all()

    def get_all_items_count(self) -> int:
        return self.repository.count_all()

    def get_last_index_time(self, root_page_id: int) -> int:
        """Timestamp of the last indexing run of a site, 0 if nothing has been indexed."""
        last_indexed = self.repository.find_last_indexed_row(root_page_id)
        return last_indexed.indexed if last_indexed else 0

    def get_last_indexed_item_id(self, root_page_id: int) -> int:
        """Queue id of the item indexed last in a site, 0 if nothing has been indexed."""
        last_indexed = self.repository.find_last_indexed_row(root_page_id)
        return last_indexed.uid if last_indexed else 0

    def get_statistics_by_site(self, site: Site, indexing_configuration_name: str = "") -> QueueStatistic:
        """Count pending, failed and successfully indexed items of a site."""
        return self.repository.count_by_state(site.root_page_id, indexing_configuration_name)

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    def get_errors_by_site(self, site: Site) -> list[QueueItem]:
        return self.repository.find_errors_by_site(site.root_page_id)

    def reset_all_errors(self) -> int:
        """Clear the errors of all items so they are indexed again.

        Returns:
            Number of items that had an error
        """
        return self.repository.flush_all_errors()

    # -------------------------------------------------------------------------
    # Deletes
    # -------------------------------------------------------------------------

    def delete_item(self, item_type: str, item_uid: int) -> None:
        """Remove a record's items from the queues of all sites."""
        _ = self.repository.delete_item(item_type, int(item_uid))

    def delete_items_by_type(self, item_type: str) -> None:
        _ = self.repository.delete_items_by_type(item_type)

    def delete_items_by_site(self, site: Site, indexing_configuration_name: str = "") -> None:
        """Remove all items of a site, optionally limited to one indexing configuration."""
        deleted = self.repository.delete_items_by_site(site.root_page_id, indexing_configuration_name)
        logger.debug(f"Deleted {deleted} items of site {site.root_page_id}")

    def delete_all_items(self) -> None:
        _ = self.repository.delete_all_items()

    # -------------------------------------------------------------------------
    # Indexing
    # -------------------------------------------------------------------------

    def get_items_to_index(self, site: Site, limit: int | None = None) -> list[QueueItem]:
        """Get up to limit due items of a site for the indexer.

        Failed items and items scheduled for the future are left out. No lock
        is taken: concurrent indexers of the same site may receive the same
        items.

        Args:
            site: Site to get items for
            limit: Maximum number of items, Config.INDEX_QUEUE_BATCH_SIZE if None
        """
        if limit is None:
            limit = Config.INDEX_QUEUE_BATCH_SIZE
        return self.repository.find_items_to_index(site.root_page_id, limit)

    def mark_item_as_failed(self, item: QueueItem | int, error_message: str) -> None:
        """Mark an item as failed so the indexer skips it until it is updated again.

        Args:
            item: The item or its queue id
            error_message: Why indexing failed, stored as is

        Raises:
            ValueError: If error_message is empty
        """
        if not error_message:
            raise ValueError("An error message is required to mark an item as failed")
        _ = self.repository.mark_item_as_failed(item, error_message)

    def update_index_time_by_item(self, item: QueueItem) -> None:
        """Record that an item has just been indexed."""
        _ = self.repository.update_index_time_by_item(item)
