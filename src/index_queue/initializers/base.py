"""Shared initializer infrastructure."""

import logging
from abc import ABC, abstractmethod

from ..change_time import ChangeTimeCalculator
from ..records import Record, RecordSource
from ..repository import QueueItemRepository
from ..schemas import IndexingConfiguration, Site

logger = logging.getLogger(__name__)


class AbstractInitializer(ABC):
    """Base class for all index queue initializers.

    An initializer fills the queue of one site with every record of one
    indexing configuration. The queue clears the site's items of that
    configuration before calling it.
    """

    def __init__(
        self,
        repository: QueueItemRepository,
        record_source: RecordSource,
        change_time_calculator: ChangeTimeCalculator,
    ):
        self.repository: QueueItemRepository = repository
        self.record_source: RecordSource = record_source
        self.change_time_calculator: ChangeTimeCalculator = change_time_calculator

    @abstractmethod
    def initialize(
        self,
        site: Site,
        item_type: str,
        indexing_configuration_name: str,
        indexing_configuration: IndexingConfiguration,
    ) -> bool:
        """
        Add all records of a configuration to the queue of a site.

        Args:
            site: Site to initialize the queue for
            item_type: Table holding the records
            indexing_configuration_name: Name stored on the created items
            indexing_configuration: Rules selecting the records

        Returns:
            True if the initialization was successful, False otherwise
        """
        pass

    def get_page_ids(self, site: Site, indexing_configuration: IndexingConfiguration) -> list[int]:
        """Pages whose records belong to the site: its tree plus configured extras."""
        page_ids = self.record_source.get_tree_page_ids(site.root_page_id)
        for page_id in indexing_configuration.additional_page_ids:
            if page_id not in page_ids:
                page_ids.append(page_id)
        return page_ids

    def add_records(
        self,
        site: Site,
        item_type: str,
        indexing_configuration_name: str,
        indexing_configuration: IndexingConfiguration,
        records: list[Record],
    ) -> int:
        """Queue the given records as never indexed items of the site.

        Returns:
            Number of queued records
        """
        item_uids = [int(record["uid"]) for record in records]
        changed_times = [
            self.change_time_calculator.get_item_changed_time(item_type, item_uid)
            for item_uid in item_uids
        ]
        added = self.repository.add_many(
            item_type,
            item_uids,
            site.root_page_id,
            changed_times,
            indexing_configuration_name,
            parameters=indexing_configuration.initialization_parameters,
        )
        logger.info(
            f"Queued {added} {item_type} records for site {site.root_page_id} "
            f"({indexing_configuration_name})"
        )
        return added
