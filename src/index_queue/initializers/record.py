"""Default initializer for record tables."""

import logging
from typing import override

from ..records import Record
from ..schemas import IndexingConfiguration, Site
from .base import AbstractInitializer

logger = logging.getLogger(__name__)


class RecordInitializer(AbstractInitializer):
    """Queues every record of a table stored on the site's pages.

    Records must match the configuration's additional_where conditions.
    """

    def find_records(
        self,
        site: Site,
        item_type: str,
        indexing_configuration: IndexingConfiguration,
    ) -> list[Record]:
        return self.record_source.find_records(
            item_type,
            self.get_page_ids(site, indexing_configuration),
            ["pid"],
            indexing_configuration.additional_where,
        )

    @override
    def initialize(
        self,
        site: Site,
        item_type: str,
        indexing_configuration_name: str,
        indexing_configuration: IndexingConfiguration,
    ) -> bool:
        if not self.record_source.has_table(item_type):
            logger.error(
                f"Cannot initialize {indexing_configuration_name} for site "
                f"{site.root_page_id}: table {item_type} does not exist"
            )
            return False

        records = self.find_records(site, item_type, indexing_configuration)
        _ = self.add_records(
            site, item_type, indexing_configuration_name, indexing_configuration, records
        )
        return True
