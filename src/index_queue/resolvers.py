"""Collaborators the queue asks which sites and configurations an item belongs to."""

import logging
from collections.abc import Iterable
from typing import Protocol, override

from .config import Config
from .records import PAGES_TABLE, RecordSource
from .schemas import IndexingConfiguration, Site, SiteConfiguration

logger = logging.getLogger(__name__)


class RootPageResolver(Protocol):
    def get_responsible_root_page_ids(self, item_type: str, item_uid: int) -> set[int]:
        """Root page ids of all sites containing the item.

        May contain Config.INVALID_ROOT_PAGE_ID for items outside any site.
        """
        ...


class IndexingConfigurationResolver(Protocol):
    def get_indexing_configuration_name(
        self, item_type: str, item_uid: int, site_configuration: SiteConfiguration
    ) -> str | None:
        """Name of the configuration indexing the item, None if the site does not index it."""
        ...


class SiteRepository(Protocol):
    def get_site_by_root_page_id(self, root_page_id: int) -> Site | None:
        """The site rooted at the page, None if this queue does not serve it."""
        ...


class StaticSiteRepository(SiteRepository):
    """Sites known up front, looked up by root page id."""

    def __init__(self, sites: Iterable[Site] = ()):
        self.sites: dict[int, Site] = {site.root_page_id: site for site in sites}

    def add(self, site: Site) -> None:
        self.sites[site.root_page_id] = site

    @override
    def get_site_by_root_page_id(self, root_page_id: int) -> Site | None:
        return self.sites.get(root_page_id)


class RootlineRootPageResolver(RootPageResolver):
    """Finds the site root by walking up the page tree.

    Pages resolve through their own rootline, other records through the
    rootline of the page they are stored on. The first page flagged
    is_siteroot is the root page.
    """

    MAX_DEPTH: int = 99

    def __init__(self, record_source: RecordSource):
        self.record_source: RecordSource = record_source

    def get_root_page_id(self, page_uid: int) -> int:
        visited: set[int] = set()
        while page_uid and page_uid not in visited and len(visited) < self.MAX_DEPTH:
            visited.add(page_uid)
            page = self.record_source.get_record(PAGES_TABLE, page_uid, ["pid", "is_siteroot"])
            if page is None:
                break
            if page.get("is_siteroot"):
                return page_uid
            page_uid = int(page.get("pid") or 0)
        return Config.INVALID_ROOT_PAGE_ID

    @override
    def get_responsible_root_page_ids(self, item_type: str, item_uid: int) -> set[int]:
        if item_type == PAGES_TABLE:
            return {self.get_root_page_id(item_uid)}

        schema = self.record_source.get_schema(item_type)
        record = self.record_source.get_record(item_type, item_uid, [schema.page_field])
        if record is None:
            return {Config.INVALID_ROOT_PAGE_ID}
        return {self.get_root_page_id(int(record.get(schema.page_field) or 0))}


class ConfigurationAwareRecordService(IndexingConfigurationResolver):
    """Picks the first enabled configuration of the item's table whose conditions match."""

    def __init__(self, record_source: RecordSource):
        self.record_source: RecordSource = record_source

    def _matches(self, item_type: str, item_uid: int, configuration: IndexingConfiguration) -> bool:
        if not configuration.additional_where:
            return True
        fields = list(configuration.additional_where)
        record = self.record_source.get_record(item_type, item_uid, fields)
        if record is None:
            return False
        return all(record.get(field) == value for field, value in configuration.additional_where.items())

    @override
    def get_indexing_configuration_name(
        self, item_type: str, item_uid: int, site_configuration: SiteConfiguration
    ) -> str | None:
        for name in site_configuration.get_index_queue_configuration_names_by_table(item_type):
            configuration = site_configuration.get_index_queue_configuration_by_name(name)
            if self._matches(item_type, item_uid, configuration):
                return name
        logger.debug(f"No indexing configuration for {item_type}:{item_uid}")
        return None
