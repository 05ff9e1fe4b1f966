"""Initializer for the page tree."""

from typing import override

from ..records import Record
from ..schemas import IndexingConfiguration, Site
from .record import RecordInitializer


class PageInitializer(RecordInitializer):
    """Queues the pages of a site.

    Only pages of an allowed doktype are queued. A page showing the content
    of another page (content_from_pid) is skipped when its source page is
    queued as well, as both would produce the same document.
    """

    @override
    def find_records(
        self,
        site: Site,
        item_type: str,
        indexing_configuration: IndexingConfiguration,
    ) -> list[Record]:
        pages = self.record_source.find_records(
            item_type,
            self.get_page_ids(site, indexing_configuration),
            ["pid", "doktype", "content_from_pid"],
            indexing_configuration.additional_where,
        )
        pages = [page for page in pages if indexing_configuration.is_allowed_page_type(page)]

        queued = {int(page["uid"]) for page in pages}
        return [
            page
            for page in pages
            if int(page.get("content_from_pid") or 0) in (0, int(page["uid"]))
            or int(page["content_from_pid"]) not in queued
        ]
