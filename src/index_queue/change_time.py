"""Computation of the changed timestamp stored on queue items."""

from .records import PAGES_TABLE, RecordSource


class ChangeTimeCalculator:
    """Determines when an item should be considered changed.

    The changed time is the latest of:

    1. the record's own change timestamp
    2. its start time, so records published in the future are indexed once
       they go live
    3. for pages, the latest change of the page's content elements, or of the
       source page's content elements when the page shows content of another
       page (content_from_pid)
    4. the latest change of any translation of the record

    Any of these makes the indexed document stale, so the latest one wins.
    """

    def __init__(self, record_source: RecordSource):
        self.record_source: RecordSource = record_source

    def get_item_changed_time(self, item_type: str, item_uid: int) -> int:
        """Return the changed time of an item, 0 if nothing is known about it."""
        schema = self.record_source.get_schema(item_type)

        fields = [schema.changed_field]
        if schema.start_time_field:
            fields.append(schema.start_time_field)
        if item_type == PAGES_TABLE:
            # no time information itself, needed to follow canonical pages
            fields.append("content_from_pid")

        record = self.record_source.get_record(item_type, item_uid, fields) or {}

        item_changed_time = int(record.get(schema.changed_field) or 0)

        start_time = 0
        if schema.start_time_field:
            start_time = int(record.get(schema.start_time_field) or 0)

        page_changed_time = 0
        if item_type == PAGES_TABLE and record:
            page_changed_time = self.get_page_item_changed_time(
                item_uid, int(record.get("content_from_pid") or 0)
            )

        localizations_changed_time = self.record_source.get_localizations_changed_time(
            item_type, item_uid
        )

        return max(item_changed_time, start_time, page_changed_time, localizations_changed_time)

    def get_page_item_changed_time(self, page_uid: int, content_from_pid: int = 0) -> int:
        """Latest content element change of a page or of the page it mirrors."""
        if content_from_pid:
            return self.record_source.get_page_content_changed_time(content_from_pid)
        return self.record_source.get_page_content_changed_time(page_uid)
