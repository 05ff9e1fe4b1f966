"""Read access to the content records the queue tracks.

Content lives in ordinary tables addressed by name (pages, tt_content, news
records, ...). Every table exposes a uid, a page reference (pid) and a change
timestamp; some also carry a start time, a translation parent or a deleted
flag. ContentTypeSchema names those fields per table.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, override

from sqlalchemy import MetaData, Table, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError

from .exceptions import ConfigurationError

PAGES_TABLE = "pages"
CONTENT_TABLE = "tt_content"

Record = dict[str, Any]


@dataclass(frozen=True)
class ContentTypeSchema:
    """Names of the bookkeeping fields of a content table."""

    table: str
    changed_field: str = "tstamp"
    start_time_field: str | None = None
    translation_parent_field: str | None = None
    deleted_field: str | None = None
    page_field: str = "pid"


DEFAULT_SCHEMAS: dict[str, ContentTypeSchema] = {
    PAGES_TABLE: ContentTypeSchema(
        PAGES_TABLE,
        start_time_field="starttime",
        translation_parent_field="l10n_parent",
        deleted_field="deleted",
    ),
    CONTENT_TABLE: ContentTypeSchema(
        CONTENT_TABLE,
        start_time_field="starttime",
        translation_parent_field="l18n_parent",
        deleted_field="deleted",
    ),
}


class RecordSource(Protocol):
    """Where the queue reads content records from."""

    def get_schema(self, table: str) -> ContentTypeSchema: ...

    def has_table(self, table: str) -> bool: ...

    def get_record(self, table: str, uid: int, fields: Sequence[str]) -> Record | None: ...

    def get_page_content_changed_time(self, page_uid: int) -> int: ...

    def get_localizations_changed_time(self, table: str, uid: int) -> int: ...

    def get_tree_page_ids(self, root_page_id: int) -> list[int]: ...

    def find_records(
        self,
        table: str,
        page_ids: Iterable[int],
        fields: Sequence[str],
        conditions: dict[str, Any] | None = None,
    ) -> list[Record]: ...


class SQLAlchemyRecordSource(RecordSource):
    """Record source reading content tables through SQLAlchemy Core.

    Tables are reflected on first use, so any table created by the content
    application can be queued without declaring a model for it.
    """

    def __init__(
        self,
        engine: Engine,
        schemas: Iterable[ContentTypeSchema] = (),
    ):
        self.engine: Engine = engine
        self.metadata: MetaData = MetaData()
        self.schemas: dict[str, ContentTypeSchema] = dict(DEFAULT_SCHEMAS)
        for schema in schemas:
            self.schemas[schema.table] = schema

    def _table(self, name: str) -> Table:
        if name in self.metadata.tables:
            return self.metadata.tables[name]
        return Table(name, self.metadata, autoload_with=self.engine)

    def _columns(self, table: Table, fields: Sequence[str]) -> list:
        wanted = [field for field in dict.fromkeys(fields) if field != "uid" and field in table.c]
        return [table.c.uid] + [table.c[field] for field in wanted]

    def _not_deleted(self, table: Table, schema: ContentTypeSchema) -> list:
        if schema.deleted_field and schema.deleted_field in table.c:
            return [table.c[schema.deleted_field] == 0]
        return []

    def _originals(self, table: Table, schema: ContentTypeSchema) -> list:
        field = schema.translation_parent_field
        if field and field in table.c:
            return [table.c[field] == 0]
        return []

    @override
    def get_schema(self, table: str) -> ContentTypeSchema:
        return self.schemas.get(table) or ContentTypeSchema(table)

    @override
    def has_table(self, table: str) -> bool:
        try:
            _ = self._table(table)
        except NoSuchTableError:
            return False
        return True

    @override
    def get_record(self, table: str, uid: int, fields: Sequence[str]) -> Record | None:
        """Fetch selected fields of a record, None if it does not exist or is deleted.

        Unknown field names are ignored. The uid is always part of the result.
        """
        schema = self.get_schema(table)
        sa_table = self._table(table)
        columns = self._columns(sa_table, fields)
        stmt = select(*columns).where(sa_table.c.uid == uid, *self._not_deleted(sa_table, schema))
        with self.engine.connect() as connection:
            row = connection.execute(stmt).mappings().first()
        return dict(row) if row else None

    @override
    def get_page_content_changed_time(self, page_uid: int) -> int:
        """Most recent change of any content element on a page, 0 if it has none."""
        schema = self.get_schema(CONTENT_TABLE)
        if not self.has_table(CONTENT_TABLE):
            return 0
        content = self._table(CONTENT_TABLE)
        stmt = select(func.max(content.c[schema.changed_field])).where(
            content.c[schema.page_field] == page_uid,
            *self._not_deleted(content, schema),
        )
        with self.engine.connect() as connection:
            return int(connection.execute(stmt).scalar() or 0)

    @override
    def get_localizations_changed_time(self, table: str, uid: int) -> int:
        """Most recent change of any translation of a record, 0 if it has none."""
        schema = self.get_schema(table)
        if not schema.translation_parent_field:
            return 0
        sa_table = self._table(table)
        if schema.translation_parent_field not in sa_table.c:
            return 0
        stmt = select(func.max(sa_table.c[schema.changed_field])).where(
            sa_table.c[schema.translation_parent_field] == uid,
            *self._not_deleted(sa_table, schema),
        )
        with self.engine.connect() as connection:
            return int(connection.execute(stmt).scalar() or 0)

    @override
    def get_tree_page_ids(self, root_page_id: int) -> list[int]:
        """Root page plus all pages below it, breadth first."""
        schema = self.get_schema(PAGES_TABLE)
        pages = self._table(PAGES_TABLE)
        page_ids = [root_page_id]
        level = [root_page_id]
        with self.engine.connect() as connection:
            while level:
                stmt = (
                    select(pages.c.uid)
                    .where(
                        pages.c[schema.page_field].in_(level),
                        *self._not_deleted(pages, schema),
                        *self._originals(pages, schema),
                    )
                    .order_by(pages.c.uid)
                )
                level = [uid for uid in connection.execute(stmt).scalars() if uid not in page_ids]
                page_ids.extend(level)
        return page_ids

    @override
    def find_records(
        self,
        table: str,
        page_ids: Iterable[int],
        fields: Sequence[str],
        conditions: dict[str, Any] | None = None,
    ) -> list[Record]:
        """Find the records stored on the given pages.

        Pages are matched by their own uid, every other table by its pid.
        Translations are left out: they are indexed through their parent.
        """
        schema = self.get_schema(table)
        sa_table = self._table(table)
        page_ids = list(page_ids)

        columns = self._columns(sa_table, fields)
        location = sa_table.c.uid if table == PAGES_TABLE else sa_table.c[schema.page_field]
        criteria = [
            location.in_(page_ids),
            *self._not_deleted(sa_table, schema),
            *self._originals(sa_table, schema),
        ]
        for field, value in (conditions or {}).items():
            if field not in sa_table.c:
                raise ConfigurationError(f"Unknown field {table}.{field} in indexing conditions")
            criteria.append(sa_table.c[field] == value)

        stmt = select(*columns).where(*criteria).order_by(sa_table.c.uid)
        with self.engine.connect() as connection:
            return [dict(row) for row in connection.execute(stmt).mappings()]
