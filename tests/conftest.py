"""Shared test fixtures for index_queue tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine, insert
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from index_queue import (
    ContentTypeSchema,
    IndexingConfiguration,
    Queue,
    QueueItemRepository,
    Site,
    SiteConfiguration,
    SQLAlchemyRecordSource,
    StaticSiteRepository,
)
from index_queue.models import Base

if TYPE_CHECKING:
    from collections.abc import Generator

    from sqlalchemy.engine import Engine


NOW = 1_700_000_000

ARTICLE_SCHEMA = ContentTypeSchema(
    "article",
    start_time_field="starttime",
    translation_parent_field="l10n_parent",
    deleted_field="deleted",
)

content_metadata = MetaData()

pages_table = Table(
    "pages",
    content_metadata,
    Column("uid", Integer, primary_key=True),
    Column("pid", Integer, nullable=False, default=0),
    Column("tstamp", Integer, nullable=False, default=0),
    Column("starttime", Integer, nullable=False, default=0),
    Column("deleted", Integer, nullable=False, default=0),
    Column("doktype", Integer, nullable=False, default=1),
    Column("is_siteroot", Integer, nullable=False, default=0),
    Column("content_from_pid", Integer, nullable=False, default=0),
    Column("l10n_parent", Integer, nullable=False, default=0),
    Column("title", String(255), nullable=False, default=""),
)

content_table = Table(
    "tt_content",
    content_metadata,
    Column("uid", Integer, primary_key=True),
    Column("pid", Integer, nullable=False, default=0),
    Column("tstamp", Integer, nullable=False, default=0),
    Column("starttime", Integer, nullable=False, default=0),
    Column("deleted", Integer, nullable=False, default=0),
    Column("l18n_parent", Integer, nullable=False, default=0),
)

article_table = Table(
    "article",
    content_metadata,
    Column("uid", Integer, primary_key=True),
    Column("pid", Integer, nullable=False, default=0),
    Column("tstamp", Integer, nullable=False, default=0),
    Column("starttime", Integer, nullable=False, default=0),
    Column("deleted", Integer, nullable=False, default=0),
    Column("l10n_parent", Integer, nullable=False, default=0),
    Column("category", String(64), nullable=False, default="news"),
)


class FakeClock:
    """Settable replacement for the repository clock."""

    def __init__(self, now: int = NOW):
        self.now: int = now

    def __call__(self) -> int:
        return self.now


class Content:
    """Writes content rows the queue reads through its record source."""

    def __init__(self, engine: Engine):
        self.engine: Engine = engine

    def _insert(self, table: Table, **values: Any) -> int:
        with self.engine.begin() as connection:
            _ = connection.execute(insert(table).values(**values))
        return int(values["uid"])

    def _update(self, table: Table, uid: int, **values: Any) -> None:
        with self.engine.begin() as connection:
            _ = connection.execute(table.update().where(table.c.uid == uid).values(**values))

    def add_page(self, uid: int, pid: int = 0, **values: Any) -> int:
        return self._insert(pages_table, uid=uid, pid=pid, **values)

    def add_content(self, uid: int, pid: int, **values: Any) -> int:
        return self._insert(content_table, uid=uid, pid=pid, **values)

    def add_article(self, uid: int, pid: int, **values: Any) -> int:
        return self._insert(article_table, uid=uid, pid=pid, **values)

    def update_page(self, uid: int, **values: Any) -> None:
        self._update(pages_table, uid, **values)

    def update_article(self, uid: int, **values: Any) -> None:
        self._update(article_table, uid, **values)


@pytest.fixture
def test_engine() -> Generator[Engine, None, None]:
    """Create one in-memory SQLite database holding queue and content tables."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    content_metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(test_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository(session_factory: sessionmaker[Session], clock: FakeClock) -> QueueItemRepository:
    return QueueItemRepository(session_factory, clock=clock)


@pytest.fixture
def record_source(test_engine: Engine) -> SQLAlchemyRecordSource:
    return SQLAlchemyRecordSource(test_engine, [ARTICLE_SCHEMA])


@pytest.fixture
def content(test_engine: Engine) -> Content:
    return Content(test_engine)


@pytest.fixture
def site() -> Site:
    """Site rooted at page 1 indexing pages and news articles."""
    return Site(
        root_page_id=1,
        label="Main",
        configuration=SiteConfiguration(
            indexing_configurations=[
                IndexingConfiguration(name="pages"),
                IndexingConfiguration(
                    name="articles",
                    table="article",
                    additional_where={"category": "news"},
                ),
            ]
        ),
    )


@pytest.fixture
def site_repository(site: Site) -> StaticSiteRepository:
    return StaticSiteRepository([site])


@pytest.fixture
def site_tree(content: Content) -> Content:
    """Site root 1 with subpages 2 and 3, a folder 4 and an orphan page 50.

    - page 2 has content elements 10 (NOW - 50) and 11 (NOW - 20)
    - page 3 shows the content of page 2
    - folder 4 (doktype 254) stores article records
    """
    _ = content.add_page(1, 0, is_siteroot=1, tstamp=NOW - 1000, title="Home")
    _ = content.add_page(2, 1, tstamp=NOW - 500, title="About")
    _ = content.add_page(3, 1, tstamp=NOW - 400, content_from_pid=2, title="About (mirror)")
    _ = content.add_page(4, 1, tstamp=NOW - 900, doktype=254, title="Storage")
    _ = content.add_page(50, 0, tstamp=NOW - 300, title="Orphan")
    _ = content.add_content(10, 2, tstamp=NOW - 50)
    _ = content.add_content(11, 2, tstamp=NOW - 20)
    return content


@pytest.fixture
def queue(
    repository: QueueItemRepository,
    record_source: SQLAlchemyRecordSource,
    site_repository: StaticSiteRepository,
) -> Queue:
    return Queue(repository, record_source, site_repository)
