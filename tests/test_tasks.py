"""Tests for ReIndexTask."""

from unittest.mock import MagicMock

from index_queue import (
    IndexingConfiguration,
    InitializationPostProcessor,
    Queue,
    ReIndexTask,
    Site,
    SiteConfiguration,
)

from conftest import Content


def test_reindex_all_configurations(queue: Queue, site: Site, site_tree: Content) -> None:
    """Test an empty configuration list re-initializes every enabled configuration."""
    _ = site_tree.add_article(1, 4)
    task = ReIndexTask(queue, site)

    assert task.execute() is True

    assert sorted({item.indexing_configuration for item in queue.get_all_items()}) == [
        "articles",
        "pages",
    ]


def test_reindex_selected_configurations(queue: Queue, site: Site, site_tree: Content) -> None:
    _ = site_tree.add_article(1, 4)
    task = ReIndexTask(queue, site, ["articles"])

    assert task.execute() is True

    assert [item.item_type for item in queue.get_all_items()] == ["article"]


def test_reindex_resets_indexed_items(queue: Queue, site: Site, site_tree: Content) -> None:
    """Test re-indexing turns already indexed items pending again."""
    _ = queue.initialize(site, "pages")
    for item in queue.get_all_items():
        _ = queue.update_index_time_by_item(item)
    assert queue.get_statistics_by_site(site).pending_count == 0

    assert ReIndexTask(queue, site, ["pages"]).execute() is True

    assert queue.get_statistics_by_site(site).pending_count == 2


def test_reindex_reports_failed_configuration(queue: Queue, site_tree: Content) -> None:
    site = Site(
        root_page_id=1,
        configuration=SiteConfiguration(
            indexing_configurations=[
                IndexingConfiguration(name="pages"),
                IndexingConfiguration(name="products"),
            ]
        ),
    )

    assert ReIndexTask(queue, site).execute() is False
    assert queue.get_all_items_count() == 2


def test_reindex_without_site() -> None:
    queue = MagicMock(spec=Queue)
    task = ReIndexTask(queue, None, ["pages"])

    assert task.execute() is False
    queue.initialize.assert_not_called()


def test_additional_information(queue: Queue, site: Site) -> None:
    assert ReIndexTask(queue, site).get_additional_information() == "Site: Main"
    assert (
        ReIndexTask(queue, site, ["pages", "articles"]).get_additional_information()
        == "Site: Main, Indexing Configurations: pages, articles"
    )
    assert (
        ReIndexTask(queue, None).get_additional_information()
        == "Invalid site configuration for scheduler please re-create the task!"
    )


def test_reindex_notifies_post_processors_once(
    queue: Queue, site: Site, site_tree: Content
) -> None:
    """Test the selected configurations are initialized in one pass."""
    post_processor = MagicMock(spec=InitializationPostProcessor)
    queue.add_post_processor(post_processor)

    assert ReIndexTask(queue, site, ["pages", "articles"]).execute() is True

    post_processor.post_process_index_queue_initialization.assert_called_once_with(
        site, ["pages", "articles"], {"pages": True, "articles": True}
    )
