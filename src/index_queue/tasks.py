"""Scheduler tasks working on the index queue."""

import logging

from .queue import Queue
from .schemas import Site

logger = logging.getLogger(__name__)


class ReIndexTask:
    """Re-initializes a site's index queue so the indexer re-indexes the site.

    Example:
        task = ReIndexTask(queue, site, ["pages", "news"])
        if not task.execute():
            ...
    """

    def __init__(
        self,
        queue: Queue,
        site: Site | None,
        indexing_configurations_to_reindex: list[str] | None = None,
    ):
        """
        Args:
            queue: Queue to initialize
            site: Site to re-index
            indexing_configurations_to_reindex: Configurations to re-index,
                all enabled ones if empty
        """
        self.queue: Queue = queue
        self.site: Site | None = site
        self.indexing_configurations_to_reindex: list[str] = list(
            indexing_configurations_to_reindex or []
        )

    def execute(self) -> bool:
        """Initialize the queue for the configured configurations.

        Returns:
            True if every configuration was initialized successfully
        """
        if self.site is None:
            logger.error("Re-index task has no site")
            return False

        results = self.queue.initialize(self.site, self.indexing_configurations_to_reindex)

        return False not in results.values()

    def get_additional_information(self) -> str:
        """Describe the task for scheduler listings."""
        if self.site is None:
            return "Invalid site configuration for scheduler please re-create the task!"

        information = f"Site: {self.site.label}"
        if self.indexing_configurations_to_reindex:
            information += ", Indexing Configurations: " + ", ".join(
                self.indexing_configurations_to_reindex
            )
        return information
