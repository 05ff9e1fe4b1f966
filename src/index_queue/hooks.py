"""Extension points called after the index queue has been initialized."""

import json
import logging
from abc import ABC, abstractmethod
from typing import override

from .config import Config
from .mqtt import MQTTBroadcaster, NoOpBroadcaster, get_broadcaster
from .schemas import Site

logger = logging.getLogger(__name__)


class InitializationPostProcessor(ABC):
    """Observer notified once a site's queue initialization has finished.

    Post processors run in registration order. They cannot undo the
    initialization, and an exception raised by one propagates to the caller
    of Queue.initialize.
    """

    @abstractmethod
    def post_process_index_queue_initialization(
        self,
        site: Site,
        indexing_configuration_names: list[str],
        initialization_status: dict[str, bool],
    ) -> None:
        """
        Args:
            site: The initialized site
            indexing_configuration_names: Configurations that were initialized
            initialization_status: Success flag per configuration
        """
        pass


class InitializationBroadcaster(InitializationPostProcessor):
    """Publishes an "initialized" event per site initialization over MQTT.

    With MQTT_RETAIN_STATUS the status is also kept as a retained message on
    {MQTT_TOPIC}/sites/{root_page_id}, so late subscribers see the last run.
    """

    def __init__(self, broadcaster: MQTTBroadcaster | NoOpBroadcaster | None = None):
        self.broadcaster: MQTTBroadcaster | NoOpBroadcaster = broadcaster or get_broadcaster(
            broadcast_type=Config.BROADCAST_TYPE,
            broker=Config.MQTT_BROKER,
            port=Config.MQTT_PORT,
            topic=Config.MQTT_TOPIC,
        )

    @override
    def post_process_index_queue_initialization(
        self,
        site: Site,
        indexing_configuration_names: list[str],
        initialization_status: dict[str, bool],
    ) -> None:
        data = {
            "configurations": indexing_configuration_names,
            "status": initialization_status,
        }
        if not self.broadcaster.publish_event("initialized", site.root_page_id, data):
            logger.warning(f"Could not publish initialization of site {site.root_page_id}")

        if Config.MQTT_RETAIN_STATUS:
            _ = self.broadcaster.publish_retained(
                f"{Config.MQTT_TOPIC}/sites/{site.root_page_id}", json.dumps(data)
            )
