"""Durable queue of content items waiting to be (re-)indexed by a search engine."""

# Public API - Pydantic models
from .schemas import (
    IndexingConfiguration,
    QueueItem,
    QueueItemState,
    QueueStatistic,
    Site,
    SiteConfiguration,
)

# Public API - Queue and collaborators
from .cache import RecordCache
from .change_time import ChangeTimeCalculator
from .config import Config
from .database import create_db_engine, create_session_factory, init_db
from .exceptions import (
    ConfigurationError,
    IndexQueueError,
    InvalidPostProcessorError,
    UnknownInitializerError,
)
from .hooks import InitializationBroadcaster, InitializationPostProcessor
from .initializers import AbstractInitializer, InitializerRegistry, PageInitializer, RecordInitializer
from .queue import Queue
from .records import ContentTypeSchema, RecordSource, SQLAlchemyRecordSource
from .repository import QueueItemRepository
from .resolvers import (
    ConfigurationAwareRecordService,
    IndexingConfigurationResolver,
    RootlineRootPageResolver,
    RootPageResolver,
    SiteRepository,
    StaticSiteRepository,
)
from .tasks import ReIndexTask

__all__ = [
    # Configuration
    "Config",
    # Queue
    "Queue",
    "QueueItemRepository",
    "ChangeTimeCalculator",
    "RecordCache",
    "ReIndexTask",
    # Database
    "create_db_engine",
    "create_session_factory",
    "init_db",
    # Records and resolvers
    "ContentTypeSchema",
    "RecordSource",
    "SQLAlchemyRecordSource",
    "RootPageResolver",
    "RootlineRootPageResolver",
    "IndexingConfigurationResolver",
    "ConfigurationAwareRecordService",
    "SiteRepository",
    "StaticSiteRepository",
    # Initializers and hooks
    "AbstractInitializer",
    "RecordInitializer",
    "PageInitializer",
    "InitializerRegistry",
    "InitializationPostProcessor",
    "InitializationBroadcaster",
    # Errors
    "IndexQueueError",
    "ConfigurationError",
    "UnknownInitializerError",
    "InvalidPostProcessorError",
    # Pydantic Models
    "IndexingConfiguration",
    "QueueItem",
    "QueueItemState",
    "QueueStatistic",
    "Site",
    "SiteConfiguration",
]
