"""
Pydantic schemas for queue items, statistics and site configuration.
Shared between the queue engine, initializers and indexers.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator, model_validator

from .config import Config
from .exceptions import ConfigurationError


class QueueItemState(str, Enum):
    pending = "pending"
    failed = "failed"
    success = "success"


class QueueItem(BaseModel):
    """An index queue entry as handed to callers and indexers."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    uid: int = Field(..., description="Store-assigned queue entry id")
    item_type: str = Field(..., description="Record type, usually a table name")
    item_uid: int = Field(..., description="Record uid within its type")
    root: int = Field(..., description="Root page id of the site the item is queued for")
    indexing_configuration: str = Field("", description="Indexing configuration name")
    changed: int = Field(0, ge=0, description="Timestamp of the last change")
    indexed: int = Field(0, ge=0, description="Timestamp of the last indexing, 0 = never")
    errors: str = Field("", description="Error message of the last failed indexing")
    parameters: JsonValue = Field(None, description="Payload attached at initialization")

    @property
    def has_errors(self) -> bool:
        return self.errors != ""

    @property
    def state(self) -> QueueItemState:
        """Failed wins over pending, so a failed item is never reported as pending."""
        if self.has_errors:
            return QueueItemState.failed
        if self.indexed < self.changed:
            return QueueItemState.pending
        return QueueItemState.success


class QueueStatistic(BaseModel):
    """Pending, failed and successful item counts of a site."""

    pending_count: int = Field(default=0, ge=0)
    failed_count: int = Field(default=0, ge=0)
    success_count: int = Field(default=0, ge=0)

    @property
    def total_count(self) -> int:
        return self.pending_count + self.failed_count + self.success_count

    def _percentage(self, count: int) -> float:
        if self.total_count == 0:
            return 0.0
        return round(count / self.total_count * 100, 2)

    @property
    def pending_percentage(self) -> float:
        return self._percentage(self.pending_count)

    @property
    def failed_percentage(self) -> float:
        return self._percentage(self.failed_count)

    @property
    def success_percentage(self) -> float:
        return self._percentage(self.success_count)


class IndexingConfiguration(BaseModel):
    """A named ruleset describing which records of a table a site indexes."""

    name: str = Field(..., min_length=1, description="Indexing configuration name")
    table: str | None = Field(None, description="Table to index, defaults to the name")
    enabled: bool = Field(True)
    initializer: str | None = Field(
        None, description="Explicit initializer name, otherwise chosen by table"
    )
    additional_where: dict[str, int | str] = Field(
        default_factory=dict, description="Field values a record must have to be indexed"
    )
    additional_page_ids: list[int] = Field(
        default_factory=list, description="Pages outside the site tree holding records"
    )
    allowed_page_types: list[int] = Field(
        default_factory=lambda: list(Config.ALLOWED_PAGE_TYPES),
        description="Page doktypes that may be queued",
    )
    initialization_parameters: JsonValue = Field(
        None, description="Payload stored on every item created by initialization"
    )

    @property
    def table_name(self) -> str:
        return self.table or self.name

    def is_allowed_page_type(self, page: dict[str, object]) -> bool:
        return page.get("doktype") in self.allowed_page_types


class SiteConfiguration(BaseModel):
    """Search configuration of one site."""

    indexing_configurations: list[IndexingConfiguration] = Field(default_factory=list)

    @field_validator("indexing_configurations")
    @classmethod
    def validate_unique_names(
        cls, v: list[IndexingConfiguration]
    ) -> list[IndexingConfiguration]:
        names = [configuration.name for configuration in v]
        if len(names) != len(set(names)):
            raise ValueError("Indexing configuration names must be unique")
        return v

    def get_enabled_index_queue_configuration_names(self) -> list[str]:
        return [c.name for c in self.indexing_configurations if c.enabled]

    def get_index_queue_configuration_by_name(self, name: str) -> IndexingConfiguration:
        for configuration in self.indexing_configurations:
            if configuration.name == name:
                return configuration
        raise ConfigurationError(f"Unknown indexing configuration '{name}'")

    def get_index_queue_table_name_or_fallback_to_configuration_name(self, name: str) -> str:
        return self.get_index_queue_configuration_by_name(name).table_name

    def get_index_queue_configuration_names_by_table(self, table: str) -> list[str]:
        return [
            c.name
            for c in self.indexing_configurations
            if c.enabled and c.table_name == table
        ]


class Site(BaseModel):
    """A site (tenant): an isolated page tree with its own search configuration."""

    root_page_id: int = Field(..., gt=0)
    label: str = Field("")
    configuration: SiteConfiguration = Field(default_factory=SiteConfiguration)

    @model_validator(mode="after")
    def default_label(self) -> "Site":
        if not self.label:
            self.label = f"Site {self.root_page_id}"
        return self
