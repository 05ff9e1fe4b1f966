"""Lookup of initializers by name and content type."""

from collections.abc import Iterable

from ..exceptions import UnknownInitializerError
from ..records import PAGES_TABLE
from .base import AbstractInitializer
from .page import PageInitializer
from .record import RecordInitializer

DEFAULT_INITIALIZER = "record"


class InitializerRegistry:
    """Maps initializer names and content types to initializer classes.

    Content types without a registered initializer use the "record"
    initializer. A configuration may name its initializer explicitly.

    Example:
        registry = InitializerRegistry()
        registry.register("news", NewsInitializer, content_types=["tx_news_domain_model_news"])

        initializer_class = registry.resolve("tx_news_domain_model_news")
    """

    def __init__(self):
        self._by_name: dict[str, type[AbstractInitializer]] = {}
        self._by_content_type: dict[str, str] = {}

        self.register(DEFAULT_INITIALIZER, RecordInitializer)
        self.register("page", PageInitializer, content_types=[PAGES_TABLE])

    def register(
        self,
        name: str,
        initializer_class: type[AbstractInitializer],
        content_types: Iterable[str] = (),
    ) -> None:
        """Register an initializer, replacing one of the same name.

        Raises:
            TypeError: If initializer_class is not an AbstractInitializer
        """
        if not (isinstance(initializer_class, type) and issubclass(initializer_class, AbstractInitializer)):
            raise TypeError(f"{initializer_class!r} must extend AbstractInitializer")

        self._by_name[name] = initializer_class
        for content_type in content_types:
            self._by_content_type[content_type] = name

    @property
    def names(self) -> list[str]:
        return sorted(self._by_name)

    def resolve(self, content_type: str, name: str | None = None) -> type[AbstractInitializer]:
        """Return the initializer class for a content type.

        Raises:
            UnknownInitializerError: If an explicitly named initializer is not registered
        """
        if name:
            if name not in self._by_name:
                raise UnknownInitializerError(name, self.names)
            return self._by_name[name]
        return self._by_name[self._by_content_type.get(content_type, DEFAULT_INITIALIZER)]
