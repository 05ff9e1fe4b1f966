"""Exceptions raised by the index queue."""


class IndexQueueError(Exception):
    """Base class for all index queue errors."""


class ConfigurationError(IndexQueueError, ValueError):
    """An indexing configuration or queue wiring is invalid.

    Raised immediately and never retried: the queue cannot work around a
    misconfigured site or a misbehaving extension.
    """


class UnknownInitializerError(ConfigurationError):
    """No initializer is registered under the requested name."""

    def __init__(self, name: str, known: list[str]):
        super().__init__(
            f"Unknown index queue initializer '{name}', registered initializers: "
            + ", ".join(sorted(known))
        )
        self.name: str = name


class InvalidPostProcessorError(ConfigurationError, TypeError):
    """A post-initialization hook does not implement InitializationPostProcessor."""

    def __init__(self, processor: object):
        super().__init__(
            f"{type(processor).__name__} must implement interface InitializationPostProcessor"
        )
        self.processor: object = processor
