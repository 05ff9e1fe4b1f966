"""Index queue initializers."""

from .base import AbstractInitializer
from .page import PageInitializer
from .record import RecordInitializer
from .registry import InitializerRegistry

__all__ = ["AbstractInitializer", "InitializerRegistry", "PageInitializer", "RecordInitializer"]
