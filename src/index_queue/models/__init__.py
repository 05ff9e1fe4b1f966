"""Index queue database models."""

from .base import Base
from .queue import QueueItemEntry

__all__ = ["Base", "QueueItemEntry"]
