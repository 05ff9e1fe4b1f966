"""Index queue entry model."""

from typing import TypeAlias, override

from sqlalchemy import BigInteger, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


class QueueItemEntry(Base):
    """One unit of queued indexing work.

    There is at most one entry per (item_type, item_uid, root). The same
    content item may be queued once for every site that contains it.

    - changed: seconds timestamp of the last material change, may lie in the
      future for scheduled records
    - indexed: seconds timestamp of the last successful indexing, 0 = never
    - errors: non-empty marks the entry as failed
    """

    __tablename__ = "index_queue_item"  # pyright: ignore[reportUnannotatedClassAttribute]
    __table_args__ = (  # pyright: ignore[reportUnannotatedClassAttribute]
        UniqueConstraint("item_type", "item_uid", "root", name="uq_index_queue_item_triple"),
        Index("ix_index_queue_item_root_configuration", "root", "indexing_configuration"),
        Index("ix_index_queue_item_due", "root", "changed", "indexed"),
        Index("ix_index_queue_item_errors", "errors"),
    )

    uid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_type: Mapped[str] = mapped_column(String(255), nullable=False)
    item_uid: Mapped[int] = mapped_column(Integer, nullable=False)
    root: Mapped[int] = mapped_column(Integer, nullable=False)
    indexing_configuration: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    changed: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    indexed: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    errors: Mapped[str] = mapped_column(Text, nullable=False, default="")

    parameters: Mapped[JSONValue] = mapped_column(JSON, nullable=True)

    @override
    def __repr__(self) -> str:
        return (
            f"<QueueItemEntry(uid={self.uid}, item_type={self.item_type}, "
            f"item_uid={self.item_uid}, root={self.root})>"
        )
