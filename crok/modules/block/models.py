"""SQLAlchemy model for block rows."""

from typing import Any, Dict, Optional

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import JSON_TYPE
from ...infrastructure.database.session import Base


class Block(Base):
    """One block of a document.

    The row id is the block's own id, so it is preserved across saves.
    ``block_order`` is the block's list position and is unique within a
    document; ``properties`` holds the type-specific payload.
    """

    __tablename__ = "blocks"
    __table_args__ = (UniqueConstraint("document_id", "block_order", name="uq_blocks_document_order"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    document_id: Mapped[str] = mapped_column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String(32))
    block_order: Mapped[int] = mapped_column(Integer)
    content: Mapped[str] = mapped_column(Text, default="")
    properties: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON_TYPE, default=None)
