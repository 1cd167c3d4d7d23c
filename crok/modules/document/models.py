"""SQLAlchemy models for document entities."""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import EditTimestampMixin, IdMixin
from ...infrastructure.database.session import Base
from ..common.constants import DEFAULT_DOCUMENT_ICON


class Document(Base, IdMixin, EditTimestampMixin):
    """Scalar fields of a document.

    Blocks and tags live in their own tables, keyed by ``document_id`` with
    ``ON DELETE CASCADE``. ``created_by`` is the owning user's id and never
    changes after insert.
    """

    __tablename__ = "documents"

    title: Mapped[str] = mapped_column(String(255))
    created_by: Mapped[str] = mapped_column(String(36), index=True)
    icon: Mapped[str] = mapped_column(String(32), default=DEFAULT_DOCUMENT_ICON)
    cover_image: Mapped[Optional[str]] = mapped_column(Text, default=None)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False)
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("documents.id", ondelete="SET NULL"), default=None, index=True
    )
