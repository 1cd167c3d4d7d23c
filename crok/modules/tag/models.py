"""SQLAlchemy model for document tags."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import IdMixin
from ...infrastructure.database.session import Base


class Tag(Base, IdMixin):
    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("document_id", "tag", name="uq_tags_document_tag"),)

    document_id: Mapped[str] = mapped_column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), index=True)
    tag: Mapped[str] = mapped_column(String(100), index=True)
