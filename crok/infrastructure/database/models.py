import uuid as uuid_pkg
from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, MappedAsDataclass, mapped_column

JSON_TYPE = JSON().with_variant(JSONB, "postgresql")


def generate_id() -> str:
    """Return a new opaque identifier (uuid4 in canonical string form)."""
    return str(uuid_pkg.uuid4())


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class IdMixin(MappedAsDataclass):
    """Mixin adding a string UUID primary key.

    Identifiers are generated client-side so a row's id is known before
    the INSERT is flushed, which lets dependent rows (blocks, tags) be
    written in the same transaction. Stored as ``VARCHAR(36)`` to stay
    portable between PostgreSQL and SQLite.

    Attributes:
        id: The primary key, excluded from ``__init__``.
    """

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default_factory=generate_id,
        init=False,
    )


class TimestampMixin(MappedAsDataclass):
    """Mixin for ``created_at`` and ``updated_at`` columns.

    Both timestamps are timezone-aware and default to the current UTC
    time; neither is accepted by ``__init__``.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=utcnow,
        nullable=False,
        init=False,
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default_factory=utcnow,
        nullable=True,
        init=False,
    )


class EditTimestampMixin(MappedAsDataclass):
    """Mixin for editable content: ``created_at`` and ``last_edited_at``.

    ``created_at`` is written once on insert. ``last_edited_at`` is indexed
    because document listings sort by it, and services refresh it
    explicitly on every update call.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=utcnow,
        nullable=False,
        init=False,
    )

    last_edited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=utcnow,
        nullable=False,
        index=True,
        init=False,
    )
