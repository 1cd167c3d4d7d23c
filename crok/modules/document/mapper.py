"""Mapping between documents and their rows in ``documents``, ``blocks`` and ``tags``.

Blocks are written with ``block_order`` set to their list index, and read
back sorted by ``block_order`` with ``order`` taken from the resulting
position, so list position and ``order`` always agree after a load.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from ...infrastructure.database.models import generate_id
from ..block.schemas import AnyBlock, parse_block
from .schemas import DocumentCreate, DocumentCreateInternal, DocumentRead, DocumentUpdate

Row = Dict[str, Any]

DOCUMENT_COLUMNS = (
    "id",
    "title",
    "icon",
    "cover_image",
    "is_public",
    "is_favorite",
    "created_by",
    "created_at",
    "last_edited_at",
    "parent_id",
)

# Scalar fields a DocumentUpdate may patch on the documents row.
PATCHABLE_COLUMNS = ("title", "icon", "cover_image", "is_public", "is_favorite", "parent_id")


def document_row(data: DocumentCreate, created_by: str) -> DocumentCreateInternal:
    """Scalar columns for inserting a new document owned by ``created_by``."""
    return DocumentCreateInternal(
        title=data.title,
        created_by=created_by,
        icon=data.icon,
        cover_image=data.cover_image,
        is_public=data.is_public,
        is_favorite=data.is_favorite,
        parent_id=data.parent_id,
    )


def block_rows(document_id: str, blocks: Sequence[AnyBlock]) -> List[Row]:
    return [
        {
            "id": block.id,
            "document_id": document_id,
            "type": block.type,
            "content": block.content,
            "properties": block.properties or None,
            "block_order": position,
        }
        for position, block in enumerate(blocks)
    ]


def tag_rows(document_id: str, tags: Iterable[str]) -> List[Row]:
    return [{"id": generate_id(), "document_id": document_id, "tag": tag} for tag in tags]


def document_to_rows(document: DocumentRead) -> Tuple[Row, List[Row], List[Row]]:
    """Split a full document into its document row, block rows and tag rows."""
    row = document.model_dump(include=set(DOCUMENT_COLUMNS))
    return row, block_rows(document.id, document.blocks), tag_rows(document.id, document.tags)


def block_from_row(row: Mapping[str, Any], order: int) -> AnyBlock:
    return parse_block(
        {
            "id": row["id"],
            "type": row["type"],
            "content": row.get("content") or "",
            "properties": row.get("properties"),
            "order": order,
        }
    )


def document_from_rows(
    doc_row: Mapping[str, Any],
    block_records: Iterable[Mapping[str, Any]],
    tag_records: Iterable[Mapping[str, Any]],
) -> DocumentRead:
    """Assemble a document from its rows. Block rows may arrive in any order."""
    ordered = sorted(block_records, key=lambda row: row["block_order"])
    blocks = [block_from_row(row, position) for position, row in enumerate(ordered)]
    data = {column: doc_row[column] for column in DOCUMENT_COLUMNS if column in doc_row}
    return DocumentRead(**data, blocks=blocks, tags=[row["tag"] for row in tag_records])


def document_patch(data: DocumentUpdate, edited_at: datetime) -> Row:
    """Columns to write for a partial update.

    Only fields explicitly set on ``data`` are included; ``last_edited_at``
    is always refreshed.
    """
    patch = {field: getattr(data, field) for field in PATCHABLE_COLUMNS if field in data.model_fields_set}
    patch["last_edited_at"] = edited_at
    return patch


def replaces_blocks(data: DocumentUpdate) -> bool:
    return "blocks" in data.model_fields_set


def replaces_tags(data: DocumentUpdate) -> bool:
    return "tags" in data.model_fields_set
