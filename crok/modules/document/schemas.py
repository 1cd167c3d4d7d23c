"""Pydantic schemas for document entities."""

from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..block.mutations import new_block
from ..block.schemas import AnyBlock
from ..common.constants import DEFAULT_DOCUMENT_ICON
from ..common.schemas import EditTimestampSchema
from .projection import normalize_tags, persistable_blocks, resolve_title

Title = Annotated[str, Field(max_length=255, description="Document title")]
Icon = Annotated[str, Field(min_length=1, max_length=32, description="Short display glyph")]


def _check_blocks(blocks: List[AnyBlock]) -> List[AnyBlock]:
    ids = [block.id for block in blocks]
    if len(ids) != len(set(ids)):
        raise ValueError("Block ids must be unique within a document")
    return persistable_blocks(blocks)


class DocumentBase(BaseModel):
    """Base schema for document data."""

    title: Title = ""
    icon: Icon = DEFAULT_DOCUMENT_ICON
    cover_image: Optional[str] = Field(default=None, description="Cover image URI, usually an inline data URI")
    blocks: List[AnyBlock] = Field(default_factory=list, description="Ordered block sequence")
    is_public: bool = Field(default=True, description="Public documents are editable by any signed-in user")
    is_favorite: bool = False
    tags: List[str] = Field(default_factory=list, description="Tag set; order is not significant")
    parent_id: Optional[str] = Field(default=None, description="Containing document, not interpreted")


class DocumentCreate(DocumentBase):
    """Schema for creating a new document.

    The save rules apply on validation: an empty title is stored as
    ``"Untitled"``, placeholder blocks are dropped and duplicate tags ignored.
    """

    model_config = ConfigDict(validate_default=True)

    @field_validator("title")
    @classmethod
    def _default_title(cls, title: str) -> str:
        return resolve_title(title)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, tags: List[str]) -> List[str]:
        return normalize_tags(tags)

    @field_validator("blocks")
    @classmethod
    def _validate_blocks(cls, blocks: List[AnyBlock]) -> List[AnyBlock]:
        return _check_blocks(blocks)


class DocumentCreateInternal(BaseModel):
    """Scalar columns written to the ``documents`` table on insert."""

    title: str
    created_by: str
    icon: str = DEFAULT_DOCUMENT_ICON
    cover_image: Optional[str] = None
    is_public: bool = True
    is_favorite: bool = False
    parent_id: Optional[str] = None


class DocumentUpdate(BaseModel):
    """Schema for a partial document update.

    Only fields explicitly present in the payload are written. ``blocks``
    and ``tags`` replace the stored sets wholesale when present; an empty
    list clears them. Placeholder blocks are dropped before saving.
    ``cover_image`` and ``parent_id`` may be set to null to clear them;
    every other field rejects null.
    """

    title: Optional[Title] = None
    icon: Optional[Icon] = None
    cover_image: Optional[str] = None
    blocks: Optional[List[AnyBlock]] = None
    is_public: Optional[bool] = None
    is_favorite: Optional[bool] = None
    tags: Optional[List[str]] = None
    parent_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _reject_null_required_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(
                key
                for key in ("title", "icon", "blocks", "is_public", "is_favorite", "tags")
                if key in data and data[key] is None
            )
            if nulls:
                raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return data

    @field_validator("title")
    @classmethod
    def _default_title(cls, title: Optional[str]) -> Optional[str]:
        return None if title is None else resolve_title(title)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, tags: Optional[List[str]]) -> Optional[List[str]]:
        return None if tags is None else normalize_tags(tags)

    @field_validator("blocks")
    @classmethod
    def _validate_blocks(cls, blocks: Optional[List[AnyBlock]]) -> Optional[List[AnyBlock]]:
        return None if blocks is None else _check_blocks(blocks)


class DocumentRead(EditTimestampSchema, DocumentBase):
    """Schema for reading document data."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_by: str


class DocumentPermissions(BaseModel):
    can_edit: bool


class DocumentDraft(BaseModel):
    """The editable, not yet saved state of a document.

    The title may be empty and blocks may be empty placeholders; the save
    rules are applied by ``to_create`` / ``to_update``.
    """

    model_config = ConfigDict(validate_assignment=True)

    title: str = ""
    icon: str = DEFAULT_DOCUMENT_ICON
    cover_image: Optional[str] = None
    blocks: List[AnyBlock] = Field(default_factory=lambda: [new_block(0)])
    is_public: bool = True
    is_favorite: bool = False
    tags: List[str] = Field(default_factory=list)
    parent_id: Optional[str] = None

    @classmethod
    def from_document(cls, document: DocumentRead) -> "DocumentDraft":
        """Start a draft from a saved document. A document with no blocks gets one empty paragraph."""
        return cls(
            title=document.title,
            icon=document.icon,
            cover_image=document.cover_image,
            blocks=list(document.blocks) or [new_block(0)],
            is_public=document.is_public,
            is_favorite=document.is_favorite,
            tags=list(document.tags),
            parent_id=document.parent_id,
        )

    def _payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "icon": self.icon,
            "cover_image": self.cover_image,
            "blocks": list(self.blocks),
            "is_public": self.is_public,
            "is_favorite": self.is_favorite,
            "tags": self.tags,
            "parent_id": self.parent_id,
        }

    def to_create(self) -> DocumentCreate:
        return DocumentCreate(**self._payload())

    def to_update(self) -> DocumentUpdate:
        """A full update: every field is marked as set, so blocks and tags are replaced."""
        return DocumentUpdate(**self._payload())
