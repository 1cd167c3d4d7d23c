"""Pydantic schemas for blocks.

A block is one typed unit of document content. The closed set of block
types is modelled as a discriminated union keyed by ``type``; each variant
owns the typed payload fields it needs (``checked`` for to-dos, ``rows``
for tables, ...). Blocks are frozen: editing produces new block values,
see ``crok.modules.block.mutations``.

The relational shape keeps the payload in a single ``properties`` JSON
blob. Every variant exposes that blob through its ``properties`` property
and accepts it back on validation, so rows and API payloads that nest the
payload under ``properties`` validate the same as flat ones.
"""

from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from ...infrastructure.database.models import generate_id


class BlockType(str, Enum):
    """Closed set of block types."""

    PARAGRAPH = "paragraph"
    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    BULLET_LIST = "bulletList"
    NUMBERED_LIST = "numberedList"
    TODO = "todo"
    QUOTE = "quote"
    CODE = "code"
    DIVIDER = "divider"
    IMAGE = "image"
    TABLE = "table"


# Types that carry meaning without any text content.
CONTENTLESS_BLOCK_TYPES: FrozenSet[BlockType] = frozenset({BlockType.DIVIDER, BlockType.IMAGE, BlockType.TABLE})

DEFAULT_TABLE_SIZE = 3


def empty_table(rows: int = DEFAULT_TABLE_SIZE, columns: int = DEFAULT_TABLE_SIZE) -> List[List[str]]:
    return [["" for _ in range(columns)] for _ in range(rows)]


class BlockBase(BaseModel):
    """Fields shared by every block variant."""

    model_config = ConfigDict(frozen=True)

    # Names of the payload fields stored in the ``properties`` blob.
    property_fields: ClassVar[FrozenSet[str]] = frozenset()

    id: str = Field(default_factory=generate_id, min_length=1, description="Stable block identifier")
    content: str = Field(default="", description="Plain text content")
    order: int = Field(default=0, ge=0, description="Zero-based position in the document")

    @model_validator(mode="before")
    @classmethod
    def _lift_properties(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "properties" not in data:
            return data
        data = dict(data)
        properties = data.pop("properties")
        if isinstance(properties, dict):
            data = {**properties, **data}
        return data

    @property
    def properties(self) -> Dict[str, Any]:
        """The variant payload in its stored ``properties`` shape."""
        return self.model_dump(include=set(self.property_fields), exclude_none=True)


class TextBlock(BlockBase):
    """Paragraphs, headings, list items and quotes: text only, no payload."""

    type: Literal["paragraph", "heading1", "heading2", "heading3", "bulletList", "numberedList", "quote"] = "paragraph"


class CodeBlock(BlockBase):
    property_fields: ClassVar[FrozenSet[str]] = frozenset({"language"})

    type: Literal["code"] = "code"
    language: Optional[str] = None


class TodoBlock(BlockBase):
    property_fields: ClassVar[FrozenSet[str]] = frozenset({"checked"})

    type: Literal["todo"] = "todo"
    checked: bool = False


class DividerBlock(BlockBase):
    type: Literal["divider"] = "divider"


class ImageBlock(BlockBase):
    """Image block. ``url`` is any displayable URI, usually an inline data URI."""

    property_fields: ClassVar[FrozenSet[str]] = frozenset({"url"})

    type: Literal["image"] = "image"
    url: str = ""


class TableBlock(BlockBase):
    """Table block holding a rectangular grid of cell strings.

    The grid always has at least one row and one column.
    """

    property_fields: ClassVar[FrozenSet[str]] = frozenset({"rows"})

    type: Literal["table"] = "table"
    rows: List[List[str]] = Field(default_factory=empty_table)

    @field_validator("rows")
    @classmethod
    def _validate_grid(cls, rows: List[List[str]]) -> List[List[str]]:
        if not rows or not rows[0]:
            raise ValueError("a table needs at least one row and one column")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("table rows must all have the same number of cells")
        return rows

    @property
    def column_count(self) -> int:
        return len(self.rows[0])


AnyBlock = Annotated[
    Union[TextBlock, CodeBlock, TodoBlock, DividerBlock, ImageBlock, TableBlock],
    Field(discriminator="type"),
]

block_adapter: TypeAdapter[AnyBlock] = TypeAdapter(AnyBlock)
blocks_adapter: TypeAdapter[List[AnyBlock]] = TypeAdapter(List[AnyBlock])


def parse_block(data: Any) -> AnyBlock:
    """Validate a mapping (flat or with a nested ``properties`` blob) into a block variant."""
    return block_adapter.validate_python(data)
