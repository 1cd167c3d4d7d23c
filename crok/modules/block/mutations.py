"""Block mutation engine.

Pure functions that turn a block sequence plus one edit intent into a new
block list. Inputs are never modified: blocks are frozen and every
function returns fresh copies, nested table rows included.

Invariants kept by every structural operation (insert, delete, move):

- ``block.order`` equals the block's list index afterwards;
- a sequence handed back by ``delete_at`` is never empty.

Out-of-range indexes raise ``ValidationError``; ``insert_below`` clamps
instead, and the table delete operations treat them as no-ops.
"""

from typing import Any, Callable, List, Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError

from ..common.exceptions import ValidationError
from .schemas import AnyBlock, BlockType, TableBlock, TodoBlock, TextBlock, block_adapter

BlockList = List[AnyBlock]


def new_block(order: int = 0) -> TextBlock:
    """A fresh empty paragraph with a new id."""
    return TextBlock(type=BlockType.PARAGRAPH.value, order=order)


def reindex(blocks: Sequence[AnyBlock]) -> BlockList:
    """Return copies of the blocks with ``order`` rewritten to match list position."""
    return [block.model_copy(update={"order": i}, deep=True) for i, block in enumerate(blocks)]


def _check_index(blocks: Sequence[AnyBlock], index: int) -> None:
    if not 0 <= index < len(blocks):
        raise ValidationError(f"Block index {index} out of range for {len(blocks)} blocks")


def _revalidate(block: AnyBlock, changes: Mapping[str, Any]) -> AnyBlock:
    """Build a new block of the same variant with ``changes`` applied and validated."""
    data = block.model_dump()
    data.update(changes)
    try:
        return type(block).model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {block.type} block: {e}") from e


def insert_below(blocks: Sequence[AnyBlock], index: int) -> BlockList:
    """Insert an empty paragraph right after ``index``.

    ``index = -1`` (or an empty sequence) inserts at the head; indexes past
    the end append. Never fails.
    """
    position = min(max(index + 1, 0), len(blocks))
    result = list(blocks)
    result.insert(position, new_block(position))
    return reindex(result)


def delete_at(blocks: Sequence[AnyBlock], index: int) -> BlockList:
    """Remove the block at ``index``.

    Deleting the last remaining block yields a single fresh empty
    paragraph instead of an empty list.
    """
    _check_index(blocks, index)
    result = [block for i, block in enumerate(blocks) if i != index]
    if not result:
        return [new_block(0)]
    return reindex(result)


def move_block(blocks: Sequence[AnyBlock], from_index: int, to_index: int) -> BlockList:
    """Move the block at ``from_index`` so it ends up at ``to_index``."""
    _check_index(blocks, from_index)
    _check_index(blocks, to_index)
    result = list(blocks)
    result.insert(to_index, result.pop(from_index))
    return reindex(result)


def replace_block(blocks: Sequence[AnyBlock], index: int, block: AnyBlock) -> BlockList:
    """Swap in ``block`` at ``index``, keeping the slot's order."""
    _check_index(blocks, index)
    result = reindex(blocks)
    result[index] = block.model_copy(update={"order": index}, deep=True)
    return result


def apply_to_block(blocks: Sequence[AnyBlock], index: int, fn: Callable[[AnyBlock], AnyBlock]) -> BlockList:
    """Replace the block at ``index`` with ``fn(block)``."""
    _check_index(blocks, index)
    return replace_block(blocks, index, fn(blocks[index]))


def update_content(blocks: Sequence[AnyBlock], index: int, text: str) -> BlockList:
    return apply_to_block(blocks, index, lambda block: block.model_copy(update={"content": text}))


def update_properties(blocks: Sequence[AnyBlock], index: int, patch: Mapping[str, Any]) -> BlockList:
    """Shallow-merge ``patch`` into the block's payload.

    Keys missing from the patch keep their current values. Keys the block's
    type does not carry are rejected.
    """
    _check_index(blocks, index)
    block = blocks[index]
    unknown = set(patch) - block.property_fields
    if unknown:
        raise ValidationError(f"Properties {sorted(unknown)} are not valid for {block.type} blocks")
    return replace_block(blocks, index, _revalidate(block, patch))


def change_type(blocks: Sequence[AnyBlock], index: int, new_type: str) -> BlockList:
    """Retype the block at ``index``.

    Destructive: content is cleared and the payload reset to the new
    type's default (a 3x3 empty grid for tables, an empty url for images).
    The block keeps its id and order.
    """
    _check_index(blocks, index)
    try:
        block_type = BlockType(new_type)
    except ValueError as e:
        raise ValidationError(f"Unknown block type: {new_type!r}") from e

    block = blocks[index]
    retyped = block_adapter.validate_python({"id": block.id, "order": block.order, "type": block_type.value})
    return replace_block(blocks, index, retyped)


def toggle_todo(blocks: Sequence[AnyBlock], index: int) -> BlockList:
    _check_index(blocks, index)
    block = blocks[index]
    if not isinstance(block, TodoBlock):
        raise ValidationError(f"Block {index} is a {block.type} block, not a todo")
    return update_properties(blocks, index, {"checked": not block.checked})


def _table_at(blocks: Sequence[AnyBlock], index: int) -> TableBlock:
    _check_index(blocks, index)
    block = blocks[index]
    if not isinstance(block, TableBlock):
        raise ValidationError(f"Block {index} is a {block.type} block, not a table")
    return block


def add_row(blocks: Sequence[AnyBlock], index: int) -> BlockList:
    """Append a row of empty cells sized to the table's column count."""
    table = _table_at(blocks, index)
    rows = [list(row) for row in table.rows]
    rows.append([""] * table.column_count)
    return replace_block(blocks, index, _revalidate(table, {"rows": rows}))


def add_column(blocks: Sequence[AnyBlock], index: int) -> BlockList:
    """Append an empty cell to every row."""
    table = _table_at(blocks, index)
    rows = [[*row, ""] for row in table.rows]
    return replace_block(blocks, index, _revalidate(table, {"rows": rows}))


def delete_row(blocks: Sequence[AnyBlock], index: int, row: int) -> BlockList:
    """Remove one row. No-op if it is the last row or ``row`` is out of range."""
    table = _table_at(blocks, index)
    if len(table.rows) <= 1 or not 0 <= row < len(table.rows):
        return reindex(blocks)
    rows = [list(r) for i, r in enumerate(table.rows) if i != row]
    return replace_block(blocks, index, _revalidate(table, {"rows": rows}))


def delete_column(blocks: Sequence[AnyBlock], index: int, column: int) -> BlockList:
    """Remove one column. No-op if it is the last column or ``column`` is out of range."""
    table = _table_at(blocks, index)
    if table.column_count <= 1 or not 0 <= column < table.column_count:
        return reindex(blocks)
    rows = [[cell for i, cell in enumerate(r) if i != column] for r in table.rows]
    return replace_block(blocks, index, _revalidate(table, {"rows": rows}))


def update_cell(blocks: Sequence[AnyBlock], index: int, row: int, column: int, text: str) -> BlockList:
    """Set the text of one table cell."""
    table = _table_at(blocks, index)
    if not (0 <= row < len(table.rows) and 0 <= column < table.column_count):
        raise ValidationError(f"Cell ({row}, {column}) out of range for a {len(table.rows)}x{table.column_count} table")
    rows = [list(r) for r in table.rows]
    rows[row][column] = text
    return replace_block(blocks, index, _revalidate(table, {"rows": rows}))

