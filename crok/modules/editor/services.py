"""Headless document editor.

``DocumentEditor`` holds the open document's draft and tracks which of
three modes the editor is in:

    VIEWING_LIST --new_document()--> CREATING_NEW
    VIEWING_LIST --open_document()--> EDITING_EXISTING
    CREATING_NEW / EDITING_EXISTING --close() or complete_save()--> VIEWING_LIST

Any other transition raises ``EditorStateError``. Block edits go through
the pure functions in ``crok.modules.block.mutations``; the editor only
swaps the draft's block list for the result.
"""

from typing import Any, Callable, Mapping, Optional, Union

from ...infrastructure.logging import get_logger
from ..block import mutations
from ..block.mutations import BlockList
from ..common.exceptions import EditorStateError, PermissionDeniedError
from ..document import projection
from ..document.schemas import DocumentCreate, DocumentDraft, DocumentRead, DocumentUpdate
from .schemas import EditorMode

logger = get_logger(__name__)


class DocumentEditor:
    def __init__(self):
        self.mode = EditorMode.VIEWING_LIST
        self.document: Optional[DocumentRead] = None
        self.draft: Optional[DocumentDraft] = None
        self.baseline: Optional[DocumentDraft] = None
        self.editable = True

    @property
    def is_open(self) -> bool:
        return self.mode != EditorMode.VIEWING_LIST

    @property
    def is_dirty(self) -> bool:
        """True when any tracked field of the draft differs from what was loaded."""
        if self.draft is None or self.baseline is None:
            return False
        return self.draft.model_dump() != self.baseline.model_dump()

    def new_document(self) -> DocumentDraft:
        """Open a blank document: one empty paragraph, public."""
        self._require_mode(EditorMode.VIEWING_LIST, "create a document")
        self._open(EditorMode.CREATING_NEW, None, DocumentDraft(), editable=True)
        return self.draft

    def open_document(self, document: DocumentRead, editable: bool = True) -> DocumentDraft:
        """Open a saved document. With ``editable=False`` every edit is refused."""
        self._require_mode(EditorMode.VIEWING_LIST, "open a document")
        self._open(EditorMode.EDITING_EXISTING, document, DocumentDraft.from_document(document), editable)
        return self.draft

    def close(self, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """Close the open document, discarding the draft.

        With unsaved changes the editor only closes if ``confirm()`` returns
        true; without a ``confirm`` callback a dirty editor stays open.

        Returns:
            Whether the editor closed.
        """
        self._require_open()
        if self.is_dirty and (confirm is None or not confirm()):
            return False
        self._reset()
        return True

    def build_payload(self) -> Union[DocumentCreate, DocumentUpdate]:
        """The save payload: a create for a new document, a full update otherwise."""
        draft = self._require_open()
        if self.mode == EditorMode.CREATING_NEW:
            return draft.to_create()
        return draft.to_update()

    def complete_save(self, saved: DocumentRead) -> None:
        """Return to the list after a successful save."""
        self._require_open()
        logger.debug("Save completed, closing editor", extra={"document_id": saved.id})
        self._reset()

    def set_title(self, title: str) -> None:
        self._edit(title=title)

    def set_icon(self, icon: str) -> None:
        self._edit(icon=icon)

    def set_cover_image(self, cover_image: Optional[str]) -> None:
        self._edit(cover_image=cover_image)

    def set_public(self, is_public: bool) -> None:
        self._edit(is_public=is_public)

    def set_favorite(self, is_favorite: bool) -> None:
        self._edit(is_favorite=is_favorite)

    def add_tag(self, tag: str) -> None:
        self._edit(tags=projection.add_tag(self._require_editable().tags, tag))

    def remove_tag(self, tag: str) -> None:
        self._edit(tags=projection.remove_tag(self._require_editable().tags, tag))

    def apply(self, mutation: Callable[..., BlockList], *args: Any) -> BlockList:
        """Run a block mutation against the draft's blocks and keep the result."""
        blocks = mutation(self._require_editable().blocks, *args)
        self._edit(blocks=blocks)
        return blocks

    def insert_below(self, index: int) -> BlockList:
        return self.apply(mutations.insert_below, index)

    def delete_block(self, index: int) -> BlockList:
        return self.apply(mutations.delete_at, index)

    def move_block(self, from_index: int, to_index: int) -> BlockList:
        return self.apply(mutations.move_block, from_index, to_index)

    def update_content(self, index: int, text: str) -> BlockList:
        return self.apply(mutations.update_content, index, text)

    def update_properties(self, index: int, patch: Mapping[str, Any]) -> BlockList:
        return self.apply(mutations.update_properties, index, patch)

    def change_type(self, index: int, new_type: str) -> BlockList:
        return self.apply(mutations.change_type, index, new_type)

    def toggle_todo(self, index: int) -> BlockList:
        return self.apply(mutations.toggle_todo, index)

    def add_row(self, index: int) -> BlockList:
        return self.apply(mutations.add_row, index)

    def add_column(self, index: int) -> BlockList:
        return self.apply(mutations.add_column, index)

    def delete_row(self, index: int, row: int) -> BlockList:
        return self.apply(mutations.delete_row, index, row)

    def delete_column(self, index: int, column: int) -> BlockList:
        return self.apply(mutations.delete_column, index, column)

    def update_cell(self, index: int, row: int, column: int, text: str) -> BlockList:
        return self.apply(mutations.update_cell, index, row, column, text)

    def _open(self, mode: EditorMode, document: Optional[DocumentRead], draft: DocumentDraft, editable: bool) -> None:
        self.mode = mode
        self.document = document
        self.draft = draft
        self.baseline = draft.model_copy(deep=True)
        self.editable = editable

    def _reset(self) -> None:
        self.mode = EditorMode.VIEWING_LIST
        self.document = None
        self.draft = None
        self.baseline = None
        self.editable = True

    def _require_mode(self, mode: EditorMode, action: str) -> None:
        if self.mode != mode:
            raise EditorStateError(f"Cannot {action} while the editor is {self.mode.value}")

    def _require_open(self) -> DocumentDraft:
        if self.draft is None:
            raise EditorStateError("No document is open")
        return self.draft

    def _require_editable(self) -> DocumentDraft:
        draft = self._require_open()
        if not self.editable:
            raise PermissionDeniedError("This document is read-only")
        return draft

    def _edit(self, **changes: Any) -> None:
        draft = self._require_editable()
        for field, value in changes.items():
            setattr(draft, field, value)
