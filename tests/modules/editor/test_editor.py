"""Tests for the headless document editor."""

from datetime import UTC, datetime

import pytest

from crok.modules.block.schemas import TableBlock, TextBlock, TodoBlock
from crok.modules.common.exceptions import EditorStateError, PermissionDeniedError, ValidationError
from crok.modules.document.schemas import DocumentCreate, DocumentRead, DocumentUpdate
from crok.modules.editor.schemas import EditorMode
from crok.modules.editor.services import DocumentEditor

NOW = datetime(2024, 5, 1, tzinfo=UTC)


@pytest.fixture
def editor():
    return DocumentEditor()


@pytest.fixture
def saved_document() -> DocumentRead:
    return DocumentRead(
        id="doc-1",
        title="Saved",
        created_by="user-1",
        created_at=NOW,
        last_edited_at=NOW,
        blocks=[TextBlock(id="b0", content="Hello"), TodoBlock(id="b1", content="Task", order=1)],
        tags=["a"],
    )


def test_starts_viewing_list(editor: DocumentEditor):
    assert editor.mode == EditorMode.VIEWING_LIST
    assert editor.is_open is False
    assert editor.is_dirty is False


def test_new_document(editor: DocumentEditor):
    """Test that a new document starts with one empty paragraph and is not dirty."""
    draft = editor.new_document()

    assert editor.mode == EditorMode.CREATING_NEW
    assert len(draft.blocks) == 1
    assert draft.blocks[0].type == "paragraph"
    assert draft.is_public is True
    assert editor.is_dirty is False


def test_open_document(editor: DocumentEditor, saved_document: DocumentRead):
    draft = editor.open_document(saved_document)

    assert editor.mode == EditorMode.EDITING_EXISTING
    assert editor.document == saved_document
    assert draft.title == "Saved"
    assert [block.id for block in draft.blocks] == ["b0", "b1"]


def test_open_document_without_blocks_seeds_paragraph(editor: DocumentEditor, saved_document: DocumentRead):
    draft = editor.open_document(saved_document.model_copy(update={"blocks": []}))

    assert len(draft.blocks) == 1
    assert draft.blocks[0].content == ""


def test_cannot_open_twice(editor: DocumentEditor, saved_document: DocumentRead):
    editor.new_document()

    with pytest.raises(EditorStateError):
        editor.open_document(saved_document)
    with pytest.raises(EditorStateError):
        editor.new_document()


def test_edits_require_open_document(editor: DocumentEditor):
    with pytest.raises(EditorStateError):
        editor.set_title("x")
    with pytest.raises(EditorStateError):
        editor.insert_below(0)
    with pytest.raises(EditorStateError):
        editor.build_payload()


def test_block_edits_update_draft(editor: DocumentEditor):
    editor.new_document()

    editor.update_content(0, "Intro")
    editor.insert_below(0)
    editor.change_type(1, "todo")
    editor.update_content(1, "Do it")
    editor.toggle_todo(1)
    editor.insert_below(1)
    editor.change_type(2, "table")
    editor.add_row(2)
    editor.update_cell(2, 3, 0, "last")
    editor.move_block(2, 0)

    blocks = editor.draft.blocks
    assert [block.type for block in blocks] == ["table", "paragraph", "todo"]
    assert [block.order for block in blocks] == [0, 1, 2]
    assert blocks[0].rows[3] == ["last", "", ""]
    assert blocks[2].checked is True
    assert editor.is_dirty is True


def test_block_edit_errors_leave_draft_unchanged(editor: DocumentEditor):
    editor.new_document()
    before = list(editor.draft.blocks)

    with pytest.raises(ValidationError):
        editor.toggle_todo(0)
    with pytest.raises(ValidationError):
        editor.delete_block(4)

    assert editor.draft.blocks == before


def test_tags_and_fields(editor: DocumentEditor):
    editor.new_document()

    editor.add_tag(" work ")
    editor.add_tag("work")
    editor.add_tag("home")
    editor.remove_tag("work")
    editor.set_icon("🚀")
    editor.set_favorite(True)
    editor.set_public(False)
    editor.set_cover_image("data:image/png;base64,AAAA")

    draft = editor.draft
    assert draft.tags == ["home"]
    assert draft.icon == "🚀"
    assert draft.is_favorite is True
    assert draft.is_public is False
    assert draft.cover_image == "data:image/png;base64,AAAA"


def test_close_clean_editor(editor: DocumentEditor, saved_document: DocumentRead):
    editor.open_document(saved_document)

    assert editor.close() is True
    assert editor.mode == EditorMode.VIEWING_LIST
    assert editor.draft is None


def test_close_dirty_editor_needs_confirmation(editor: DocumentEditor, saved_document: DocumentRead):
    """Test that unsaved changes are only discarded when the user confirms."""
    editor.open_document(saved_document)
    editor.set_title("Changed")

    assert editor.close() is False
    assert editor.close(confirm=lambda: False) is False
    assert editor.draft.title == "Changed"

    assert editor.close(confirm=lambda: True) is True
    assert editor.is_open is False


def test_undoing_a_change_is_not_dirty(editor: DocumentEditor, saved_document: DocumentRead):
    editor.open_document(saved_document)

    editor.set_title("Changed")
    editor.set_title("Saved")

    assert editor.is_dirty is False


def test_build_payload_for_new_document(editor: DocumentEditor):
    editor.new_document()
    editor.insert_below(0)
    editor.update_content(1, "Body")

    payload = editor.build_payload()

    assert isinstance(payload, DocumentCreate)
    assert payload.title == "Untitled"
    assert [block.content for block in payload.blocks] == ["Body"]
    assert [block.order for block in payload.blocks] == [0]


def test_build_payload_for_existing_document(editor: DocumentEditor, saved_document: DocumentRead):
    editor.open_document(saved_document)
    editor.change_type(0, "divider")

    payload = editor.build_payload()

    assert isinstance(payload, DocumentUpdate)
    assert [block.type for block in payload.blocks] == ["divider", "todo"]
    assert payload.tags == ["a"]


def test_complete_save_returns_to_list(editor: DocumentEditor, saved_document: DocumentRead):
    editor.new_document()

    editor.complete_save(saved_document)

    assert editor.mode == EditorMode.VIEWING_LIST
    with pytest.raises(EditorStateError):
        editor.complete_save(saved_document)


def test_read_only_document_refuses_edits(editor: DocumentEditor, saved_document: DocumentRead):
    draft = editor.open_document(saved_document, editable=False)

    with pytest.raises(PermissionDeniedError):
        editor.set_title("Mine now")
    with pytest.raises(PermissionDeniedError):
        editor.delete_block(0)
    with pytest.raises(PermissionDeniedError):
        editor.add_tag("x")

    assert draft.title == "Saved"
    assert editor.close() is True


def test_table_edits_through_editor(editor: DocumentEditor):
    editor.new_document()
    editor.change_type(0, "table")

    editor.add_column(0)
    editor.delete_row(0, 0)
    editor.delete_column(0, 3)

    table = editor.draft.blocks[0]
    assert isinstance(table, TableBlock)
    assert table.rows == [["", "", ""], ["", "", ""]]


def test_update_properties_through_editor(editor: DocumentEditor):
    editor.new_document()
    editor.change_type(0, "code")

    editor.update_properties(0, {"language": "go"})

    assert editor.draft.blocks[0].language == "go"
