"""Tests for document service."""

import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from crok.modules.block.models import Block
from crok.modules.block.schemas import TextBlock, TodoBlock
from crok.modules.common.exceptions import AuthenticationError, PermissionDeniedError, ValidationError
from crok.modules.document.schemas import DocumentCreate, DocumentRead, DocumentUpdate
from crok.modules.document.services import DocumentService
from crok.modules.tag.models import Tag


async def _count(db: AsyncSession, model, document_id: str) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(model.document_id == document_id))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_create_document(alice_service: DocumentService, db_session: AsyncSession, alice):
    """Test creating a document with blocks and tags."""
    data = DocumentCreate(
        title="Groceries",
        blocks=[TodoBlock(content="Milk"), TodoBlock(content="Eggs", checked=True)],
        tags=["home"],
    )

    result = await alice_service.create_document(data, db_session)

    assert result.title == "Groceries"
    assert result.created_by == alice.id
    assert [block.content for block in result.blocks] == ["Milk", "Eggs"]
    assert [block.checked for block in result.blocks] == [False, True]
    assert [block.id for block in result.blocks] == [block.id for block in data.blocks]
    assert result.tags == ["home"]
    assert result.is_public is True
    assert result.id in [document.id for document in alice_service.documents]


@pytest.mark.asyncio
async def test_create_document_defaults(alice_service: DocumentService, db_session: AsyncSession):
    result = await alice_service.create_document(DocumentCreate(), db_session)

    assert result.title == "Untitled"
    assert result.icon == "📄"
    assert result.blocks == []
    assert result.tags == []
    assert result.is_favorite is False


@pytest.mark.asyncio
async def test_create_document_requires_user(anonymous_service: DocumentService, db_session: AsyncSession):
    with pytest.raises(AuthenticationError):
        await anonymous_service.create_document(DocumentCreate(title="Nope"), db_session)


@pytest.mark.asyncio
async def test_create_document_rolls_back_on_conflicting_block_id(
    alice_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead
):
    """Test that a block id clash stores nothing, not even the document row."""
    reused = TextBlock(id=public_document.blocks[0].id, content="clash")

    with pytest.raises(ValidationError):
        await alice_service.create_document(DocumentCreate(title="Clash", blocks=[reused]), db_session)

    documents = await alice_service.load_all(db_session)
    assert [document.title for document in documents] == ["Trip notes"]


@pytest.mark.asyncio
async def test_get_document(alice_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead):
    result = await alice_service.get_document(public_document.id, db_session)

    assert result == public_document
    assert [block.type for block in result.blocks] == ["heading1", "todo", "table"]
    assert result.blocks[2].rows == [["Day", "City"], ["1", "Lisbon"]]


@pytest.mark.asyncio
async def test_get_document_not_found(alice_service: DocumentService, db_session: AsyncSession):
    assert await alice_service.get_document("missing", db_session) is None


@pytest.mark.asyncio
async def test_load_all_is_not_scoped_to_user(
    bob_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead, private_document: DocumentRead
):
    """Test that every document is loaded, newest edit first, and the views filter it."""
    documents = await bob_service.load_all(db_session)

    assert [document.id for document in documents] == [private_document.id, public_document.id]
    assert [document.id for document in bob_service.public_documents()] == [public_document.id]
    assert bob_service.user_documents() == []


@pytest.mark.asyncio
async def test_user_documents(
    alice_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead, private_document: DocumentRead
):
    await alice_service.load_all(db_session)

    assert {document.id for document in alice_service.user_documents()} == {public_document.id, private_document.id}


@pytest.mark.asyncio
async def test_load_all_failure_keeps_previous_documents(
    alice_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead, monkeypatch
):
    before = list(alice_service.documents)

    async def broken_fetch(db, document_id=None):
        raise OperationalError("SELECT", {}, Exception("database is gone"))

    monkeypatch.setattr(alice_service, "_fetch", broken_fetch)

    with pytest.raises(OperationalError):
        await alice_service.load_all(db_session)
    assert alice_service.documents == before


@pytest.mark.asyncio
async def test_can_edit_matrix(
    alice_service: DocumentService,
    bob_service: DocumentService,
    anonymous_service: DocumentService,
    public_document: DocumentRead,
    private_document: DocumentRead,
):
    """Test that public documents are editable by anyone signed in, private ones only by the owner."""
    assert alice_service.can_edit(public_document) is True
    assert alice_service.can_edit(private_document) is True
    assert bob_service.can_edit(public_document) is True
    assert bob_service.can_edit(private_document) is False
    assert anonymous_service.can_edit(public_document) is False
    assert anonymous_service.can_edit(private_document) is False


@pytest.mark.asyncio
async def test_update_document_partial(
    alice_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead
):
    """Test that only the fields present in the update change."""
    result = await alice_service.update_document(public_document.id, DocumentUpdate(is_favorite=True), db_session)

    assert result.is_favorite is True
    assert result.title == public_document.title
    assert result.blocks == public_document.blocks
    assert sorted(result.tags) == sorted(public_document.tags)
    assert result.last_edited_at.replace(tzinfo=None) >= public_document.last_edited_at.replace(tzinfo=None)


@pytest.mark.asyncio
async def test_empty_update_only_refreshes_last_edited_at(
    alice_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead
):
    """Test that an update with no fields set still advances last_edited_at."""
    await asyncio.sleep(0.01)

    result = await alice_service.update_document(public_document.id, DocumentUpdate(), db_session)

    assert result.last_edited_at.replace(tzinfo=None) > public_document.last_edited_at.replace(tzinfo=None)
    assert result.created_at == public_document.created_at
    excluded = {"last_edited_at", "created_at", "tags"}
    assert result.model_dump(exclude=excluded) == public_document.model_dump(exclude=excluded)
    assert sorted(result.tags) == sorted(public_document.tags)
    assert await _count(db_session, Block, public_document.id) == 3
    assert await _count(db_session, Tag, public_document.id) == 2


@pytest.mark.asyncio
async def test_update_document_replaces_blocks_and_tags(
    alice_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead
):
    kept = public_document.blocks[1]
    update = DocumentUpdate(blocks=[TextBlock(content="New first"), kept], tags=["travel", "summer"])

    result = await alice_service.update_document(public_document.id, update, db_session)

    assert [block.content for block in result.blocks] == ["New first", "Passport"]
    assert result.blocks[1].id == kept.id
    assert result.blocks[1].checked is True
    assert sorted(result.tags) == ["summer", "travel"]
    assert await _count(db_session, Block, public_document.id) == 2


@pytest.mark.asyncio
async def test_update_document_empty_lists_clear_children(
    alice_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead
):
    result = await alice_service.update_document(public_document.id, DocumentUpdate(blocks=[], tags=[]), db_session)

    assert result.blocks == []
    assert result.tags == []
    assert await _count(db_session, Block, public_document.id) == 0
    assert await _count(db_session, Tag, public_document.id) == 0


@pytest.mark.asyncio
async def test_update_document_by_other_user(
    bob_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead, private_document: DocumentRead
):
    """Test that bob may edit alice's public document but not her private one."""
    result = await bob_service.update_document(public_document.id, DocumentUpdate(title="Bob was here"), db_session)
    assert result.title == "Bob was here"
    assert result.created_by == public_document.created_by

    with pytest.raises(PermissionDeniedError):
        await bob_service.update_document(private_document.id, DocumentUpdate(title="Hijacked"), db_session)


@pytest.mark.asyncio
async def test_update_document_not_found(alice_service: DocumentService, db_session: AsyncSession):
    assert await alice_service.update_document("missing", DocumentUpdate(title="x"), db_session) is None


@pytest.mark.asyncio
async def test_delete_document_cascades(
    alice_service: DocumentService, db_session: AsyncSession, public_document: DocumentRead
):
    """Test that deleting a document removes its blocks and tags."""
    assert await alice_service.delete_document(public_document.id, db_session) is True

    assert await alice_service.get_document(public_document.id, db_session) is None
    assert await _count(db_session, Block, public_document.id) == 0
    assert await _count(db_session, Tag, public_document.id) == 0
    assert alice_service.documents == []


@pytest.mark.asyncio
async def test_delete_document_permissions(
    bob_service: DocumentService,
    anonymous_service: DocumentService,
    db_session: AsyncSession,
    private_document: DocumentRead,
):
    with pytest.raises(PermissionDeniedError):
        await bob_service.delete_document(private_document.id, db_session)
    with pytest.raises(PermissionDeniedError):
        await anonymous_service.delete_document(private_document.id, db_session)


@pytest.mark.asyncio
async def test_delete_document_not_found(alice_service: DocumentService, db_session: AsyncSession):
    assert await alice_service.delete_document("missing", db_session) is False
