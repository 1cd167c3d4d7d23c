"""Document repository service."""

from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence, cast

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database.models import utcnow
from ...infrastructure.logging import get_logger
from ..block.crud import block_crud
from ..block.models import Block
from ..block.schemas import AnyBlock
from ..common.exceptions import AuthenticationError, PermissionDeniedError, ValidationError
from ..tag.crud import tag_crud
from ..tag.models import Tag
from ..user.session import SessionContext
from .crud import document_crud
from .mapper import block_rows, document_from_rows, document_patch, document_row, replaces_blocks, replaces_tags, tag_rows
from .schemas import DocumentCreate, DocumentRead, DocumentUpdate

logger = get_logger(__name__)


class DocumentService:
    """Loads, creates, updates and deletes documents for the session's user.

    Keeps the most recently loaded document set in ``documents``, newest
    edit first. Every successful write reloads that set, so it always
    reflects the last completed operation.

    A document and its block and tag rows are written in one transaction:
    if any insert fails, nothing is stored.

    Access rule (``can_edit``): a signed-in user may edit a document when
    it is public or when they created it.
    """

    def __init__(self, session: SessionContext):
        self.session = session
        self.documents: List[DocumentRead] = []

    def can_edit(self, document: DocumentRead) -> bool:
        user_id = self.session.current_user_id
        if user_id is None:
            return False
        return document.is_public or document.created_by == user_id

    def public_documents(self) -> List[DocumentRead]:
        return [document for document in self.documents if document.is_public]

    def user_documents(self) -> List[DocumentRead]:
        """Documents created by the current user; empty when signed out."""
        user_id = self.session.current_user_id
        if user_id is None:
            return []
        return [document for document in self.documents if document.created_by == user_id]

    async def load_all(self, db: AsyncSession) -> List[DocumentRead]:
        """Fetch every document with its blocks and tags.

        Not scoped to the current user. On failure the error is logged and
        re-raised, and the previously loaded set is kept.
        """
        try:
            documents = await self._fetch(db)
        except Exception:
            logger.exception("Failed to load documents")
            raise

        self.documents = documents
        logger.debug(f"Loaded {len(documents)} documents")
        return documents

    async def get_document(self, document_id: str, db: AsyncSession) -> Optional[DocumentRead]:
        documents = await self._fetch(db, document_id=document_id)
        return documents[0] if documents else None

    async def create_document(self, document_data: DocumentCreate, db: AsyncSession) -> DocumentRead:
        """Create a document owned by the current user.

        Raises:
            AuthenticationError: If nobody is signed in.
            ValidationError: If the rows are rejected by the database, e.g. a block
                id already used by another document. Nothing is stored.
        """
        user_id = self.session.current_user_id
        if user_id is None:
            raise AuthenticationError("Sign in to create documents")

        async with _write_transaction(db, "create"):
            created = cast(
                Any, await document_crud.create(db=db, object=document_row(document_data, user_id), commit=False)
            )
            await db.flush()
            document_id = created.id
            await self._insert_blocks(db, document_id, document_data.blocks)
            await self._insert_tags(db, document_id, document_data.tags)

        logger.info("Created document", extra={"document_id": document_id, "user_id": user_id})
        return await self._reload_and_find(document_id, db)

    async def update_document(
        self,
        document_id: str,
        update_data: DocumentUpdate,
        db: AsyncSession,
    ) -> Optional[DocumentRead]:
        """Apply a partial update.

        Only fields set on ``update_data`` are written; ``last_edited_at`` is
        always refreshed. Present ``blocks``/``tags`` replace the stored rows.

        Returns:
            The updated document, or None if it does not exist.

        Raises:
            PermissionDeniedError: If the current user may not edit it.
        """
        existing = await self.get_document(document_id, db)
        if existing is None:
            return None
        if not self.can_edit(existing):
            raise PermissionDeniedError("You do not have permission to edit this document")

        async with _write_transaction(db, "update"):
            await document_crud.update(
                db=db, object=document_patch(update_data, utcnow()), id=document_id, commit=False
            )
            if replaces_blocks(update_data):
                await db.execute(delete(Block).where(Block.document_id == document_id))
                await self._insert_blocks(db, document_id, update_data.blocks or [])
            if replaces_tags(update_data):
                await db.execute(delete(Tag).where(Tag.document_id == document_id))
                await self._insert_tags(db, document_id, update_data.tags or [])

        logger.info("Updated document", extra={"document_id": document_id})
        return await self._reload_and_find(document_id, db)

    async def delete_document(self, document_id: str, db: AsyncSession) -> bool:
        """Delete a document; its blocks and tags go with it.

        Returns:
            False if the document does not exist, True once deleted.

        Raises:
            PermissionDeniedError: If the current user may not edit it.
        """
        existing = await self.get_document(document_id, db)
        if existing is None:
            return False
        if not self.can_edit(existing):
            raise PermissionDeniedError("You do not have permission to delete this document")

        await document_crud.delete(db=db, id=document_id)

        logger.info("Deleted document", extra={"document_id": document_id})
        await self.load_all(db)
        return True

    async def _fetch(self, db: AsyncSession, document_id: Optional[str] = None) -> List[DocumentRead]:
        document_filter = {} if document_id is None else {"id": document_id}
        child_filter = {} if document_id is None else {"document_id": document_id}

        document_stmt = await document_crud.select(sort_columns="last_edited_at", sort_orders="desc", **document_filter)
        document_records = (await db.execute(document_stmt)).mappings().all()
        if not document_records:
            return []

        block_stmt = await block_crud.select(sort_columns="block_order", sort_orders="asc", **child_filter)
        tag_stmt = await tag_crud.select(**child_filter)

        blocks_by_document = _group_by_document((await db.execute(block_stmt)).mappings().all())
        tags_by_document = _group_by_document((await db.execute(tag_stmt)).mappings().all())

        return [
            document_from_rows(record, blocks_by_document[record["id"]], tags_by_document[record["id"]])
            for record in document_records
        ]

    async def _reload_and_find(self, document_id: str, db: AsyncSession) -> DocumentRead:
        documents = await self.load_all(db)
        return next(document for document in documents if document.id == document_id)

    async def _insert_blocks(self, db: AsyncSession, document_id: str, blocks: Sequence[AnyBlock]) -> None:
        if blocks:
            await db.execute(insert(Block), block_rows(document_id, blocks))

    async def _insert_tags(self, db: AsyncSession, document_id: str, tags: Sequence[str]) -> None:
        if tags:
            await db.execute(insert(Tag), tag_rows(document_id, tags))


def _group_by_document(records: Sequence[Mapping[str, Any]]) -> Dict[str, List[Mapping[str, Any]]]:
    grouped: Dict[str, List[Mapping[str, Any]]] = defaultdict(list)
    for record in records:
        grouped[record["document_id"]].append(record)
    return grouped


@asynccontextmanager
async def _write_transaction(db: AsyncSession, operation: str) -> AsyncIterator[None]:
    """Commit the writes made inside the block, or roll all of them back."""
    try:
        yield
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.error(f"Document {operation} rejected by the database: {e.orig}")
        raise ValidationError(f"Document {operation} conflicts with stored data: {e.orig}") from e
    except Exception:
        await db.rollback()
        logger.exception(f"Document {operation} failed, rolled back")
        raise
