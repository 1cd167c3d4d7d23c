"""Workspace: the signed-in user's view of all documents plus one open editor.

Ties the session, the user and document services and the editor
together, opening a database session per operation. Failures are logged
and re-raised; when a save fails the editor stays open with the draft
as it was.
"""

from pathlib import Path
from typing import Callable, List, Optional, Union

import anyio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...infrastructure.database.session import local_session
from ...infrastructure.logging import get_logger
from ..block.schemas import BlockType, ImageBlock
from ..common.exceptions import DocumentNotFoundError, EditorStateError
from ..common.utils.data_uri import file_to_data_uri
from ..document.schemas import DocumentCreate, DocumentDraft, DocumentRead
from ..document.services import DocumentService
from ..editor.schemas import EditorMode
from ..editor.services import DocumentEditor
from ..user.schemas import UserCredentials, UserRead
from ..user.services import UserService
from ..user.session import FileSessionStore, SessionContext

logger = get_logger(__name__)


class Workspace:
    def __init__(
        self,
        session: Optional[SessionContext] = None,
        session_factory: async_sessionmaker[AsyncSession] = local_session,
    ):
        self.session = session if session is not None else SessionContext(FileSessionStore())
        self.session_factory = session_factory
        self.users = UserService()
        self.repository = DocumentService(self.session)
        self.editor = DocumentEditor()

    @property
    def documents(self) -> List[DocumentRead]:
        return self.repository.documents

    async def start(self) -> Optional[UserRead]:
        """Restore the cached user and load all documents."""
        user = self.session.init_from_storage()
        await self.refresh()
        return user

    async def refresh(self) -> List[DocumentRead]:
        async with self.session_factory() as db:
            return await self.repository.load_all(db)

    async def register(self, username: str, password: str) -> UserRead:
        """Create an account and sign in as it."""
        async with self.session_factory() as db:
            user = await self.users.register(UserCredentials(username=username, password=password), db)
        self.session.set_user(user)
        return user

    async def login(self, username: str, password: str) -> UserRead:
        async with self.session_factory() as db:
            user = await self.users.login(UserCredentials(username=username, password=password), db)
        self.session.set_user(user)
        return user

    def logout(self) -> None:
        """Sign out. Any open document is closed without saving."""
        if self.editor.is_open:
            self.editor.close(confirm=lambda: True)
        self.session.clear()

    def new_document(self) -> DocumentDraft:
        return self.editor.new_document()

    async def open_document(self, document_id: str) -> DocumentDraft:
        """Open a document for editing, read-only when the user may not edit it."""
        document = next((doc for doc in self.documents if doc.id == document_id), None)
        if document is None:
            async with self.session_factory() as db:
                document = await self.repository.get_document(document_id, db)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return self.editor.open_document(document, editable=self.repository.can_edit(document))

    async def save(self) -> DocumentRead:
        """Save the open document and return to the list."""
        payload = self.editor.build_payload()
        async with self.session_factory() as db:
            if isinstance(payload, DocumentCreate):
                saved = await self.repository.create_document(payload, db)
            else:
                document_id = self.editor.document.id
                updated = await self.repository.update_document(document_id, payload, db)
                if updated is None:
                    raise DocumentNotFoundError(f"Document {document_id} no longer exists")
                saved = updated
        self.editor.complete_save(saved)
        return saved

    async def delete_open_document(self, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """Delete the open document and close the editor.

        Returns False, leaving everything as it was, when ``confirm`` is
        given and returns false.
        """
        if self.editor.mode != EditorMode.EDITING_EXISTING:
            raise EditorStateError("Only a saved document can be deleted")
        if confirm is not None and not confirm():
            return False

        document_id = self.editor.document.id
        async with self.session_factory() as db:
            deleted = await self.repository.delete_document(document_id, db)
        self.editor.close(confirm=lambda: True)
        return deleted

    def close_editor(self, confirm: Optional[Callable[[], bool]] = None) -> bool:
        return self.editor.close(confirm)

    async def attach_cover_image(self, path: Union[str, Path]) -> str:
        """Read an image file into the draft's cover as a data URI."""
        uri = await anyio.to_thread.run_sync(file_to_data_uri, path)
        self.editor.set_cover_image(uri)
        return uri

    async def attach_block_image(self, index: int, path: Union[str, Path]) -> str:
        """Read an image file into the block at ``index``, turning it into an image block if needed."""
        uri = await anyio.to_thread.run_sync(file_to_data_uri, path)
        draft = self.editor.draft
        if draft is None:
            raise EditorStateError("No document is open")
        if not 0 <= index < len(draft.blocks) or not isinstance(draft.blocks[index], ImageBlock):
            self.editor.change_type(index, BlockType.IMAGE.value)
        self.editor.update_properties(index, {"url": uri})
        return uri
