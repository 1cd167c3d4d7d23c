"""Document API endpoints."""

from typing import Annotated, List, Literal, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....modules.common.utils.error_handler import handle_exception
from ....modules.document.schemas import (
    DocumentCreate,
    DocumentPermissions,
    DocumentRead,
    DocumentUpdate,
)
from ....modules.document.services import DocumentService
from ..dependencies import DbSession, get_document_service, require_signed_in

router = APIRouter(prefix="/document", tags=["Documents"])

DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]


def _raise_mapped(e: Exception) -> NoReturn:
    http_exc = handle_exception(e)
    if http_exc:
        raise http_exc from e
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error") from e


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    summary="Create New Document",
    description="""
    Creates a document owned by the caller (identified by its bearer token).

    - **title**: empty or blank titles are saved as "Untitled"
    - **blocks**: ordered blocks; `order` is reassigned from list position
    - **tags**: trimmed, empty and duplicate tags dropped
    - **is_public**: public documents are editable by any signed-in user
    """,
    responses={
        201: {"description": "Document created successfully"},
        401: {"description": "No signed-in user"},
        422: {"description": "Invalid document data"},
    },
    response_description="The created document with its blocks and tags",
)
async def create_document(
    document_data: DocumentCreate,
    document_service: DocumentServiceDep,
    db: DbSession,
) -> DocumentRead:
    """Create a new document."""
    try:
        return await document_service.create_document(document_data, db)
    except Exception as e:
        _raise_mapped(e)


@router.get(
    "/",
    summary="List Documents",
    description="""
    Lists documents, most recently edited first, each with its blocks and tags.

    - **scope**: `all` (default), `public`, or `mine` (documents created by the caller)
    """,
    responses={200: {"description": "List of documents"}},
)
async def get_documents(
    document_service: DocumentServiceDep,
    db: DbSession,
    scope: Annotated[Literal["all", "public", "mine"], Query(description="Which documents to list")] = "all",
) -> List[DocumentRead]:
    """Get documents, optionally narrowed to public ones or the caller's own."""
    try:
        documents = await document_service.load_all(db)
    except Exception as e:
        _raise_mapped(e)

    if scope == "public":
        return document_service.public_documents()
    if scope == "mine":
        return document_service.user_documents()
    return documents


@router.get(
    "/{document_id}",
    summary="Get Document Details",
    responses={
        200: {"description": "The document with its blocks and tags"},
        404: {"description": "Document not found"},
    },
)
async def get_document(
    document_id: str,
    document_service: DocumentServiceDep,
    db: DbSession,
) -> DocumentRead:
    """Get a specific document by ID."""
    result = await document_service.get_document(document_id, db)
    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return result


@router.get(
    "/{document_id}/permissions",
    summary="Check Edit Permission",
    description="Whether the caller may edit (and delete) the document.",
    responses={404: {"description": "Document not found"}},
)
async def get_document_permissions(
    document_id: str,
    document_service: DocumentServiceDep,
    db: DbSession,
) -> DocumentPermissions:
    result = await document_service.get_document(document_id, db)
    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return DocumentPermissions(can_edit=document_service.can_edit(result))


@router.put(
    "/{document_id}",
    dependencies=[Depends(require_signed_in)],
    response_model=DocumentRead,
    summary="Update Document",
    description="""Partially update a document.

    Only fields present in the body are changed. `blocks` and `tags`, when
    present, replace the stored ones entirely; an empty list clears them.
    The document's `last_edited_at` is refreshed on every call.
    """,
    responses={
        200: {"description": "Document updated successfully"},
        401: {"description": "No signed-in user"},
        403: {"description": "Caller may not edit this document"},
        404: {"description": "Document not found"},
        422: {"description": "Invalid update data"},
    },
)
async def update_document(
    document_id: str,
    update_data: DocumentUpdate,
    document_service: DocumentServiceDep,
    db: DbSession,
) -> DocumentRead:
    """Update a document."""
    try:
        result = await document_service.update_document(document_id, update_data, db)
    except Exception as e:
        _raise_mapped(e)
    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return result


@router.delete(
    "/{document_id}",
    dependencies=[Depends(require_signed_in)],
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Document",
    description="Permanently delete a document together with its blocks and tags.",
    responses={
        204: {"description": "Document deleted successfully"},
        401: {"description": "No signed-in user"},
        403: {"description": "Caller may not delete this document"},
        404: {"description": "Document not found"},
    },
)
async def delete_document(
    document_id: str,
    document_service: DocumentServiceDep,
    db: DbSession,
) -> None:
    """Delete a document and all its blocks and tags."""
    try:
        success = await document_service.delete_document(document_id, db)
    except Exception as e:
        _raise_mapped(e)
    if not success:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
