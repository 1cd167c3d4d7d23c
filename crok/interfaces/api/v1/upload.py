"""Image upload endpoint."""

from fastapi import APIRouter, UploadFile

from ....modules.common.schemas import DataUriResponse
from ....modules.common.utils.data_uri import encode_data_uri, guess_media_type

router = APIRouter(prefix="/upload", tags=["Uploads"])


@router.post(
    "/image",
    summary="Encode Image",
    description="""
    Reads an uploaded file and returns it as an inline `data:` URI, ready to
    be stored as a document's `cover_image` or an image block's `url`.
    Nothing is stored server-side.
    """,
)
async def upload_image(file: UploadFile) -> DataUriResponse:
    data = await file.read()
    media_type = file.content_type or guess_media_type(file.filename or "")
    return DataUriResponse(url=encode_data_uri(data, media_type))
