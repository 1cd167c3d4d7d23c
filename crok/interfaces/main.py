from ..infrastructure.app_factory import create_application
from ..infrastructure.config.settings import get_settings
from ..interfaces.api import router as api_router

settings = get_settings()

app = create_application(
    router=api_router,
    settings=settings,
    title="Crok Documents API",
    description="""
    # Crok Documents API

    Block-based documents with public and private sharing:

    * 🧱 **Blocks**: paragraphs, headings, lists, to-dos, quotes, code, dividers, images and tables
    * 🔐 **Accounts**: register or sign in for a bearer token and send it as `Authorization: Bearer <token>`
    * 🌍 **Sharing**: public documents are editable by anyone signed in, private ones only by their owner
    * 🏷️ **Tags and favourites** on every document

    Images are sent inline as data URIs; `/api/v1/upload/image` converts a file into one.
    """,
    version="0.1.0",
)
