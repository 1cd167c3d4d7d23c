"""CRUD operations for tag rows using FastCRUD."""

from fastcrud import FastCRUD

from .models import Tag

tag_crud: FastCRUD = FastCRUD(Tag)
