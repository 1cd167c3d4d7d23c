"""CRUD operations for block rows using FastCRUD."""

from fastcrud import FastCRUD

from .models import Block

block_crud: FastCRUD = FastCRUD(Block)
