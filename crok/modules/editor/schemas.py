"""Editor modes."""

from enum import Enum


class EditorMode(str, Enum):
    VIEWING_LIST = "viewing_list"
    EDITING_EXISTING = "editing_existing"
    CREATING_NEW = "creating_new"
