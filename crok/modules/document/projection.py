"""Save projection: the rules applied to a document when it is saved.

- an empty or whitespace-only title is saved as ``"Untitled"``;
- placeholder blocks (no content, and a type that needs content) are
  dropped, and the survivors renumbered;
- tags are trimmed, empty tags dropped and exact duplicates ignored.
"""

from typing import Iterable, List, Sequence

from ..block.mutations import reindex
from ..block.schemas import CONTENTLESS_BLOCK_TYPES, AnyBlock
from ..common.constants import DEFAULT_DOCUMENT_TITLE


def resolve_title(title: str | None) -> str:
    if title is None or not title.strip():
        return DEFAULT_DOCUMENT_TITLE
    return title


def is_persistable(block: AnyBlock) -> bool:
    return bool(block.content) or block.type in CONTENTLESS_BLOCK_TYPES


def persistable_blocks(blocks: Sequence[AnyBlock]) -> List[AnyBlock]:
    """Keep blocks with content, plus dividers, images and tables; renumber the rest."""
    return reindex([block for block in blocks if is_persistable(block)])


def add_tag(tags: Sequence[str], tag: str) -> List[str]:
    """Append ``tag`` after trimming, unless it is empty or already present."""
    tag = tag.strip()
    if not tag or tag in tags:
        return list(tags)
    return [*tags, tag]


def remove_tag(tags: Sequence[str], tag: str) -> List[str]:
    return [existing for existing in tags if existing != tag]


def normalize_tags(tags: Iterable[str]) -> List[str]:
    normalized: List[str] = []
    for tag in tags:
        normalized = add_tag(normalized, tag)
    return normalized
