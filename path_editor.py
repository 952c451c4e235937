"""
Path Editor
- Pure list operations over PATH segments (no I/O)
- Matching is case-insensitive and ignores surrounding whitespace
- Stored segments keep their original casing and spacing

Every function returns a new list; the input is never modified.
"""

from typing import List, Optional

from path_errors import DuplicateEntryError, NotFoundError


def normalize(segment: str) -> str:
    return segment.strip().lower()


def find_index(entries: List[str], item: str) -> Optional[int]:
    """Return the position of the first entry matching *item*, or None."""
    target = normalize(item)
    for i, entry in enumerate(entries):
        if normalize(entry) == target:
            return i
    return None


def contains(entries: List[str], item: str) -> bool:
    return find_index(entries, item) is not None


def _ensure_absent(entries: List[str], item: str) -> None:
    if contains(entries, item):
        raise DuplicateEntryError(item)


def append(entries: List[str], item: str) -> List[str]:
    _ensure_absent(entries, item)
    return list(entries) + [item]


def prepend(entries: List[str], item: str) -> List[str]:
    _ensure_absent(entries, item)
    return [item] + list(entries)


def delete(entries: List[str], item: str) -> List[str]:
    """
    Remove the first entry matching *item*.

    Later duplicates (possible when the stored value was edited by hand) are
    left alone.
    """
    idx = find_index(entries, item)
    if idx is None:
        raise NotFoundError(item)
    return list(entries[:idx]) + list(entries[idx + 1:])
