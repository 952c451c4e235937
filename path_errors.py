"""
Error kinds for cpath.

Every failure the tool reports is a CPathError subclass. The class carries an
ErrorKind, and the kind carries the process exit code, so the CLI decides how
to present a failure without inspecting the message.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    CONFIGURATION = (2, "invalid or conflicting options")
    DUPLICATE_ENTRY = (3, "entry already present in the path")
    NOT_FOUND = (4, "entry not found in the path")
    STORE_ACCESS = (5, "path storage could not be opened")
    STORE_CONFLICT = (6, "path storage changed during the update")

    def __init__(self, exit_code: int, summary: str) -> None:
        self.exit_code = exit_code
        self.summary = summary


class CPathError(Exception):
    kind: ErrorKind = ErrorKind.CONFIGURATION

    @property
    def exit_code(self) -> int:
        return self.kind.exit_code


class ConfigurationError(CPathError):
    """Invalid or conflicting command line options. Raised before any I/O."""

    kind = ErrorKind.CONFIGURATION


class DuplicateEntryError(CPathError):
    kind = ErrorKind.DUPLICATE_ENTRY

    def __init__(self, item: str) -> None:
        super().__init__(f"{item} already exists in the path")
        self.item = item


class NotFoundError(CPathError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, item: str) -> None:
        super().__init__(f"{item} was not found in the path")
        self.item = item


class StoreAccessError(CPathError):
    kind = ErrorKind.STORE_ACCESS

    def __init__(self, scope: Optional[str], message: Optional[str] = None) -> None:
        if message is None:
            message = f"unable to open {scope} storage"
        super().__init__(message)
        self.scope = scope


class StoreConflictError(StoreAccessError):
    """The stored value no longer matches what was loaded before the edit."""

    kind = ErrorKind.STORE_CONFLICT

    def __init__(self, scope: str) -> None:
        super().__init__(scope, f"{scope} path was changed by another process; nothing was written")
