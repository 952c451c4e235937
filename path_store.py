"""
Path Store
- Reads and writes the persisted Path value for the user or system scope
- RegistryPathStore talks to the Windows registry through winreg
- MemoryPathStore keeps values in a dict (tests, dry runs)

Registry locations:
  user   -> HKEY_CURRENT_USER\\Environment
  system -> HKEY_LOCAL_MACHINE\\SYSTEM\\CurrentControlSet\\Control\\Session Manager\\Environment

The value name is "Path" in both; writes always use REG_EXPAND_SZ so that
%VAR% references keep expanding.
"""

import logging
import sys
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

from path_errors import ConfigurationError, StoreAccessError, StoreConflictError

if sys.platform == "win32":
    import ctypes
    import winreg
else:
    ctypes = None
    winreg = None


logger = logging.getLogger("cpath")

PATH_VALUE_NAME = "Path"
SEPARATOR = ";"

# SendMessageTimeoutW arguments for the environment change broadcast
HWND_BROADCAST = 0xFFFF
WM_SETTINGCHANGE = 0x001A
SMTO_ABORTIFHUNG = 0x0002
BROADCAST_TIMEOUT_MS = 5000


class Scope(Enum):
    USER = ("user", "HKEY_CURRENT_USER", r"Environment")
    SYSTEM = (
        "system",
        "HKEY_LOCAL_MACHINE",
        r"SYSTEM\CurrentControlSet\Control\Session Manager\Environment",
    )

    def __init__(self, label: str, root: str, subkey: str) -> None:
        self.label = label
        self.root = root
        self.subkey = subkey

    def __str__(self) -> str:
        return self.label

    @property
    def location(self) -> str:
        return f"{self.root}\\{self.subkey}"

    @classmethod
    def from_context(cls, context: str) -> "Scope":
        key = context.strip().lower()
        for scope in cls:
            if scope.label == key:
                return scope
        raise ConfigurationError(f"'{context}' is not a single scope; use 'user' or 'system'.")


# ---- Serialization -----------------------------------------------------------

def parse_path(raw: Optional[str]) -> List[str]:
    """Split a stored Path value into segments, dropping empty ones."""
    if not raw:
        return []
    return [part for part in raw.split(SEPARATOR) if part]


def serialize_path(entries: Iterable[str]) -> str:
    return SEPARATOR.join(entries)


# ---- Store interface ---------------------------------------------------------

class PathStore:
    """
    Load/save access to the persisted Path value, per scope.

    Subclasses implement read_raw() and save(); load() adds parsing. save()
    serializes and applies the optional compare-and-swap check.
    """

    def read_raw(self, scope: Scope) -> Optional[str]:
        raise NotImplementedError

    def load(self, scope: Scope) -> List[str]:
        """Return the entries for *scope*. A missing location or value means no entries."""
        return parse_path(self.read_raw(scope))

    def save(self, scope: Scope, entries: List[str], expected: Optional[List[str]] = None) -> None:
        """
        Write *entries* back to *scope* in one call.

        When *expected* is given the current stored entries must still equal it,
        otherwise StoreConflictError is raised and nothing is written.
        """
        raise NotImplementedError


class MemoryPathStore(PathStore):
    """In-memory store keyed by Scope. A value of None means the value is absent."""

    def __init__(self, values: Optional[Dict[Scope, Optional[str]]] = None,
                 locked: Iterable[Scope] = ()) -> None:
        self.values: Dict[Scope, Optional[str]] = {scope: None for scope in Scope}
        if values:
            self.values.update(values)
        self.locked: Set[Scope] = set(locked)
        self.writes: List[Tuple[Scope, str]] = []

    def read_raw(self, scope: Scope) -> Optional[str]:
        return self.values.get(scope)

    def save(self, scope: Scope, entries: List[str], expected: Optional[List[str]] = None) -> None:
        if scope in self.locked:
            raise StoreAccessError(scope.label)
        if expected is not None and self.load(scope) != list(expected):
            raise StoreConflictError(scope.label)
        value = serialize_path(entries)
        self.values[scope] = value
        self.writes.append((scope, value))


# ---- Windows registry --------------------------------------------------------

def _query_path(handle, scope: Scope) -> Optional[str]:
    try:
        value, _ = winreg.QueryValueEx(handle, PATH_VALUE_NAME)
    except FileNotFoundError:
        return None
    except OSError as ex:
        raise StoreAccessError(scope.label, f"unable to read {scope} storage: {ex}") from ex
    return str(value)


def broadcast_environment_change() -> bool:
    """Tell running programs (Explorer in particular) that the environment changed."""
    if ctypes is None:
        return False
    result = ctypes.c_ulong()
    ok = ctypes.windll.user32.SendMessageTimeoutW(
        HWND_BROADCAST, WM_SETTINGCHANGE, 0, "Environment",
        SMTO_ABORTIFHUNG, BROADCAST_TIMEOUT_MS, ctypes.byref(result),
    )
    if not ok:
        logger.warning("WM_SETTINGCHANGE broadcast failed; new shells may need a logoff to see the change")
        return False
    return True


class RegistryPathStore(PathStore):
    def __init__(self, broadcast: bool = True) -> None:
        if winreg is None:
            raise StoreAccessError(None, "the Windows registry is not available on this platform")
        self.broadcast = broadcast

    def _open(self, scope: Scope, writable: bool):
        access = winreg.KEY_READ
        if writable:
            access |= winreg.KEY_WRITE
        return winreg.OpenKey(getattr(winreg, scope.root), scope.subkey, 0, access)

    def read_raw(self, scope: Scope) -> Optional[str]:
        try:
            handle = self._open(scope, writable=False)
        except FileNotFoundError:
            logger.debug("%s does not exist; treating %s path as empty", scope.location, scope)
            return None
        except OSError as ex:
            raise StoreAccessError(scope.label) from ex
        with handle:
            return _query_path(handle, scope)

    def save(self, scope: Scope, entries: List[str], expected: Optional[List[str]] = None) -> None:
        value = serialize_path(entries)
        try:
            handle = self._open(scope, writable=True)
        except OSError as ex:
            raise StoreAccessError(scope.label) from ex

        with handle:
            if expected is not None and parse_path(_query_path(handle, scope)) != list(expected):
                raise StoreConflictError(scope.label)
            try:
                winreg.SetValueEx(handle, PATH_VALUE_NAME, 0, winreg.REG_EXPAND_SZ, value)
            except OSError as ex:
                raise StoreAccessError(scope.label, f"unable to write {scope} storage: {ex}") from ex

        logger.debug("Wrote %s\\%s = %s", scope.location, PATH_VALUE_NAME, value)
        if self.broadcast:
            broadcast_environment_change()
