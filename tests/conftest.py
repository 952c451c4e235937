import logging

import pytest

from path_store import MemoryPathStore, Scope


USER_PATH = r"C:\A;C:\B"
SYSTEM_PATH = r"C:\Windows\system32;C:\Windows"


@pytest.fixture
def store() -> MemoryPathStore:
    return MemoryPathStore({Scope.USER: USER_PATH, Scope.SYSTEM: SYSTEM_PATH})


@pytest.fixture(autouse=True)
def isolated_logger():
    """Drop any handlers main() attaches to the shared 'cpath' logger."""
    logger = logging.getLogger("cpath")
    before = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in before:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
