import pathlib

import pytest

from monoxity import MonoxityDB


@pytest.fixture
def project_root():
    """Return the project root path."""
    return pathlib.Path(__file__).resolve().parent.parent


@pytest.fixture
async def store(tmp_path):
    """A connected MonoxityDB in a temporary directory, closed afterwards."""
    db = MonoxityDB(directory=tmp_path)
    assert await db.connect() is True
    yield db
    await db.close()
