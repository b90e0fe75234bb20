"""
Shared fixtures: temporary SQLite store and fake clock.
"""

import os

os.environ.setdefault("LOG_FILE", os.path.join(os.path.dirname(__file__), "..", "test_gas_tracker.log"))

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from gas_tracker.database.database import Database  # noqa: E402
from tests.helpers import FakeClock  # noqa: E402


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def db(tmp_path):
    database = Database(str(tmp_path / "kv.db"))
    await database.init_db()
    yield database
    await database.close()
