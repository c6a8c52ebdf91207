import os
import shutil
from pathlib import Path

import pytest

TEST_SAVES_DIR = Path("saves-tests")

# dungeon_master.app builds a default app at import time; keep its saves out of ./saves
os.environ["SAVES_DIR"] = str(TEST_SAVES_DIR)


@pytest.fixture(autouse=True)
def clean_test_saves():
    """Wipe saves-tests/ before every test."""
    if TEST_SAVES_DIR.exists():
        shutil.rmtree(TEST_SAVES_DIR)
    TEST_SAVES_DIR.mkdir(parents=True)
    yield
    # leave saves-tests around after tests for inspection; CI can ignore it
