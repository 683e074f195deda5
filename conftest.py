import shutil
from pathlib import Path

import pytest

from backend import registry, storage

TEST_DATA_DIR = Path("data-tests")
PRESETS_DIR = Path(__file__).parent / "presets"


@pytest.fixture(autouse=True)
def clean_test_data(monkeypatch):
    """Wipe and re-init data-tests/ and drop in-memory flows/hosts before every test."""
    for var in ("OPENAI_API_KEY", "LLM_PROVIDER_URL", "LLM_PROVIDER_FORMAT", "LLM_MODEL",
                "STRIPE_SECRET_KEY", "TRIVIA_API_URL", "TRIVIA_CSV_URL"):
        monkeypatch.delenv(var, raising=False)
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    storage.init_storage(TEST_DATA_DIR, presets_dir=PRESETS_DIR)
    registry.reset()
    yield
    # leave data-tests around after tests for inspection; CI can ignore it
