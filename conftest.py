import pytest

from backend import game, storage


@pytest.fixture(autouse=True)
def clean_test_data(tmp_path):
    """Re-init storage in a fresh temp dir and reset service state before every test."""
    storage.init_storage(tmp_path / "data")
    game.set_llm(None)
    game._pending.clear()
    yield
    game.set_llm(None)
    game._pending.clear()
