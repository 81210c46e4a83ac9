from datetime import datetime

import pytest

from prepcards.infrastructure.adapters.progress_file import JsonProgressRepository


@pytest.fixture
def now():
    """A fixed mid-afternoon clock reading."""
    return datetime(2024, 3, 15, 14, 30)


@pytest.fixture
def deck_file(tmp_path):
    """A deck of three system-design cards."""
    path = tmp_path / "deck.yaml"
    path.write_text(
        "deck: System Design\n"
        "cards:\n"
        "  - id: cap-theorem\n"
        "    front: What does CAP stand for?\n"
        "  - id: consistent-hashing\n"
        "  - id: sharding\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def progress_repo(tmp_path):
    return JsonProgressRepository(tmp_path / "progress.json")


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config and progress
    monkeypatch.setenv("HOME", str(home))
    for var in ("PREPCARDS_PROGRESS_FILE", "PREPCARDS_VERBOSE"):
        monkeypatch.delenv(var, raising=False)
    return home
