import os
import sys

import pytest

# Get the repo root directory
repo_root = os.path.dirname(os.path.abspath(__file__))

# Add src directory to Python path if not already there
src_path = os.path.join(repo_root, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)


@pytest.fixture
def recorded_sleeps(monkeypatch):
    """Replace the retry backoff sleep and record the requested delays."""
    from src.decoding import retry

    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(retry.asyncio, "sleep", fake_sleep)
    return delays
