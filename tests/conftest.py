import pytest

from settings import INSTANT
from sound import RecordingSound


@pytest.fixture
def sound():
    return RecordingSound()


@pytest.fixture
def quick(sound):
    """Constructor kwargs for an engine that never waits."""
    return {"pacing": INSTANT, "sound": sound}
