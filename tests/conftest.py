import pytest
from mutagen.id3 import ID3


@pytest.fixture
def make_mp3(tmp_path):
    """Create an MP3 stand-in that carries only an empty ID3 tag"""
    def _make(name="track.mp3", directory=None, tags=None):
        path = (directory or tmp_path) / name
        path.write_bytes(b"")
        (tags or ID3()).save(str(path))
        return path
    return _make
