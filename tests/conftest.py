import pytest

from helpers import CountingHasher


@pytest.fixture
def counting_hasher():
    return CountingHasher()


@pytest.fixture
def target_dir(tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    return out
