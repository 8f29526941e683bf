import os
from datetime import datetime
from pathlib import Path

from tidymedia.utils.file_utils import Hasher, Mover


class CountingHasher:
    """Real sha1 hashing that records every path it was asked to hash."""

    def __init__(self):
        self.calls = []
        self._hasher = Hasher("sha1")

    def __call__(self, path):
        self.calls.append(str(path))
        return self._hasher(path)


class FakeHasher:
    """Digests come from a dict; unknown paths fail like an unreadable file."""

    def __init__(self, digests):
        self.digests = dict(digests)
        self.calls = []

    def __call__(self, path):
        self.calls.append(path)
        if path not in self.digests:
            raise FileNotFoundError(path)
        return self.digests[path]


class FailingMover(Mover):
    def make_dirs(self, path):
        pass

    def move(self, src, dst):
        raise PermissionError(f"permission denied: {dst}")

    def delete(self, path):
        raise PermissionError(f"permission denied: {path}")


def write_file(path: Path, content: str, day=None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if day is not None:
        ts = datetime(day.year, day.month, day.day, 12, 0, 0).timestamp()
        os.utime(path, (ts, ts))
    return path


def snapshot(root: Path) -> dict:
    """Relative path -> bytes for every file under root."""
    return {str(p.relative_to(root)): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()}
