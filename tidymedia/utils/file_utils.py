# file_utils.py

import hashlib
import os
import shutil
from pathlib import Path


class Hasher:
    """
    Computes a digest over the whole content of a file.
    Any read error surfaces as OSError.
    """

    def __init__(self, algorithm: str = "sha1", chunk_size: int = 1024 * 1024):
        hashlib.new(algorithm)  # ValueError on unknown algorithm
        self.algorithm = algorithm
        self.chunk_size = chunk_size

    def __call__(self, file_path: str | Path) -> str:
        h = hashlib.new(self.algorithm)
        with Path(file_path).open("rb") as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                h.update(chunk)
        return h.hexdigest()


class Mover:
    """Filesystem primitives used by the executor and the undo replayer."""

    def move(self, src: str, dst: str) -> None:
        # shutil.move falls back to copy + unlink across filesystems
        shutil.move(src, dst)

    def copy(self, src: str, dst: str) -> None:
        shutil.copy2(src, dst)

    def delete(self, path: str) -> None:
        os.remove(path)

    def make_dirs(self, path: str) -> None:
        if path:
            os.makedirs(path, exist_ok=True)


def same_path(a: str, b: str) -> bool:
    return os.path.abspath(a) == os.path.abspath(b)


def same_file(a: str, b: str) -> bool:
    """True when both paths reach the same file, through links or not."""
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def numbered_name(path: str, n: int) -> str:
    """
    photo.jpg -> photo-2.jpg for n=2. The suffix goes before the extension.
    """
    base, ext = os.path.splitext(path)
    return f"{base}-{n}{ext}"
