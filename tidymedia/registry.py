"""
In-memory index of the paths seen during one run and their content digests.

Every live path maps to one PathEntry; every digest maps to the entries that
share it, in the order they were registered. Entries are never removed, only
marked deleted, so the first registered survivor of a group is always the
"original" that later duplicates are compared against.
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from tqdm import tqdm


@dataclass(eq=False)
class PathEntry:
    path: str
    digest: Optional[str] = None
    deleted: bool = False
    error: Optional[str] = None

    @property
    def has_digest(self) -> bool:
        return self.digest is not None


def path_key(path: str) -> str:
    return os.path.normpath(os.path.abspath(path))


@dataclass
class IdentityRegistry:
    hasher: Callable[[str], str]
    _entries: Dict[str, PathEntry] = field(default_factory=dict)
    _groups: Dict[str, List[PathEntry]] = field(default_factory=dict)

    def lookup(self, path: str) -> Optional[PathEntry]:
        """Live entry for `path`, or None. Deleted entries are never returned."""
        entry = self._entries.get(path_key(path))
        if entry is None or entry.deleted:
            return None
        return entry

    def access(self, path: str) -> PathEntry:
        """
        Returns the entry for `path`, hashing the file the first time the
        path is seen. A failed hash leaves the entry without digest and with
        `error` set; such entries are treated as unique content.
        """
        entry = self.lookup(path)
        if entry is not None:
            return entry

        entry = PathEntry(path)
        try:
            entry.digest = self.hasher(path)
        except OSError as e:
            entry.error = str(e)
            tqdm.write(f"[ERROR] Could not hash {path}: {e}", file=sys.stderr)
        self._register(entry)
        return entry

    def _register(self, entry: PathEntry) -> None:
        self._entries[path_key(entry.path)] = entry
        if entry.has_digest:
            self._groups.setdefault(entry.digest, []).append(entry)

    def members(self, digest: str) -> List[PathEntry]:
        return [e for e in self._groups.get(digest, []) if not e.deleted]

    def duplicate_count(self, entry: PathEntry) -> int:
        """Live entries sharing `entry`'s digest, `entry` included."""
        if not entry.has_digest:
            return 1
        return len(self.members(entry.digest))

    def first_known_path(self, digest: str) -> Optional[str]:
        live = self.members(digest)
        return live[0].path if live else None

    def mark_deleted(self, entry: PathEntry) -> None:
        entry.deleted = True

    def rebind(self, entry: PathEntry, new_path: str) -> PathEntry:
        """
        Records that `entry`'s file now lives at `new_path`. The digest moves
        with it and is not recomputed.
        """
        self.mark_deleted(entry)
        existing = self.lookup(new_path)
        if existing is not None:
            if existing.has_digest and existing.digest == entry.digest:
                return existing
            # the file at new_path was replaced
            self.mark_deleted(existing)

        moved = PathEntry(new_path, digest=entry.digest, error=entry.error)
        self._register(moved)
        return moved

    def __len__(self):
        return sum(1 for e in self._entries.values() if not e.deleted)
