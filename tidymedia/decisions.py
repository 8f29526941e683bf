"""
Classifies what should happen to each input path.

Only paths whose content has been proven identical (equal digests) to a file
that stays on disk are ever classified for deletion or for a move on top of
an existing file. Distinct content that lands on an occupied name gets a
numbered name instead (photo.jpg -> photo-2.jpg -> photo-3.jpg ...).
"""

import os
import re
from dataclasses import dataclass
from typing import Optional

from tidymedia.registry import IdentityRegistry
from tidymedia.resolver import TargetResolver
from tidymedia.utils.file_utils import numbered_name, same_file, same_path

NOT_FOUND = "not-found"
NO_OP = "no-op"
MOVE = "move"
DUPLICATE_MOVE = "duplicate-move"
MOVE_RENAMED = "move-renamed"
DUPLICATE_DELETE = "duplicate-delete"
DUPLICATE_KEPT = "duplicate-kept"
UNIQUE = "unique"
HASH_ERROR = "hash-error"

MOVE_KINDS = (MOVE, DUPLICATE_MOVE, MOVE_RENAMED)

COMMENTS = {
    NOT_FOUND: "file doesn't exist",
    NO_OP: "file already in place",
    MOVE: "move file",
    DUPLICATE_MOVE: "move file (proven duplicate)",
    MOVE_RENAMED: "move file (renamed, target holds different content)",
    DUPLICATE_DELETE: "file is a duplicate",
    DUPLICATE_KEPT: "file is a duplicate, kept",
    UNIQUE: "file is unique",
    HASH_ERROR: "could not hash file, kept",
}


@dataclass
class Action:
    source: str
    kind: str
    target: str = ""
    orig: str = ""
    comment: str = ""

    def __post_init__(self):
        if not self.comment:
            self.comment = COMMENTS[self.kind]

    @property
    def actionable(self) -> bool:
        return self.kind in MOVE_KINDS or self.kind == DUPLICATE_DELETE


class DecisionEngine:
    def __init__(self, registry: IdentityRegistry, resolver: Optional[TargetResolver] = None, dedup_filter=None):
        self.registry = registry
        self.resolver = resolver
        self.dedup_filter = re.compile(dedup_filter) if isinstance(dedup_filter, str) else dedup_filter

    def same_content(self, a: str, b: str) -> bool:
        ea = self.registry.access(a)
        eb = self.registry.access(b)
        return ea.has_digest and eb.has_digest and ea.digest == eb.digest

    def decide_move(self, source: str) -> Action:
        if not os.path.isfile(source):
            return Action(source, NOT_FOUND)

        target = self.resolver.resolve(source)
        if not target or same_path(target, source):
            return Action(source, NO_OP, target)
        if not os.path.lexists(target):
            return Action(source, MOVE, target)
        if same_file(source, target):
            # source is a link to its own target, or the other way round
            return Action(source, NO_OP, target)
        if self.same_content(source, target):
            return Action(source, DUPLICATE_MOVE, target)

        return self._rename(source, target)

    def _rename(self, source: str, target: str) -> Action:
        n = 2
        while True:
            candidate = numbered_name(target, n)
            if not os.path.lexists(candidate) and self.registry.lookup(candidate) is None:
                return Action(source, MOVE_RENAMED, candidate)
            if same_file(source, candidate):
                return Action(source, NO_OP, candidate)
            if os.path.isfile(candidate) and self.same_content(source, candidate):
                return Action(source, DUPLICATE_MOVE, candidate)
            n += 1

    def decide_dedup(self, source: str) -> Action:
        if not os.path.isfile(source):
            return Action(source, NOT_FOUND)

        entry = self.registry.access(source)
        if not entry.has_digest:
            return Action(source, HASH_ERROR)

        orig = self.registry.first_known_path(entry.digest)
        if self.registry.duplicate_count(entry) < 2 or same_path(orig, source):
            return Action(source, UNIQUE)
        if same_file(orig, source):
            # another name for the original, not a second copy
            return Action(source, UNIQUE)
        if self.dedup_filter is not None and not self.dedup_filter.search(source):
            return Action(source, DUPLICATE_KEPT, orig=orig, comment="file is a duplicate, excluded by filter")
        if not os.path.isfile(orig):
            return Action(source, DUPLICATE_KEPT, orig=orig, comment="original is gone, kept")
        return Action(source, DUPLICATE_DELETE, orig=orig)
