import os
import shutil
import sys

from tqdm import tqdm

from tidymedia.decisions import DUPLICATE_DELETE, DUPLICATE_MOVE, MOVE_KINDS, Action
from tidymedia.registry import IdentityRegistry
from tidymedia.utils.file_utils import Mover


class ActionExecutor:
    """
    Applies decided actions to the filesystem. Without `commit` nothing is
    touched and execute() always returns False (dry run).
    """

    def __init__(self, registry: IdentityRegistry, mover: Mover, commit: bool = False):
        self.registry = registry
        self.mover = mover
        self.commit = commit

    def execute(self, action: Action) -> bool:
        if not self.commit or not action.actionable:
            return False
        try:
            if action.kind in MOVE_KINDS:
                self._move(action)
            elif action.kind == DUPLICATE_DELETE:
                self._delete(action)
        except (OSError, shutil.Error) as e:
            tqdm.write(f"[ERROR] {action.kind} failed for {action.source}: {e}", file=sys.stderr)
            return False
        return True

    def _move(self, action: Action) -> None:
        # source digest must be known before the file leaves its path
        entry = self.registry.access(action.source)
        if action.kind == DUPLICATE_MOVE:
            # the target already holds this content and stays untouched
            self.mover.delete(action.source)
            self.registry.rebind(entry, action.target)
            return
        self.mover.make_dirs(os.path.dirname(action.target))
        self.mover.move(action.source, action.target)
        self.registry.rebind(entry, action.target)

    def _delete(self, action: Action) -> None:
        entry = self.registry.access(action.source)
        self.mover.delete(action.source)
        self.registry.mark_deleted(entry)
