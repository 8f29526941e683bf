"""
Moves files back according to previously emitted file records.

Reads the stdout of an earlier --move run. No hashing and no registry: the
records alone say where each file came from.
"""

import os
import shutil
import sys
from collections import Counter

from tqdm import tqdm

from tidymedia.decisions import DUPLICATE_MOVE, MOVE_KINDS
from tidymedia.records import ActionRecord, MalformedRecord, parse_record
from tidymedia.utils.file_utils import Mover


def undo_record(record: ActionRecord, mover: Mover, commit: bool) -> ActionRecord:
    # the undo moves target -> source; records without a target keep their own path
    result = ActionRecord("undo", record.target or record.source, record.source, action="skip")

    if record.event != "file" or not record.target:
        result.comment = "nothing to undo"
        return result
    if record.action and record.action not in MOVE_KINDS:
        result.comment = f"{record.action} record, nothing to undo"
        return result
    if record.committed is False:
        result.comment = "action was never committed"
        return result
    if not os.path.isfile(record.target):
        result.comment = "moved file is missing"
        return result
    if os.path.lexists(record.source):
        result.comment = "original path is occupied, won't overwrite"
        return result

    # a duplicate-move landed on a file that was already there, keep it
    restore = mover.copy if record.action == DUPLICATE_MOVE else mover.move
    result.action = "restore-copy" if record.action == DUPLICATE_MOVE else "restore"
    result.comment = "restore file"
    result.committed = False
    if commit:
        try:
            mover.make_dirs(os.path.dirname(record.source))
            restore(record.target, record.source)
            result.committed = True
        except (OSError, shutil.Error) as e:
            tqdm.write(f"[ERROR] Could not restore {record.source}: {e}", file=sys.stderr)
            result.comment = f"restore failed: {e}"
    return result


def undo_records(lines, mover: Mover, commit: bool = False, out=sys.stdout) -> Counter:
    """
    Replays records from `lines` newest first, so a file that several records
    routed to the same target is restored for each of them. Writes one undo
    record per valid input record.
    """
    totals = Counter()
    records = []
    for line in lines:
        if not line.strip():
            continue
        try:
            record = parse_record(line)
        except MalformedRecord as e:
            tqdm.write(f"[WARN] Skipping malformed record: {e}", file=sys.stderr)
            totals["malformed"] += 1
            continue
        records.append(record)

    for record in reversed(records):
        result = undo_record(record, mover, commit)
        tqdm.write(result.format(), file=out)
        totals[result.action] += 1
        if result.committed:
            totals["committed"] += 1
    return totals
