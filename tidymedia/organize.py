# organize.py
"""
Moves each input file into <target_dir>/<date subdirectory>/<name>.
A file is only moved onto an existing one when both have the same content;
otherwise it gets a numbered name next to it.
"""

import sys
from collections import Counter

from tqdm import tqdm

from tidymedia.decisions import DecisionEngine
from tidymedia.executor import ActionExecutor
from tidymedia.ingest.path_reader import read_paths
from tidymedia.records import ActionRecord


def organize_files(paths, engine: DecisionEngine, executor: ActionExecutor, out=sys.stdout) -> Counter:
    totals = Counter()
    for path in paths:
        action = engine.decide_move(path)
        committed = executor.execute(action)
        record = ActionRecord(
            "file",
            path,
            target=action.target,
            action=action.kind,
            comment=action.comment,
            committed=committed,
        )
        tqdm.write(record.format(), file=out)
        totals[action.kind] += 1
        if committed:
            totals["committed"] += 1
        elif executor.commit and action.actionable:
            totals["failed"] += 1
    return totals


def print_summary(totals: Counter, commit: bool) -> None:
    tqdm.write("\n[FINISHED]" + ("" if commit else " (dry run, nothing was changed)"), file=sys.stderr)
    for kind, count in sorted(totals.items()):
        tqdm.write(f"Total {kind + ':':<18} {count}", file=sys.stderr)


def main(stream, engine: DecisionEngine, executor: ActionExecutor, progress=True, out=sys.stdout) -> Counter:
    tqdm.write(f"[START] Organizing into: {engine.resolver.target_dir}", file=sys.stderr)
    totals = organize_files(read_paths(stream, progress, desc="Organizing"), engine, executor, out)
    print_summary(totals, executor.commit)
    return totals
