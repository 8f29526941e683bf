# remove_duplicates.py
"""
Deletes input files whose content was already seen earlier in the same input.
The first path seen with a given content is the original and is always kept.
"""

import sys
from collections import Counter

from tqdm import tqdm

from tidymedia.decisions import DecisionEngine
from tidymedia.executor import ActionExecutor
from tidymedia.ingest.path_reader import read_paths
from tidymedia.organize import print_summary
from tidymedia.records import ActionRecord


def remove_duplicate_files(paths, engine: DecisionEngine, executor: ActionExecutor, out=sys.stdout) -> Counter:
    totals = Counter()
    for path in paths:
        action = engine.decide_dedup(path)
        committed = executor.execute(action)
        record = ActionRecord(
            "dedup",
            path,
            orig=action.orig,
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


def main(stream, engine: DecisionEngine, executor: ActionExecutor, progress=True, out=sys.stdout) -> Counter:
    tqdm.write("[START] Looking for duplicates", file=sys.stderr)
    totals = remove_duplicate_files(read_paths(stream, progress, desc="Deduplicating"), engine, executor, out)
    print_summary(totals, executor.commit)
    return totals
