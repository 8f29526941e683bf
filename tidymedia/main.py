import argparse
import os
import re
import sys

from tqdm import tqdm

from tidymedia import organize, remove_duplicates
from tidymedia.decisions import DecisionEngine
from tidymedia.executor import ActionExecutor
from tidymedia.registry import IdentityRegistry
from tidymedia.resolver import DEFAULT_SUBDIR_TEMPLATE, TargetResolver
from tidymedia.undo import undo_records
from tidymedia.utils.date_utils import DEFAULT_RULES, EXIF_RULE, TimestampRule
from tidymedia.utils.exif_utils import ExifDateReader
from tidymedia.utils.file_utils import Hasher, Mover


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="tidymedia - Organize files read from stdin into a dated tree, or remove duplicates by content."
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--move", action="store_true", help="Move files into <target-dir>/<date subdirectory>/")
    mode.add_argument("--dedup", action="store_true", help="Delete files whose content appeared earlier in the input")
    mode.add_argument("--undo", action="store_true", help="Read records of a previous --move run and move files back")
    parser.add_argument(
        "-t", "--target-dir",
        default="",
        help="Root of the dated tree (required with --move)"
    )
    parser.add_argument(
        "--commit",
        action="store_true",
        help="Actually change the filesystem. Without it nothing is touched (dry run)"
    )
    parser.add_argument(
        "--subdir-template",
        default=DEFAULT_SUBDIR_TEMPLATE,
        help="strftime template for the date subdirectory (default: %(default)s)"
    )
    parser.add_argument(
        "--dedup-filter",
        default=None,
        help="Regex; with --dedup only matching paths may be deleted"
    )
    parser.add_argument(
        "--rule",
        action="append",
        default=None,
        metavar="COMPONENT:PATTERN",
        help="Date rule, e.g. dir:%%Y_%%m_%%d or name:IMG_%%Y%%m%%d_. Repeat for more; replaces the defaults"
    )
    parser.add_argument(
        "--exif",
        action="store_true",
        help="Try EXIF/QuickTime capture dates (needs exiftool) before the path rules"
    )
    parser.add_argument(
        "--hash",
        default="sha1",
        help="hashlib algorithm used to compare contents (default: %(default)s)"
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Don't show a progress bar on stderr"
    )
    return parser.parse_args(argv)


def build_rules(args):
    rules = [TimestampRule.parse(text) for text in args.rule] if args.rule else list(DEFAULT_RULES)
    if args.exif:
        rules.insert(0, EXIF_RULE)
    return rules


def main(argv=None, stdin=None, stdout=None) -> int:
    args = parse_args(argv)
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    progress = not args.no_progress

    if not (args.move or args.dedup or args.undo):
        tqdm.write("please specify a command (--move, --dedup or --undo)", file=sys.stderr)
        return 1

    if args.undo:
        totals = undo_records(stdin, Mover(), commit=args.commit, out=stdout)
        organize.print_summary(totals, args.commit)
        return 0

    try:
        rules = build_rules(args)
        hasher = Hasher(args.hash)
        dedup_filter = re.compile(args.dedup_filter) if args.dedup_filter else None
    except (ValueError, re.error) as e:
        tqdm.write(f"[ERROR] {e}", file=sys.stderr)
        return 1

    registry = IdentityRegistry(hasher)
    executor = ActionExecutor(registry, Mover(), commit=args.commit)

    if args.dedup:
        engine = DecisionEngine(registry, dedup_filter=dedup_filter)
        remove_duplicates.main(stdin, engine, executor, progress, stdout)
        return 0

    target_dir = os.path.expanduser(args.target_dir)
    if not target_dir or not os.path.isdir(target_dir):
        tqdm.write(f"[ERROR] tidymedia.baddir tgtdir:{target_dir!r} directory doesn't seem to exist", file=sys.stderr)
        return 1

    exif = ExifDateReader() if args.exif else None
    try:
        resolver = TargetResolver(target_dir, args.subdir_template, rules, exif)
        engine = DecisionEngine(registry, resolver)
        organize.main(stdin, engine, executor, progress, stdout)
    finally:
        if exif is not None:
            exif.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
