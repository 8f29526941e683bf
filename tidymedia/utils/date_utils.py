# date_utils.py
"""
Guesses the calendar date of a file from its path.

Photos are often stored in directories that look like
    x/2008_02_03/IMG12343.CRW
or carry the date in their own name (IMG-20200105-WA0001.jpg). Rules are
tried in order and the first one that parses wins. If none does, the file's
modification time is used: not the creation time, which moving or copying
a file may reset.
"""

import os
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

COMPONENTS = ("dir", "name", "exif")

# strptime directive -> regex for the text it consumes
_DIRECTIVES = {
    "Y": r"\d{4}",
    "y": r"\d{2}",
    "m": r"\d{1,2}",
    "d": r"\d{1,2}",
    "H": r"\d{1,2}",
    "M": r"\d{1,2}",
    "S": r"\d{1,2}",
    "j": r"\d{1,3}",
    "b": r"[A-Za-z]{3}",
    "B": r"[A-Za-z]+",
    "%": "%",
}


@dataclass(frozen=True)
class TimestampRule:
    component: str
    pattern: str

    def __post_init__(self):
        if self.component not in COMPONENTS:
            raise ValueError(f"Unknown rule component: {self.component!r}")
        if self.component != "exif":
            pattern_to_regex(self.pattern)

    @classmethod
    def parse(cls, text: str) -> "TimestampRule":
        """'dir:%Y_%m_%d' -> TimestampRule('dir', '%Y_%m_%d')"""
        component, sep, pattern = text.partition(":")
        if not sep or not pattern:
            raise ValueError(f"Rule must look like COMPONENT:PATTERN, got {text!r}")
        return cls(component, pattern)

    def __str__(self):
        return f"{self.component}:{self.pattern}"


def pattern_to_regex(pattern: str) -> re.Pattern:
    """
    Turns a strptime pattern into a regex anchored at the start of the
    string. Numeric fields are digit runs, everything else is literal.
    """
    out = ["^"]
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "%":
            if i + 1 >= len(pattern) or pattern[i + 1] not in _DIRECTIVES:
                raise ValueError(f"Unsupported directive in pattern {pattern!r}")
            out.append(f"({_DIRECTIVES[pattern[i + 1]]})" if pattern[i + 1] != "%" else "%")
            i += 2
        else:
            out.append(re.escape(ch))
            i += 1
    return re.compile("".join(out))


DEFAULT_RULES = [
    TimestampRule("dir", "%Y_%m_%d"),
    TimestampRule("dir", "%Y-%m-%d"),
    TimestampRule("name", "IMG-%Y%m%d-WA"),
    TimestampRule("name", "IMG_%Y%m%d_"),
    TimestampRule("name", "PXL_%Y%m%d_"),
    TimestampRule("name", "%Y-%m-%d"),
]

EXIF_RULE = TimestampRule("exif", "%Y:%m:%d %H:%M:%S")


def parse_prefix(text: str, pattern: str) -> Optional[datetime]:
    """Parses `pattern` at the start of `text`; trailing text is ignored."""
    match = pattern_to_regex(pattern).match(text)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(0), pattern)
    except ValueError:
        return None


def mtime_date(path: str) -> Optional[date]:
    try:
        st = os.stat(path)
    except OSError:
        return None
    return datetime.fromtimestamp(st.st_mtime).date()


def extract_timestamp(path: str, rules=DEFAULT_RULES, exif=None) -> Tuple[Optional[date], bool]:
    """
    Returns (date, True) when a date is known for `path`, (None, False) when
    not even the modification time can be read. `exif` is an object with a
    read_date(path, fmt) method; exif rules are skipped without one.
    """
    parent = os.path.basename(os.path.dirname(os.path.normpath(path)))
    name = os.path.basename(path)
    for rule in rules:
        if rule.component == "exif":
            found = exif.read_date(path, rule.pattern) if exif is not None else None
        else:
            found = parse_prefix(parent if rule.component == "dir" else name, rule.pattern)
        if found is not None:
            return found.date(), True

    fallback = mtime_date(path)
    return fallback, fallback is not None
