"""
Action records: one line per processed path, written to stdout.

    tidymedia.file  pathname:a/x.jpg  tgtfile:/out/2020/2020-01-05/x.jpg  action:move  comment:'move file'  committed:Y

Values are shell-quoted, so the same lines can be fed back to --undo.
"""

import shlex
from dataclasses import dataclass
from typing import Optional

PREFIX = "tidymedia."
EVENTS = ("file", "dedup", "undo")


class MalformedRecord(ValueError):
    pass


@dataclass
class ActionRecord:
    event: str
    source: str
    target: str = ""
    action: str = ""
    comment: str = ""
    orig: str = ""
    committed: Optional[bool] = None

    def format(self) -> str:
        fields = [("pathname", self.source)]
        if self.event == "dedup":
            fields.append(("orig", self.orig))
        else:
            fields.append(("tgtfile", self.target))
        fields += [("action", self.action), ("comment", self.comment)]
        if self.committed is not None:
            fields.append(("committed", "Y" if self.committed else "N"))
        return "  ".join([PREFIX + self.event] + [f"{k}:{shlex.quote(v)}" for k, v in fields])


def parse_record(line: str) -> ActionRecord:
    """Inverse of ActionRecord.format(). Raises MalformedRecord."""
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        raise MalformedRecord(str(e)) from e
    if not tokens or not tokens[0].startswith(PREFIX):
        raise MalformedRecord(f"not a record: {line.strip()!r}")
    event = tokens[0][len(PREFIX):]
    if event not in EVENTS:
        raise MalformedRecord(f"unknown event {event!r}")

    values = {}
    for token in tokens[1:]:
        key, sep, value = token.partition(":")
        if not sep:
            raise MalformedRecord(f"bad field {token!r}")
        values[key] = value
    if not values.get("pathname"):
        raise MalformedRecord("record has no pathname")

    committed = values.get("committed")
    if committed not in (None, "Y", "N"):
        raise MalformedRecord(f"bad committed flag {committed!r}")

    return ActionRecord(
        event=event,
        source=values["pathname"],
        target=values.get("tgtfile", ""),
        action=values.get("action", ""),
        comment=values.get("comment", ""),
        orig=values.get("orig", ""),
        committed=None if committed is None else committed == "Y",
    )
