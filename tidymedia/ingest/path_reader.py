import sys
from typing import Iterator, TextIO

from tqdm import tqdm


def read_paths(stream: TextIO, progress: bool = True, desc: str = "Processing") -> Iterator[str]:
    """
    Yields one path per non-empty input line, in input order.
    Progress is shown on stderr as each line is consumed.
    """
    for line in tqdm(stream, desc=desc, unit=" files", file=sys.stderr, disable=not progress):
        path = line.rstrip("\r\n")
        if path.strip():
            yield path
