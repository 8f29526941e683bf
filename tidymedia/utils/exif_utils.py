# exif_utils.py
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from exiftool import ExifToolHelper
from exiftool.exceptions import ExifToolException
from tqdm import tqdm

DATE_TAGS = [
    "EXIF:DateTimeOriginal",
    "EXIF:CreateDate",
    "QuickTime:CreateDate",
    "QuickTime:MediaCreateDate",
]


class ExifDateReader:
    """
    Reads capture dates through a single exiftool process kept open for the
    whole run. Call close() (or use it as a context manager) when done.
    """

    def __init__(self, tags: Optional[list] = None):
        self.tags = tags or list(DATE_TAGS)
        self._et = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _helper(self) -> ExifToolHelper:
        if self._et is None:
            # started on first command
            self._et = ExifToolHelper()
        return self._et

    def read_tags(self, path: str | Path) -> dict:
        metadata = self._helper().get_tags([str(path)], tags=self.tags)
        if not metadata:
            return {}
        return metadata[0]

    def read_date(self, path: str | Path, fmt: str) -> Optional[datetime]:
        """
        Returns the first capture date tag that parses with `fmt`, or None.
        Files exiftool cannot read yield None as well.
        """
        try:
            item = self.read_tags(path)
        except (ExifToolException, OSError, ValueError) as e:
            tqdm.write(f"[WARN] Could not read metadata of {path}: {e}", file=sys.stderr)
            return None
        for field in self.tags:
            if field in item:
                try:
                    return datetime.strptime(str(item[field]), fmt)
                except ValueError:
                    continue
        return None

    def close(self) -> None:
        if self._et is not None:
            self._et.terminate()
            self._et = None
