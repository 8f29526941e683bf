import os
from datetime import date
from typing import Optional

from tidymedia.utils.date_utils import DEFAULT_RULES, extract_timestamp

DEFAULT_SUBDIR_TEMPLATE = "%Y/%Y-%m-%d"


def subdirectory_for(day: Optional[date], template: str) -> str:
    if day is None:
        return ""
    subdir = day.strftime(template).strip("/")
    if not subdir:
        return ""
    return os.path.normpath(subdir.replace("/", os.sep))


class TargetResolver:
    """
    Computes where a file belongs: <target_dir>/<date formatted with
    dir_template>/<basename>. Files whose date can't be determined land
    directly under target_dir.
    """

    def __init__(self, target_dir, dir_template=DEFAULT_SUBDIR_TEMPLATE, rules=DEFAULT_RULES, exif=None):
        self.target_dir = str(target_dir)
        self.dir_template = dir_template
        self.rules = list(rules)
        self.exif = exif

    def resolve(self, path: str) -> str:
        name = os.path.basename(path)
        if not name:
            return ""
        day, found = extract_timestamp(path, self.rules, self.exif)
        subdir = subdirectory_for(day if found else None, self.dir_template)
        parts = [self.target_dir, subdir, name]
        return os.path.join(*[p for p in parts if p])
