from typing import Iterable, List

from prwarden.integrations.github.types import ChangedFile
from prwarden.utils.logger import logger

BINARY_EXTENSIONS = frozenset(
    {
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".svg",
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".zip", ".tar", ".gz", ".rar", ".7z",
        ".exe", ".dll", ".so", ".dylib",
        ".mp3", ".mp4", ".avi", ".mov", ".mkv",
        ".bin", ".dat", ".db", ".sqlite",
    }
)


def is_binary_file(filename: str) -> bool:
    name = filename.rsplit("/", 1)[-1].lower()
    if "." not in name:
        return False
    return f".{name.rsplit('.', 1)[-1]}" in BINARY_EXTENSIONS


def filter_reviewable_files(
    files: Iterable[ChangedFile], max_changes: int
) -> List[ChangedFile]:
    """Drop removed, oversized and binary files, keeping the original order."""
    reviewable = []
    for changed in files:
        if changed.status == "removed":
            continue
        if changed.changes > max_changes:
            logger.warning(
                f"Skipping large file {changed.filename} ({changed.changes} changes)"
            )
            continue
        if is_binary_file(changed.filename):
            logger.debug(f"Skipping binary file {changed.filename}")
            continue
        reviewable.append(changed)
    return reviewable
