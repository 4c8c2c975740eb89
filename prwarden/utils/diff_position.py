import re
from typing import Optional

HUNK_HEADER = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")


def find_diff_position(patch: Optional[str], line_number: int) -> Optional[int]:
    """
    Return the position of ``line_number`` (new-file numbering) inside a patch.

    Positions count lines from the first hunk header, as the GitHub review API
    expects. Only added lines can carry a comment; context and deleted lines
    return None.
    """
    if not patch:
        return None

    position = 0
    current_line = 0
    in_hunk = False

    for index, line in enumerate(patch.split("\n")):
        if index > 0:
            position += 1

        match = HUNK_HEADER.match(line)
        if match:
            current_line = int(match.group(1)) - 1
            in_hunk = True
            continue

        if not in_hunk:
            continue

        if line.startswith("+"):
            current_line += 1
            if current_line == line_number:
                return position
        elif line.startswith(" "):
            current_line += 1

    return None
