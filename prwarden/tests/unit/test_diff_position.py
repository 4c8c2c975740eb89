from prwarden.utils.diff_position import find_diff_position

PATCH = "\n".join(
    [
        "@@ -1,3 +1,4 @@",
        " import os",
        "+import sys",
        " ",
        " def main():",
        "@@ -20,2 +21,3 @@ def main():",
        "     run()",
        "-    stop()",
        "+    halt()",
        "+    return 0",
    ]
)


def test_added_line_in_first_hunk():
    assert find_diff_position(PATCH, 2) == 2


def test_added_lines_in_second_hunk():
    # Position keeps counting across hunk headers
    assert find_diff_position(PATCH, 22) == 8
    assert find_diff_position(PATCH, 23) == 9


def test_context_and_unknown_lines_have_no_position():
    assert find_diff_position(PATCH, 1) is None
    assert find_diff_position(PATCH, 500) is None


def test_missing_patch():
    assert find_diff_position(None, 1) is None
    assert find_diff_position("", 1) is None
