"""Plain string helpers used when writing output files."""

import re

ILLEGAL_DIRECTORY_CHARACTERS = re.compile(r"""[\\/:*?"<>|&%$@{}']""")


def split_into_lines(text: str, line_length: int) -> str:
    """Hard-wrap ``text`` every ``line_length`` characters.

    Newlines already present in ``text`` count as ordinary characters, so
    removing the inserted newlines gives back the original string.
    """
    if line_length <= 0:
        raise ValueError(f"Line length must be positive, got {line_length}")

    return "\n".join(
        text[start:start + line_length]
        for start in range(0, len(text), line_length)
    )


def sanitize_directory_name(name: str) -> str:
    """Remove characters that are not allowed in a directory name"""
    return ILLEGAL_DIRECTORY_CHARACTERS.sub("", name)
