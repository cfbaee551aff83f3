import re

from drop_server import config

_FILENAME_PATTERN = re.compile(r'[A-Za-z0-9._-]{1,%d}' % config.MAX_FILENAME_LENGTH)


def is_valid_filename(filename: str) -> bool:
    """Check if the filename is safe to use as a single path component in the data directory."""
    if not _FILENAME_PATTERN.fullmatch(filename):
        return False

    # Parent-directory sequences and path separators in either form
    if ".." in filename or "/" in filename or "\\" in filename:
        return False

    return True
