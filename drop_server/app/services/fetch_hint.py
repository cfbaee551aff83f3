import re

_SHELL_SAFE = re.compile(r'[A-Za-z0-9\-_./:@%]*')


def sh_quote(value: str) -> str:
    """Quote a string for a POSIX shell unless it only holds safe characters."""
    if _SHELL_SAFE.fullmatch(value):
        return value
    return "'" + value.replace("'", "'\\''") + "'"


def public_url(base_url: str, filename: str) -> str:
    return f"{base_url}/files/{filename}"


def wget_command(base_url: str, filename: str) -> str:
    """Build a copy-pasteable download command for a published file."""
    return f"wget {sh_quote(public_url(base_url, filename))}"
