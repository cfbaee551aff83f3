import pytest

from drop_server.app.services.validation import is_valid_filename


@pytest.mark.parametrize("filename", [
    "report.txt",
    "a",
    "A-Z_0.9",
    ".hidden",
    "x" * 200,
    "archive.tar.gz",
])
def test_accepts_conforming_names(filename):
    assert is_valid_filename(filename)


@pytest.mark.parametrize("filename", [
    "",
    "x" * 201,
    "a/b",
    "a\\b",
    "..",
    "a..b",
    "../etc/passwd",
    "invalid@id",
    "with space",
    "café.txt",
    "name\n",
    "semi;colon",
])
def test_rejects_everything_else(filename):
    assert not is_valid_filename(filename)
