from drop_server.app.services.fetch_hint import public_url, sh_quote, wget_command


def test_safe_strings_are_left_alone():
    assert sh_quote("https://drop.example.com:8443/files/a-b_c.txt") == "https://drop.example.com:8443/files/a-b_c.txt"
    assert sh_quote("user@host/%20") == "user@host/%20"


def test_unsafe_strings_are_single_quoted():
    assert sh_quote("http://x/files/a b") == "'http://x/files/a b'"
    assert sh_quote("$(rm -rf ~)") == "'$(rm -rf ~)'"
    assert sh_quote("a;b") == "'a;b'"


def test_embedded_single_quotes_are_escaped():
    assert sh_quote("it's") == "'it'\\''s'"


def test_wget_command():
    assert public_url("http://localhost:8080", "report.txt") == "http://localhost:8080/files/report.txt"
    assert wget_command("http://localhost:8080", "report.txt") == "wget http://localhost:8080/files/report.txt"
    assert wget_command("https://h.example/a?b=1", "f") == "wget 'https://h.example/a?b=1/files/f'"
