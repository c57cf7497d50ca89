import pytest

from curlconverter.errors import ArgumentSyntaxError, WarningKind
from curlconverter.parser.args import ParsedArguments, ensure_stdin_alone, parse_args
from curlconverter.parser.options import CLI_TABLE


def _parse(*tokens, **kwargs):
    parsed, warnings = parse_args(list(tokens), **kwargs)
    return parsed, warnings


class TestLongOptions:
    def test_separate_value(self):
        parsed, _ = _parse("--request", "PUT", "example.com")
        assert parsed.get("request") == "PUT"
        assert parsed.positionals == ["example.com"]

    def test_equals_value(self):
        parsed, _ = _parse("--request=PATCH", "example.com")
        assert parsed.get("request") == "PATCH"

    def test_equals_keeps_later_equals(self):
        parsed, _ = _parse("--data=a=1", "example.com")
        assert parsed.get("data") == ["a=1"]

    def test_prefix(self):
        parsed, _ = _parse("--compress", "example.com")
        assert parsed.get("compressed") is True

    def test_negation(self):
        parsed, _ = _parse("--compressed", "--no-compressed", "example.com")
        assert parsed.get("compressed") is False

    def test_bool_with_value_rejected(self):
        with pytest.raises(ArgumentSyntaxError) as exc:
            _parse("--compressed=yes", "example.com")
        assert "does not take a value" in exc.value.message

    def test_missing_value(self):
        with pytest.raises(ArgumentSyntaxError) as exc:
            _parse("example.com", "--header")
        assert "requires parameter" in exc.value.message

    def test_enum_switch(self):
        parsed, _ = _parse("--http2", "example.com")
        assert parsed.get("http-version") == "2"

    def test_enum_bad_value(self):
        with pytest.raises(ArgumentSyntaxError):
            _parse("--tls-max", "9.9", "example.com")


class TestShortOptions:
    def test_cluster(self):
        parsed, _ = _parse("-sSLk", "example.com")
        assert parsed.get("silent") is True
        assert parsed.get("show-error") is True
        assert parsed.get("location") is True
        assert parsed.get("insecure") is True

    def test_attached_value(self):
        parsed, _ = _parse("-XPOST", "example.com")
        assert parsed.get("request") == "POST"

    def test_value_letter_ends_cluster(self):
        parsed, _ = _parse("-sXDELETE", "example.com")
        assert parsed.get("silent") is True
        assert parsed.get("request") == "DELETE"

    def test_value_from_next_token(self):
        parsed, _ = _parse("-H", "A: b", "example.com")
        assert parsed.get("header") == ["A: b"]

    def test_missing_value(self):
        with pytest.raises(ArgumentSyntaxError):
            _parse("example.com", "-d")


class TestRepetition:
    def test_lists_accumulate(self):
        parsed, _ = _parse("-H", "A: 1", "--header", "B: 2", "example.com")
        assert parsed.get("header") == ["A: 1", "B: 2"]

    def test_scalars_last_wins(self):
        parsed, _ = _parse("-X", "PUT", "-X", "POST", "example.com")
        assert parsed.get("request") == "POST"

    def test_occurrences_in_encounter_order(self):
        parsed, _ = _parse("-d", "a=1", "--data-raw", "b", "-d", "c=3", "example.com")
        assert parsed.occurrences({"data", "data-raw"}) == [
            ("data", "a=1"),
            ("data-raw", "b"),
            ("data", "c=3"),
        ]

    def test_last_of(self):
        parsed, _ = _parse("-F", "a=1", "-d", "b=2", "example.com")
        assert parsed.last_of({"form", "data"}) == "data"


class TestPositionals:
    def test_double_dash_ends_options(self):
        parsed, _ = _parse("--", "-not-a-flag")
        assert parsed.positionals == ["-not-a-flag"]

    def test_bare_dash_is_positional_for_curl(self):
        parsed, _ = _parse("-")
        assert parsed.positionals == ["-"]

    def test_bare_dash_is_stdin_for_cli(self):
        parsed, _ = _parse("-", table=CLI_TABLE)
        assert parsed.get("stdin") is True


class TestWarnings:
    def test_unknown_flag_strict(self):
        with pytest.raises(ArgumentSyntaxError) as exc:
            _parse("--definitely-unknown", "example.com")
        assert "is unknown" in exc.value.message

    def test_unknown_flag_lenient(self):
        parsed, warnings = _parse("--definitely-unknown", "example.com", strict=False)
        assert parsed.positionals == ["example.com"]
        assert [w.kind for w in warnings] == [WarningKind.UNKNOWN_FLAG]

    def test_deprecated_spelling(self):
        parsed, warnings = _parse("--ftp-ssl", "example.com")
        assert parsed.get("ssl") is True
        assert warnings[0].kind == WarningKind.DEPRECATED_FLAG

    def test_error_carries_prior_warnings(self):
        with pytest.raises(ArgumentSyntaxError) as exc:
            _parse("--ftp-ssl", "--hea", "example.com")
        assert [w.kind for w in exc.value.warnings] == [WarningKind.DEPRECATED_FLAG]


class TestParsedArguments:
    def test_without(self):
        parsed, _ = _parse("--language", "go", "-v", "example.com", table=CLI_TABLE)
        stripped = parsed.without({"language"})
        assert "language" not in stripped
        assert "language" not in stripped.order
        assert stripped.get("verbose") is True
        assert stripped.positionals == ["example.com"]

    def test_frozen(self):
        parsed = ParsedArguments()
        with pytest.raises(Exception):
            parsed.positionals = ["x"]


class TestStdinAlone:
    def test_verbose_and_language_allowed(self):
        parsed, _ = _parse("-", "--verbose", "--language", "go", table=CLI_TABLE)
        ensure_stdin_alone(parsed)

    def test_extra_flag_rejected(self):
        parsed, _ = _parse("-", "--compressed", table=CLI_TABLE)
        with pytest.raises(ArgumentSyntaxError) as exc:
            ensure_stdin_alone(parsed)
        assert "--compressed" in exc.value.message

    def test_extra_url_rejected(self):
        parsed, _ = _parse("--stdin", "example.com", table=CLI_TABLE)
        with pytest.raises(ArgumentSyntaxError):
            ensure_stdin_alone(parsed)
