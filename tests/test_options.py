import pytest

from curlconverter.errors import ArgumentSyntaxError
from curlconverter.parser.options import (
    CLI_TABLE,
    CONVERTER_OPTION_NAMES,
    CURL_TABLE,
    IGNORED_OPTIONS,
    OptionKind,
    OptionTable,
    flag,
    string,
    strings,
)


class TestOptionTable:
    def test_lookup_long_and_short(self):
        assert CURL_TABLE.lookup_long("header").name == "header"
        assert CURL_TABLE.lookup_short("H").name == "header"
        assert CURL_TABLE.lookup_short("X").name == "request"

    def test_aliases_share_one_spec(self):
        assert CURL_TABLE.lookup_long("ftp-ssl") is CURL_TABLE.lookup_long("ssl")

    def test_unknown_spelling(self):
        assert CURL_TABLE.lookup_long("not-a-real-option") is None
        assert CURL_TABLE.lookup_short("%") is None

    def test_kinds(self):
        assert CURL_TABLE.spec("header").kind == OptionKind.STRING_LIST
        assert CURL_TABLE.spec("request").kind == OptionKind.STRING
        assert CURL_TABLE.spec("location").kind == OptionKind.BOOL
        assert CURL_TABLE.spec("http-version").kind == OptionKind.ENUM

    def test_switch_spellings_take_no_value(self):
        spec = CURL_TABLE.spec("auth-scheme")
        assert not spec.takes_value("--digest")
        assert spec.switches["--digest"] == "digest"

    def test_duplicate_name_rejected(self):
        with pytest.raises(ValueError):
            OptionTable([flag("alpha"), string("alpha")])

    def test_duplicate_spelling_rejected(self):
        with pytest.raises(ValueError):
            OptionTable([flag("alpha", short="a"), flag("beta", short="a")])

    def test_extend_returns_new_table(self):
        table = OptionTable([flag("alpha")])
        extended = table.extend([strings("beta")])
        assert "beta" in extended
        assert "beta" not in table
        assert len(extended) == 2


class TestResolvePrefix:
    def test_unique_prefix(self):
        full, spec = CURL_TABLE.resolve_prefix("compress")
        assert full == "compressed"
        assert spec.name == "compressed"

    def test_ambiguous_prefix(self):
        with pytest.raises(ArgumentSyntaxError) as exc:
            CURL_TABLE.resolve_prefix("hea")
        assert "ambiguous" in exc.value.message

    def test_ambiguous_between_switches_of_one_option(self):
        with pytest.raises(ArgumentSyntaxError):
            CURL_TABLE.resolve_prefix("tlsv1.")

    def test_no_match(self):
        assert CURL_TABLE.resolve_prefix("zzz") is None


class TestModuleTables:
    def test_cli_table_adds_converter_options(self):
        assert "language" in CLI_TABLE
        assert "stdin" in CLI_TABLE
        assert "language" not in CURL_TABLE
        assert CONVERTER_OPTION_NAMES == {"language", "stdin"}

    def test_output_options_are_ignored(self):
        assert "verbose" in IGNORED_OPTIONS
        assert "silent" in IGNORED_OPTIONS
        assert "header" not in IGNORED_OPTIONS
