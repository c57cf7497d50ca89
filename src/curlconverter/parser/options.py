"""The option table: every flag curlconverter understands.

Each curl option is described once by an ``OptionSpec``. Specs are grouped
into immutable ``OptionTable`` instances which resolve a spelling (``-H``,
``--header``, an unambiguous prefix such as ``--head``) to its spec.
"""

from enum import Enum
from types import MappingProxyType
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from curlconverter.errors import ArgumentSyntaxError


class OptionKind(str, Enum):
    BOOL = "bool"
    STRING = "string"
    STRING_LIST = "string-list"
    ENUM = "enum"


class OptionSpec(BaseModel):
    """A single option: canonical name, value kind and every spelling."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: OptionKind
    long: tuple[str, ...] = ()  # without the leading "--"
    short: tuple[str, ...] = ()  # single characters, without the leading "-"
    negatable: bool = False
    choices: tuple[str, ...] = ()
    switches: dict[str, str] = {}  # valueless spelling -> selected choice
    deprecated: dict[str, str] = {}  # spelling -> deprecation message

    def takes_value(self, spelling: str) -> bool:
        if self.kind == OptionKind.BOOL:
            return False
        return spelling not in self.switches

    def spellings(self) -> list[str]:
        return [f"--{word}" for word in self.long] + [f"-{char}" for char in self.short]


class OptionTable:
    """Immutable index from spellings to option specs."""

    def __init__(self, specs: Iterable[OptionSpec]):
        by_name: dict[str, OptionSpec] = {}
        by_long: dict[str, OptionSpec] = {}
        by_short: dict[str, OptionSpec] = {}

        for spec in specs:
            if spec.name in by_name:
                raise ValueError(f"duplicate option name: {spec.name}")
            by_name[spec.name] = spec
            for word in spec.long:
                if word in by_long:
                    raise ValueError(f"--{word} is claimed by both {by_long[word].name} and {spec.name}")
                by_long[word] = spec
            for char in spec.short:
                if len(char) != 1:
                    raise ValueError(f"short option must be one character: {char!r}")
                if char in by_short:
                    raise ValueError(f"-{char} is claimed by both {by_short[char].name} and {spec.name}")
                by_short[char] = spec

        self._by_name = MappingProxyType(by_name)
        self._by_long = MappingProxyType(by_long)
        self._by_short = MappingProxyType(by_short)
        self._long_words = tuple(sorted(by_long))

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __iter__(self):
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def spec(self, name: str) -> OptionSpec:
        return self._by_name[name]

    def lookup_long(self, word: str) -> OptionSpec | None:
        """Exact match on a long option name (no leading dashes)."""
        return self._by_long.get(word)

    def lookup_short(self, char: str) -> OptionSpec | None:
        return self._by_short.get(char)

    def resolve_prefix(self, word: str) -> tuple[str, OptionSpec] | None:
        """Resolve an abbreviated long option the way curl does.

        Returns the full long name and its spec when exactly one option starts
        with ``word``. Raises ArgumentSyntaxError when several do.
        """
        if not word:
            return None
        hits = [w for w in self._long_words if w.startswith(word)]
        specs = {self._by_long[w].name for w in hits}
        if not hits:
            return None
        # Several spellings of one enum select different values, so they are ambiguous too.
        if len(specs) > 1 or (len(hits) > 1 and self._by_long[hits[0]].switches):
            candidates = ", ".join(f"--{w}" for w in hits)
            raise ArgumentSyntaxError(
                f"option --{word}: is ambiguous (could be {candidates})",
                details={"option": f"--{word}", "candidates": hits},
            )
        return hits[0], self._by_long[hits[0]]

    def extend(self, specs: Iterable[OptionSpec]) -> "OptionTable":
        """Return a new table holding these specs plus ``specs``."""
        return OptionTable([*self._by_name.values(), *specs])


# -- spec constructors --------------------------------------------------------


def _long(name: str, aliases: tuple[str, ...]) -> tuple[str, ...]:
    return (name, *aliases)


def _short(short: str) -> tuple[str, ...]:
    return (short,) if short else ()


def flag(name: str, *aliases: str, short: str = "", negatable: bool = True, deprecated: dict | None = None) -> OptionSpec:
    return OptionSpec(
        name=name,
        kind=OptionKind.BOOL,
        long=_long(name, aliases),
        short=_short(short),
        negatable=negatable,
        deprecated=deprecated or {},
    )


def string(name: str, *aliases: str, short: str = "", deprecated: dict | None = None) -> OptionSpec:
    return OptionSpec(
        name=name,
        kind=OptionKind.STRING,
        long=_long(name, aliases),
        short=_short(short),
        deprecated=deprecated or {},
    )


def strings(name: str, *aliases: str, short: str = "") -> OptionSpec:
    return OptionSpec(name=name, kind=OptionKind.STRING_LIST, long=_long(name, aliases), short=_short(short))


def choice(name: str, choices: tuple[str, ...], *, long: tuple[str, ...] = (), short: tuple[str, ...] = (),
           switches: dict | None = None, deprecated: dict | None = None) -> OptionSpec:
    return OptionSpec(
        name=name,
        kind=OptionKind.ENUM,
        long=long,
        short=short,
        choices=choices,
        switches=switches or {},
        deprecated=deprecated or {},
    )


# -- curl's options -----------------------------------------------------------

_NO_EFFECT = "has no effect"

REQUEST_OPTIONS = [
    # method and URL
    strings("url"),
    string("request", short="X"),
    string("request-target"),
    flag("head", short="I"),
    flag("get", short="G"),
    flag("globoff", short="g"),
    flag("path-as-is"),
    string("upload-file", short="T"),
    # headers
    strings("header", short="H"),
    strings("proxy-header"),
    string("user-agent", short="A"),
    string("referer", short="e"),
    # body
    strings("data", short="d"),
    strings("data-ascii"),
    strings("data-binary"),
    strings("data-raw"),
    strings("data-urlencode"),
    strings("json"),
    strings("form", short="F"),
    strings("form-string"),
    # auth
    string("user", short="u"),
    choice(
        "auth-scheme",
        ("basic", "digest", "ntlm", "ntlm-wb", "negotiate", "anyauth"),
        long=("basic", "digest", "ntlm", "ntlm-wb", "negotiate", "anyauth"),
        switches={
            "--basic": "basic",
            "--digest": "digest",
            "--ntlm": "ntlm",
            "--ntlm-wb": "ntlm-wb",
            "--negotiate": "negotiate",
            "--anyauth": "anyauth",
        },
    ),
    string("oauth2-bearer"),
    string("aws-sigv4"),
    flag("netrc", short="n"),
    flag("netrc-optional"),
    string("netrc-file"),
    choice("delegation", ("none", "policy", "always"), long=("delegation",)),
    # cookies
    strings("cookie", short="b"),
    string("cookie-jar", short="c"),
    flag("junk-session-cookies", short="j"),
    # TLS
    flag("insecure", short="k"),
    string("cert", short="E"),
    string("key"),
    choice("cert-type", ("PEM", "DER", "ENG", "P12"), long=("cert-type",)),
    choice("key-type", ("PEM", "DER", "ENG"), long=("key-type",)),
    string("pass"),
    string("cacert"),
    string("capath"),
    string("ciphers"),
    string("pinnedpubkey"),
    flag("ssl", "ftp-ssl", deprecated={"--ftp-ssl": "--ftp-ssl is deprecated, use --ssl"}),
    flag("ssl-reqd", "ftp-ssl-reqd", deprecated={"--ftp-ssl-reqd": "--ftp-ssl-reqd is deprecated, use --ssl-reqd"}),
    flag("ssl-no-revoke"),
    choice(
        "tls-version",
        ("1", "1.0", "1.1", "1.2", "1.3", "ssl2", "ssl3"),
        long=("tlsv1", "tlsv1.0", "tlsv1.1", "tlsv1.2", "tlsv1.3", "sslv2", "sslv3"),
        short=("1", "2", "3"),
        switches={
            "--tlsv1": "1",
            "-1": "1",
            "--tlsv1.0": "1.0",
            "--tlsv1.1": "1.1",
            "--tlsv1.2": "1.2",
            "--tlsv1.3": "1.3",
            "--sslv2": "ssl2",
            "-2": "ssl2",
            "--sslv3": "ssl3",
            "-3": "ssl3",
        },
        deprecated={
            "--sslv2": f"--sslv2 {_NO_EFFECT}",
            "-2": f"-2 {_NO_EFFECT}",
            "--sslv3": f"--sslv3 {_NO_EFFECT}",
            "-3": f"-3 {_NO_EFFECT}",
        },
    ),
    choice("tls-max", ("1.0", "1.1", "1.2", "1.3", "default"), long=("tls-max",)),
    string("random-file", deprecated={"--random-file": f"--random-file {_NO_EFFECT}"}),
    string("egd-file", deprecated={"--egd-file": f"--egd-file {_NO_EFFECT}"}),
    # proxy
    string("proxy", short="x"),
    string("proxy-user", short="U"),
    flag("proxy-insecure"),
    flag("proxytunnel", short="p"),
    string("noproxy"),
    string("preproxy"),
    string("socks4"),
    string("socks4a"),
    string("socks5"),
    string("socks5-hostname"),
    # redirects
    flag("location", short="L"),
    flag("location-trusted"),
    string("max-redirs"),
    flag("post301"),
    flag("post302"),
    flag("post303"),
    # timeouts
    string("max-time", short="m"),
    string("connect-timeout"),
    string("expect100-timeout"),
    # transfer
    flag("compressed"),
    flag("tr-encoding"),
    choice(
        "http-version",
        ("1.0", "1.1", "2", "2-prior-knowledge", "3"),
        long=("http1.0", "http1.1", "http2", "http2-prior-knowledge", "http3"),
        short=("0",),
        switches={
            "--http1.0": "1.0",
            "-0": "1.0",
            "--http1.1": "1.1",
            "--http2": "2",
            "--http2-prior-knowledge": "2-prior-knowledge",
            "--http3": "3",
        },
    ),
    flag("http0.9"),
    string("range", short="r"),
    string("continue-at", short="C"),
    string("time-cond", short="z"),
    string("limit-rate"),
    string("max-filesize"),
    flag("fail", short="f"),
    flag("fail-with-body"),
    flag("ipv4", short="4"),
    flag("ipv6", short="6"),
    strings("resolve"),
    strings("connect-to"),
    string("interface"),
    string("local-port"),
    string("unix-socket"),
    string("abstract-unix-socket"),
    flag("keepalive"),
    string("keepalive-time"),
    flag("tcp-nodelay"),
    string("retry"),
    string("retry-delay"),
    string("retry-max-time"),
    flag("retry-connrefused"),
    flag("retry-all-errors"),
    string("config", short="K"),
    flag("next", short=":", negatable=False),
    string("krb", "krb4", deprecated={"--krb4": "--krb4 is deprecated, use --krb"}),
    flag("use-ascii", short="B"),
    flag("append", short="a"),
    flag("list-only", short="l"),
    string("ftp-port", short="P"),
    strings("quote", short="Q"),
    strings("telnet-option", short="t"),
    string("speed-time", short="y"),
    string("speed-limit", short="Y"),
]

# Options that only change what curl prints or where it writes the response.
OUTPUT_OPTIONS = [
    flag("verbose", short="v"),
    flag("silent", short="s"),
    flag("show-error", short="S"),
    flag("progress-bar", short="#"),
    flag("progress-meter"),
    flag("no-buffer", short="N", negatable=False),
    flag("include", short="i"),
    strings("output", short="o"),
    flag("remote-name", short="O"),
    flag("remote-name-all"),
    flag("remote-header-name", short="J"),
    flag("remote-time", short="R"),
    string("output-dir"),
    flag("create-dirs"),
    string("create-file-mode"),
    string("dump-header", short="D"),
    string("trace"),
    string("trace-ascii"),
    flag("trace-time"),
    string("stderr"),
    string("write-out", short="w"),
    flag("styled-output"),
    flag("xattr"),
    flag("fail-early"),
    flag("parallel", short="Z"),
    string("parallel-max"),
    flag("parallel-immediate"),
    flag("disable", short="q"),
    string("libcurl"),
    flag("help", short="h"),
    flag("version", short="V"),
    flag("manual", short="M"),
]

CURL_OPTIONS = REQUEST_OPTIONS + OUTPUT_OPTIONS

IGNORED_OPTIONS = frozenset(spec.name for spec in OUTPUT_OPTIONS)

# Options owned by the curlconverter command line, not by curl.
CONVERTER_OPTIONS = [
    string("language"),
    OptionSpec(name="stdin", kind=OptionKind.BOOL, long=("stdin",)),
]

CONVERTER_OPTION_NAMES = frozenset(spec.name for spec in CONVERTER_OPTIONS)

CURL_TABLE = OptionTable(CURL_OPTIONS)
CLI_TABLE = CURL_TABLE.extend(CONVERTER_OPTIONS)
