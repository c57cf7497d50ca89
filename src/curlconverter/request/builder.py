"""Request builder. Applies curl's cross-flag semantics to ParsedArguments.

Turns the flat option mapping into a single normalized Request: picks the
method, merges headers, combines data and form options into one body,
resolves auth precedence and maps the transport options one to one.
Anything that cannot be carried over faithfully becomes a warning; only a
missing or malformed URL is fatal.
"""

import logging
import math
import re
from urllib.parse import quote, unquote, unquote_plus, urlsplit

from curlconverter.errors import ConversionWarning, RequestBuildError, WarningKind, warn
from curlconverter.parser.args import ParsedArguments
from curlconverter.parser.options import CONVERTER_OPTION_NAMES, CURL_TABLE, IGNORED_OPTIONS
from curlconverter.request.models import (
    FORM_URLENCODED,
    BasicAuth,
    BearerAuth,
    DigestAuth,
    MultipartBody,
    MultipartPart,
    NoAuth,
    NoBody,
    RawBody,
    Request,
    TlsOptions,
    UrlencodedBody,
)

logger = logging.getLogger(__name__)

DATA_OPTIONS = frozenset({"data", "data-ascii", "data-binary", "data-raw", "data-urlencode", "json"})
# Data options whose joined value is a candidate for an application/x-www-form-urlencoded body.
URLENCODED_DATA_OPTIONS = frozenset({"data", "data-ascii", "data-raw", "data-urlencode"})
FORM_OPTIONS = frozenset({"form", "form-string"})
PROXY_SCHEMES = {
    "socks4": "socks4",
    "socks4a": "socks4a",
    "socks5": "socks5",
    "socks5-hostname": "socks5h",
}
UNSUPPORTED_AUTH_SCHEMES = frozenset({"ntlm", "ntlm-wb", "negotiate", "anyauth"})

HANDLED_OPTIONS = frozenset({
    "url", "request", "head", "get", "globoff", "upload-file",
    "header", "user-agent", "referer",
    *DATA_OPTIONS, *FORM_OPTIONS,
    "user", "auth-scheme", "oauth2-bearer",
    "cookie", "cookie-jar",
    "insecure", "cert", "key", "cacert",
    "proxy", "proxy-user", *PROXY_SCHEMES,
    "location", "location-trusted", "max-redirs",
    "max-time", "connect-timeout",
    "compressed", "http-version",
})

_GLOB_CHARS = re.compile(r"[{}\[\]]")
_BAD_URL_CHARS = re.compile(r"[\x00-\x20\x7f]")
_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*://")


def build_request(parsed: ParsedArguments) -> tuple[Request, list[ConversionWarning]]:
    """Build the Request for ``parsed``. Pure: the same input gives an equal Request."""
    builder = _RequestBuilder(parsed)
    try:
        request = builder.build()
    except RequestBuildError as e:
        raise e.with_prior_warnings(builder.warnings)
    logger.debug("built %s %s", request.method, request.url)
    return request, builder.warnings


def split_url_credentials(raw_url: str) -> tuple[str, tuple[str, str] | None]:
    """Validate ``raw_url`` and move any ``user:pass@`` out of it.

    A missing scheme defaults to http://, like curl does.
    """
    if not raw_url or _BAD_URL_CHARS.search(raw_url):
        raise RequestBuildError(f"malformed URL: {raw_url!r}", details={"url": raw_url})

    url = raw_url if _SCHEME.match(raw_url) else "http://" + raw_url
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a bad port
    except ValueError as e:
        raise RequestBuildError(f"malformed URL {raw_url!r}: {e}", details={"url": raw_url}) from e
    if not parts.scheme or not parts.hostname:
        raise RequestBuildError(f"malformed URL: {raw_url!r}", details={"url": raw_url})

    if "@" not in parts.netloc:
        return url, None

    userinfo, _, hostport = parts.netloc.rpartition("@")
    user, _, password = userinfo.partition(":")
    prefix = f"{parts.scheme}://"
    rest = url[len(prefix) + len(parts.netloc):]
    return f"{prefix}{hostport}{rest}", (unquote(user), unquote(password))


def parse_urlencoded(raw: str) -> list[tuple[str, str]] | None:
    """Split ``a=1&b=2`` into fields, or None when ``raw`` isn't shaped like a form."""
    if not raw:
        return None
    fields = []
    for chunk in raw.split("&"):
        name, sep, value = chunk.partition("=")
        if not sep or not name:
            return None
        fields.append((unquote_plus(name), unquote_plus(value)))
    return fields


def add_query(url: str, query: str) -> str:
    if not query:
        return url
    base, hash_, fragment = url.partition("#")
    if "?" not in base:
        joiner = "?"
    elif base.endswith(("?", "&")):
        joiner = ""
    else:
        joiner = "&"
    return f"{base}{joiner}{query}{hash_}{fragment}"


class _RequestBuilder:
    def __init__(self, parsed: ParsedArguments):
        self.parsed = parsed
        self.warnings: list[ConversionWarning] = []

    def lossy(self, message: str) -> None:
        self.warnings.append(warn(WarningKind.LOSSY_TRANSLATION, message))

    def ambiguous(self, message: str) -> None:
        self.warnings.append(warn(WarningKind.AMBIGUOUS_FLAG_COMBINATION, message))

    # -- orchestration --------------------------------------------------------

    def build(self) -> Request:
        parsed = self.parsed
        url, url_credentials = self._url()
        self._warn_unhandled()

        headers = self._headers()
        data_pieces, form_values = self._pick_body_options()

        body = NoBody()
        if parsed.get("get") and form_values:
            self.ambiguous("-G/--get can't send --form fields in the URL; ignoring -G")
        if parsed.get("get") and data_pieces and not form_values:
            url = add_query(url, self._query_from_data(data_pieces))
        elif data_pieces:
            body = self._data_body(data_pieces, headers)
        elif form_values:
            body = MultipartBody(parts=self._form_parts(form_values))
            headers = self._drop_multipart_content_type(headers)

        upload_file = parsed.get("upload-file")
        if upload_file is not None and body.kind != "none":
            self.ambiguous("-T/--upload-file can't be combined with --data or --form; ignoring -T")
            upload_file = None

        auth = self._auth(url_credentials, headers)
        tls = TlsOptions(
            insecure=bool(parsed.get("insecure")),
            cert=parsed.get("cert"),
            key=parsed.get("key"),
            cacert=parsed.get("cacert"),
        )

        return Request(
            method=self._method(body, upload_file),
            url=url,
            headers=headers,
            body=body,
            auth=auth,
            cookies=self._cookies(),
            cookie_jar=parsed.get("cookie-jar"),
            tls=tls,
            proxy=self._proxy(),
            proxy_auth=self._proxy_auth(),
            follow_redirects=bool(parsed.get("location") or parsed.get("location-trusted")),
            max_redirects=self._number("max-redirs", int),
            timeout=self._number("max-time", float),
            connect_timeout=self._number("connect-timeout", float),
            compressed=bool(parsed.get("compressed")),
            http_version=parsed.get("http-version"),
            upload_file=upload_file,
        )

    # -- url and method -------------------------------------------------------

    def _url(self) -> tuple[str, tuple[str, str] | None]:
        urls = [*self.parsed.get("url", []), *self.parsed.positionals]
        if not urls:
            raise RequestBuildError("no URL provided")
        if len(urls) > 1:
            self.lossy(f"found {len(urls)} URLs, only the first one is used: {urls[0]}")

        url, credentials = split_url_credentials(urls[0])
        if credentials is not None:
            if self.parsed.get("user") is not None:
                self.lossy("credentials in the URL were removed from it; --user was used instead")
            else:
                self.lossy("credentials in the URL were moved out of it and sent as basic auth")

        if not self.parsed.get("globoff"):
            after_host = url.split("://", 1)[1].partition("/")[2]
            if _GLOB_CHARS.search(after_host):
                self.lossy("URL globbing ({...} and [...]) isn't supported, the URL is used literally")
        return url, credentials

    def _method(self, body, upload_file: str | None) -> str:
        parsed = self.parsed
        explicit = parsed.get("request")
        if explicit:
            return explicit
        head = bool(parsed.get("head"))
        if parsed.get("get") and body.kind != "multipart":
            return "HEAD" if head else "GET"
        if upload_file is not None:
            return "PUT"
        if body.kind != "none":
            if head:
                self.ambiguous("-I/--head can't be combined with a request body; sending a POST instead")
            return "POST"
        if head:
            return "HEAD"
        return "GET"

    # -- headers --------------------------------------------------------------

    def _headers(self) -> list[tuple[str, str]]:
        custom: list[tuple[str, str]] = []
        removed: set[str] = set()

        for raw in self.parsed.get("header", []):
            if raw.startswith("@"):
                self.lossy(f"reading headers from a file isn't supported: -H {raw}")
                continue
            if ":" in raw:
                name, _, value = raw.partition(":")
                name, value = name.strip(), value.strip()
                if not value:
                    # "Name:" only stops curl from adding its own header of that name.
                    removed.add(name.lower())
                    continue
            elif raw.rstrip().endswith(";"):
                name, value = raw.rstrip()[:-1].strip(), ""
            else:
                self.lossy(f"ignoring malformed header: {raw!r}")
                continue
            custom.append((name, value))

        present = {name.lower() for name, _ in custom} | removed
        implied: list[tuple[str, str]] = []

        user_agent = self.parsed.get("user-agent")
        if user_agent is not None and "user-agent" not in present:
            implied.append(("User-Agent", user_agent))

        referer = self.parsed.get("referer")
        if referer is not None and "referer" not in present:
            if referer.endswith(";auto"):
                referer = referer[: -len(";auto")]
            if referer:
                implied.append(("Referer", referer))

        headers = implied + custom
        if self.parsed.get("json"):
            for name, value in (("Content-Type", "application/json"), ("Accept", "application/json")):
                if name.lower() not in present:
                    headers.append((name, value))
        return headers

    def _drop_multipart_content_type(self, headers: list[tuple[str, str]]) -> list[tuple[str, str]]:
        kept = []
        for name, value in headers:
            if name.lower() == "content-type" and value.lower().startswith("multipart/form-data"):
                if "boundary=" in value.lower():
                    self.lossy(
                        "dropped the Content-Type header's hand-written multipart boundary; "
                        "the generated code lets the HTTP library pick one"
                    )
                continue
            kept.append((name, value))
        return kept

    # -- body -----------------------------------------------------------------

    def _pick_body_options(self) -> tuple[list[tuple[str, str]], list[tuple[str, str]]]:
        data = self.parsed.occurrences(DATA_OPTIONS)
        forms = self.parsed.occurrences(FORM_OPTIONS)
        if data and forms:
            if self.parsed.last_of(DATA_OPTIONS | FORM_OPTIONS) in FORM_OPTIONS:
                self.ambiguous("both --data and --form were given; --form was given last and is used")
                return [], forms
            self.ambiguous("both --data and --form were given; --data was given last and is used")
            return data, []
        return data, forms

    def _data_segments(self, pieces: list[tuple[str, str]]) -> tuple[list[str], list[str]]:
        """Split data options into literal text segments and @file references."""
        texts: list[str] = []
        files: list[str] = []
        for name, value in pieces:
            if name == "data-raw":
                texts.append(value)
            elif name == "data-urlencode":
                encoded, path = self._urlencode(value)
                if path is not None:
                    files.append(path)
                else:
                    texts.append(encoded)
            elif value.startswith("@"):
                files.append(value[1:])
            else:
                texts.append(value)
        return texts, files

    def _urlencode(self, value: str) -> tuple[str, str | None]:
        """Apply --data-urlencode's content / =content / name=content / [name]@file forms."""
        name, sep, content = value.partition("=")
        if sep:
            encoded = quote(content, safe="")
            return (f"{name}={encoded}" if name else encoded), None
        if "@" in value:
            name, _, path = value.partition("@")
            self.lossy(f"--data-urlencode {value}: the file's contents are sent without URL encoding")
            return "", path
        return quote(value, safe=""), None

    def _join(self, pieces: list[tuple[str, str]], texts: list[str]) -> str:
        if all(name == "json" for name, _ in pieces):
            return "".join(texts)
        return "&".join(texts)

    def _query_from_data(self, pieces: list[tuple[str, str]]) -> str:
        texts, files = self._data_segments(pieces)
        for path in files:
            self.lossy(f"-G/--get can't put the contents of {path} in the URL; it was dropped")
        return self._join(pieces, texts)

    def _data_body(self, pieces: list[tuple[str, str]], headers: list[tuple[str, str]]):
        texts, files = self._data_segments(pieces)
        if files and not texts and len(files) == 1:
            return RawBody(file=files[0])
        for path in files:
            self.lossy(f"data read from {path} can't be combined with other --data values; it was dropped")

        joined = self._join(pieces, texts)
        content_type = next((v for n, v in reversed(headers) if n.lower() == "content-type"), None)
        urlencoded = all(name in URLENCODED_DATA_OPTIONS for name, _ in pieces) and (
            content_type is None or content_type.lower().startswith(FORM_URLENCODED)
        )
        if urlencoded:
            fields = parse_urlencoded(joined)
            if fields is not None:
                return UrlencodedBody(raw=joined, fields=fields)
        return RawBody(data=joined)

    def _form_parts(self, values: list[tuple[str, str]]) -> list[MultipartPart]:
        parts = []
        for option, value in values:
            name, sep, content = value.partition("=")
            if not sep or not name:
                self.lossy(f"ignoring malformed --{option} value: {value!r}")
                continue
            if option == "form-string":
                parts.append(MultipartPart(name=name, value=content))
            elif content.startswith(("@", "<")):
                path, *params = content[1:].split(";")
                options = self._form_params(params)
                parts.append(MultipartPart(
                    name=name,
                    file=path,
                    filename=options.get("filename"),
                    content_type=options.get("type"),
                    value_from_file=content.startswith("<"),
                ))
            else:
                text, _, content_type = content.partition(";type=")
                parts.append(MultipartPart(name=name, value=text, content_type=content_type or None))
        return parts

    def _form_params(self, params: list[str]) -> dict[str, str]:
        options = {}
        for param in params:
            key, _, value = param.partition("=")
            key = key.strip().lower()
            if key in ("type", "filename"):
                options[key] = value.strip().strip('"')
            elif key:
                self.lossy(f"ignoring unsupported --form parameter: {param}")
        return options

    # -- auth and cookies ----------------------------------------------------

    def _credentials_auth(self, user: str, password: str):
        scheme = self.parsed.get("auth-scheme")
        if scheme == "digest":
            return DigestAuth(user=user, password=password)
        if scheme in UNSUPPORTED_AUTH_SCHEMES:
            self.lossy(f"--{scheme} authentication isn't supported, using basic auth instead")
        return BasicAuth(user=user, password=password)

    def _auth(self, url_credentials: tuple[str, str] | None, headers: list[tuple[str, str]]):
        auth = NoAuth()
        user_option = self.parsed.get("user")
        if user_option is not None:
            user, sep, password = user_option.partition(":")
            if not sep:
                self.lossy(f"no password given for user {user!r}; curl would prompt for one, an empty password is used")
            auth = self._credentials_auth(user, password)
        elif url_credentials is not None:
            auth = self._credentials_auth(*url_credentials)

        token = self.parsed.get("oauth2-bearer")
        if token is not None:
            if auth.kind != "none":
                self.ambiguous("both --oauth2-bearer and user credentials were given; the bearer token is used")
            auth = BearerAuth(token=token)

        if auth.kind != "none" and any(name.lower() == "authorization" for name, _ in headers):
            self.lossy("an explicit Authorization header was given; it is used instead of --user/--oauth2-bearer")
            auth = NoAuth()
        return auth

    def _cookies(self) -> list[tuple[str, str]]:
        cookies = []
        for raw in self.parsed.get("cookie", []):
            if "=" not in raw:
                self.lossy(f"reading cookies from a file isn't supported: -b {raw}")
                continue
            for chunk in raw.split(";"):
                chunk = chunk.strip()
                if not chunk:
                    continue
                name, _, value = chunk.partition("=")
                cookies.append((name.strip(), value.strip()))
        return cookies

    # -- transport ------------------------------------------------------------

    def _proxy(self) -> str | None:
        names = {"proxy", *PROXY_SCHEMES}
        last = self.parsed.last_of(names)
        if last is None:
            return None
        if sum(1 for name in names if name in self.parsed) > 1:
            self.ambiguous(f"several proxy options were given; --{last} was given last and is used")
        value = self.parsed.get(last)
        if last == "proxy":
            return value
        return f"{PROXY_SCHEMES[last]}://{value.split('://', 1)[-1]}"

    def _proxy_auth(self) -> tuple[str, str] | None:
        value = self.parsed.get("proxy-user")
        if value is None:
            return None
        user, _, password = value.partition(":")
        return user, password

    def _number(self, name: str, kind):
        value = self.parsed.get(name)
        if value is None:
            return None
        try:
            number = kind(value)
        except ValueError:
            number = None
        if number is None or not math.isfinite(number):
            self.lossy(f"--{name} expects a number, ignoring {value!r}")
            return None
        return number

    def _warn_unhandled(self) -> None:
        for name in self.parsed.names():
            if name in HANDLED_OPTIONS or name in IGNORED_OPTIONS or name in CONVERTER_OPTION_NAMES:
                continue
            spelling = CURL_TABLE.spec(name).spellings()[0] if name in CURL_TABLE else f"--{name}"
            self.lossy(f"{spelling} isn't supported and was ignored")
