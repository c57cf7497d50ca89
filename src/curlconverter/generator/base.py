"""Shared scaffolding for code generators.

A generator instance lives for one call: it holds the Request and the
warnings raised while rendering it, so nothing is shared between calls.
"""

from typing import Callable

from curlconverter.errors import ConversionWarning, GenerationError, WarningKind, warn
from curlconverter.generator.pipeline import Generate, convert_text
from curlconverter.request.models import Request

# feature name -> (present in request?, human description)
FEATURES: dict[str, tuple[Callable[[Request], bool], str]] = {
    "cookie_jar": (lambda r: r.cookie_jar is not None, "saving cookies to a cookie jar (-c/--cookie-jar)"),
    "proxy": (lambda r: r.proxy is not None, "proxies (-x/--proxy)"),
    "proxy_auth": (lambda r: r.proxy_auth is not None, "proxy credentials (-U/--proxy-user)"),
    "insecure": (lambda r: r.tls.insecure, "skipping certificate verification (-k/--insecure)"),
    "cert": (lambda r: r.tls.cert is not None or r.tls.key is not None, "client certificates (-E/--cert, --key)"),
    "cacert": (lambda r: r.tls.cacert is not None, "custom CA certificates (--cacert)"),
    "follow_redirects": (lambda r: r.follow_redirects, "following redirects (-L/--location)"),
    "max_redirects": (lambda r: r.max_redirects is not None, "limiting redirects (--max-redirs)"),
    "timeout": (lambda r: r.timeout is not None, "timeouts (-m/--max-time)"),
    "connect_timeout": (lambda r: r.connect_timeout is not None, "connect timeouts (--connect-timeout)"),
    "compressed": (lambda r: r.compressed, "compressed responses (--compressed)"),
    "http_version": (lambda r: r.http_version not in (None, "1.1"), "choosing the HTTP version"),
    "upload_file": (lambda r: r.upload_file is not None, "uploading files (-T/--upload-file)"),
    "digest": (lambda r: r.auth.kind == "digest", "digest authentication (--digest)"),
}


class BaseGenerator:
    """Renders one Request as source code in one target idiom."""

    language = ""
    # Names from FEATURES this generator knows how to express.
    supported: frozenset[str] = frozenset()

    def __init__(self, request: Request):
        self.request = request
        self.warnings: list[ConversionWarning] = []

    @classmethod
    def generate(cls, request: Request) -> tuple[str, list[ConversionWarning]]:
        generator = cls(request)
        generator.check_features()
        code = generator.render()
        return code, generator.warnings

    def render(self) -> str:
        raise NotImplementedError

    def warn(self, message: str) -> None:
        self.warnings.append(warn(WarningKind.LOSSY_TRANSLATION, message))

    def fail(self, message: str) -> None:
        raise GenerationError(f"{self.language}: {message}", details={"language": self.language}, warnings=self.warnings)

    def check_features(self) -> None:
        for name, (present, description) in FEATURES.items():
            if name not in self.supported and present(self.request):
                self.warn(f"{self.language} doesn't support {description}, it was ignored")

    # -- helpers shared by most generators ------------------------------------

    def merged_headers(self) -> list[tuple[str, str]]:
        """Headers with duplicates merged into one comma separated value.

        For targets whose header container is a plain map.
        """
        merged: dict[str, tuple[str, str]] = {}
        for name, value in self.request.headers:
            key = name.lower()
            if key in merged:
                self.warn(f"{self.language} can't send the {name} header twice; the values were joined with ', '")
                first_name, first_value = merged[key]
                merged[key] = (first_name, f"{first_value}, {value}")
            else:
                merged[key] = (name, value)
        return list(merged.values())

    def implied_content_type(self) -> str | None:
        """The Content-Type curl adds on its own, when no explicit one was given."""
        if self.request.has_header("content-type"):
            return None
        return self.request.content_type


def text_converter(generate: Generate):
    """Derive the one-shot ``text -> (code, warnings)`` function from a generator."""

    def generate_from_text(text: str) -> tuple[str, list[ConversionWarning]]:
        return convert_text(text, generate)

    return generate_from_text
