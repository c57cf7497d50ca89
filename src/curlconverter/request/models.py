"""The Request IR: one normalized, language-agnostic HTTP request.

The builder produces these models and every generator consumes them.
Bodies and auth are tagged unions discriminated on ``kind``.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

FORM_URLENCODED = "application/x-www-form-urlencoded"

HttpVersion = Literal["1.0", "1.1", "2", "2-prior-knowledge", "3"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# -- body ---------------------------------------------------------------------


class NoBody(_Frozen):
    kind: Literal["none"] = "none"


class RawBody(_Frozen):
    """Body sent verbatim; ``file`` is set when it is read from a file (``-d @file``)."""

    kind: Literal["raw"] = "raw"
    data: str = ""
    file: str | None = None

    @property
    def from_stdin(self) -> bool:
        return self.file == "-"


class UrlencodedBody(_Frozen):
    """An ``a=1&b=2`` body. ``raw`` is exactly what curl sends."""

    kind: Literal["urlencoded"] = "urlencoded"
    raw: str
    fields: list[tuple[str, str]]


class MultipartPart(_Frozen):
    name: str
    value: str | None = None  # literal field value
    file: str | None = None  # path of the file to upload (-F name=@path) or read (-F name=<path)
    filename: str | None = None
    content_type: str | None = None
    value_from_file: bool = False  # -F name=<path: the file's contents become the field value

    @property
    def is_upload(self) -> bool:
        return self.file is not None and not self.value_from_file


class MultipartBody(_Frozen):
    kind: Literal["multipart"] = "multipart"
    parts: list[MultipartPart]


Body = Annotated[Union[NoBody, RawBody, UrlencodedBody, MultipartBody], Field(discriminator="kind")]


# -- auth ---------------------------------------------------------------------


class NoAuth(_Frozen):
    kind: Literal["none"] = "none"


class BasicAuth(_Frozen):
    kind: Literal["basic"] = "basic"
    user: str
    password: str = ""


class BearerAuth(_Frozen):
    kind: Literal["bearer"] = "bearer"
    token: str


class DigestAuth(_Frozen):
    kind: Literal["digest"] = "digest"
    user: str
    password: str = ""


Auth = Annotated[Union[NoAuth, BasicAuth, BearerAuth, DigestAuth], Field(discriminator="kind")]


# -- request ------------------------------------------------------------------


class TlsOptions(_Frozen):
    insecure: bool = False
    cert: str | None = None
    key: str | None = None
    cacert: str | None = None


class Request(_Frozen):
    """A fully normalized HTTP request."""

    method: str = Field(min_length=1)
    url: str
    headers: list[tuple[str, str]] = []
    body: Body = NoBody()
    auth: Auth = NoAuth()
    cookies: list[tuple[str, str]] = []
    cookie_jar: str | None = None
    tls: TlsOptions = TlsOptions()
    proxy: str | None = None
    proxy_auth: tuple[str, str] | None = None
    follow_redirects: bool = False
    max_redirects: int | None = None
    timeout: float | None = None
    connect_timeout: float | None = None
    compressed: bool = False
    http_version: HttpVersion | None = None
    upload_file: str | None = None

    def header(self, name: str) -> str | None:
        """Value of the last header called ``name`` (case-insensitive)."""
        name = name.lower()
        for key, value in reversed(self.headers):
            if key.lower() == name:
                return value
        return None

    def has_header(self, name: str) -> bool:
        return self.header(name) is not None

    @property
    def content_type(self) -> str | None:
        """Content-Type curl would send, including its implicit one for -d bodies."""
        explicit = self.header("content-type")
        if explicit is not None:
            return explicit
        if self.body.kind in ("raw", "urlencoded"):
            return FORM_URLENCODED
        return None

    @property
    def has_body(self) -> bool:
        return self.body.kind != "none"

    def cookie_header(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self.cookies)
