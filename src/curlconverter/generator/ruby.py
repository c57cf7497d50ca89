"""Ruby generator using ``net/http`` from the standard library."""

from urllib.parse import urlsplit

from curlconverter.generator.base import BaseGenerator, text_converter

REQUEST_CLASSES = {
    "GET": "Get",
    "HEAD": "Head",
    "POST": "Post",
    "PUT": "Put",
    "DELETE": "Delete",
    "PATCH": "Patch",
    "OPTIONS": "Options",
    "TRACE": "Trace",
}


def ruby_string(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def ruby_read(path: str) -> str:
    return "STDIN.read" if path == "-" else f"File.read({ruby_string(path)})"


class RubyGenerator(BaseGenerator):
    language = "ruby"
    supported = frozenset({
        "proxy", "proxy_auth", "insecure", "cert", "cacert", "timeout", "connect_timeout",
        "compressed", "upload_file",
    })

    def render(self) -> str:
        req = self.request
        requires = ["net/http"]
        lines = [f"uri = URI({ruby_string(req.url)})"]

        request_class = REQUEST_CLASSES.get(req.method)
        if request_class is not None:
            lines.append(f"req = Net::HTTP::{request_class}.new(uri)")
        else:
            has_body = "true" if req.has_body or req.upload_file is not None else "false"
            lines.append(f"req = Net::HTTPGenericRequest.new({ruby_string(req.method)}, {has_body}, true, uri)")

        seen: set[str] = set()
        for name, value in self._headers():
            if name.lower() in seen:
                lines.append(f"req.add_field({ruby_string(name)}, {ruby_string(value)})")
            else:
                seen.add(name.lower())
                lines.append(f"req[{ruby_string(name)}] = {ruby_string(value)}")
        if req.auth.kind == "basic":
            lines.append(f"req.basic_auth {ruby_string(req.auth.user)}, {ruby_string(req.auth.password)}")

        body = self._body()
        if body:
            lines += ["", *body]

        options = self._options(requires)
        args = ["uri.hostname", "uri.port"] + self._proxy_args()
        lines += ["", "req_options = {", *(f"  {key}: {value}," for key, value in options), "}"]
        lines += [
            f"res = Net::HTTP.start({', '.join(args)}, req_options) do |http|",
            "  http.request(req)",
            "end",
        ]
        head = "\n".join(f"require {ruby_string(name)}" for name in requires)
        return head + "\n\n" + "\n".join(lines) + "\n"

    def _headers(self) -> list[tuple[str, str]]:
        req = self.request
        headers = list(req.headers)
        implied = self.implied_content_type()
        if implied and req.body.kind != "multipart":
            headers.append(("Content-Type", implied))
        if req.cookies:
            headers.append(("Cookie", req.cookie_header()))
        if req.auth.kind == "bearer":
            headers.append(("Authorization", f"Bearer {req.auth.token}"))
        return headers

    def _body(self) -> list[str]:
        req = self.request
        body = req.body
        if req.upload_file is not None:
            return [f"req.body = {ruby_read(req.upload_file)}"]
        if body.kind == "urlencoded":
            return [f"req.body = {ruby_string(body.raw)}"]
        if body.kind == "raw":
            value = ruby_read(body.file) if body.file is not None else ruby_string(body.data)
            return [f"req.body = {value}"]
        if body.kind == "multipart":
            fields = []
            for part in body.parts:
                fields.append(f"  {self._part(part)},")
            return ["req.set_form(", "  [", *("  " + f for f in fields), "  ],", "  'multipart/form-data'", ")"]
        return []

    def _part(self, part) -> str:
        name = ruby_string(part.name)
        if part.value_from_file:
            return f"[{name}, {ruby_read(part.file)}]"
        if part.file is None:
            if part.content_type:
                return f"[{name}, {ruby_string(part.value)}, {{ content_type: {ruby_string(part.content_type)} }}]"
            return f"[{name}, {ruby_string(part.value)}]"
        opts = []
        if part.filename:
            opts.append(f"filename: {ruby_string(part.filename)}")
        if part.content_type:
            opts.append(f"content_type: {ruby_string(part.content_type)}")
        source = "STDIN" if part.file == "-" else f"File.open({ruby_string(part.file)})"
        if opts:
            return f"[{name}, {source}, {{ {', '.join(opts)} }}]"
        return f"[{name}, {source}]"

    def _options(self, requires: list[str]) -> list[tuple[str, str]]:
        req = self.request
        tls = req.tls
        options = [("use_ssl", "uri.scheme == 'https'")]
        if tls.insecure:
            options.append(("verify_mode", "OpenSSL::SSL::VERIFY_NONE"))
        if tls.cert is not None:
            options.append(("cert", f"OpenSSL::X509::Certificate.new(File.read({ruby_string(tls.cert)}))"))
        if tls.key is not None:
            options.append(("key", f"OpenSSL::PKey.read(File.read({ruby_string(tls.key)}))"))
        if tls.insecure or tls.cert is not None or tls.key is not None:
            requires.append("openssl")
        if tls.cacert is not None:
            options.append(("ca_file", ruby_string(tls.cacert)))
        if req.timeout is not None:
            options.append(("read_timeout", repr(req.timeout)))
        if req.connect_timeout is not None:
            options.append(("open_timeout", repr(req.connect_timeout)))
        return options

    def _proxy_args(self) -> list[str]:
        req = self.request
        if req.proxy is None:
            if req.proxy_auth is not None:
                self.warn("--proxy-user was given without a proxy, it was ignored")
            return []
        proxy = req.proxy if "://" in req.proxy else f"http://{req.proxy}"
        split = urlsplit(proxy)
        if split.scheme not in ("http", "https"):
            self.warn(f"net/http only speaks to HTTP proxies, the {split.scheme} proxy is used as one")
        try:
            port = split.port or 1080
        except ValueError:
            self.warn(f"the proxy port in {req.proxy} isn't a number, port 1080 is used")
            port = 1080
        args = [ruby_string(split.hostname or ""), str(port)]
        if req.proxy_auth is not None:
            args += [ruby_string(req.proxy_auth[0]), ruby_string(req.proxy_auth[1])]
        return args


generate = RubyGenerator.generate
generate_from_text = text_converter(generate)
