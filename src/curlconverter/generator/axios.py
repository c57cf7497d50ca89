"""Node.js generator using ``axios``."""

from urllib.parse import urlsplit

from curlconverter.generator.base import BaseGenerator, text_converter
from curlconverter.generator.javascript import js_object, js_string

DEFAULT_PROXY_PORTS = {"http": 80, "https": 443}


class AxiosGenerator(BaseGenerator):
    language = "node-axios"
    supported = frozenset({
        "proxy", "proxy_auth", "insecure", "follow_redirects", "max_redirects", "timeout", "compressed", "upload_file",
    })

    def render(self) -> str:
        req = self.request
        imports = {"axios": "import axios from 'axios';"}
        preamble: list[str] = []
        config: list[tuple[str, str]] = [
            ("method", js_string(req.method.lower())),
            ("url", js_string(req.url)),
        ]

        headers = [(name, js_string(value)) for name, value in self.merged_headers()]
        implied = self.implied_content_type()
        if implied:
            headers.append(("Content-Type", js_string(implied)))
        if req.cookies:
            headers.append(("Cookie", js_string(req.cookie_header())))
        if req.auth.kind == "bearer":
            headers.append(("Authorization", js_string(f"Bearer {req.auth.token}")))
        if headers:
            config.append(("headers", js_object(headers, level=2)))

        body = req.body
        if req.upload_file is not None:
            imports["fs"] = "import fs from 'fs';"
            config.append(("data", f"fs.createReadStream({js_string(req.upload_file)})"))
        elif body.kind == "urlencoded":
            config.append(("data", js_string(body.raw)))
        elif body.kind == "raw":
            if body.file is not None:
                imports["fs"] = "import fs from 'fs';"
                source = "0" if body.from_stdin else js_string(body.file)
                config.append(("data", f"fs.readFileSync({source})"))
            else:
                config.append(("data", js_string(body.data)))
        elif body.kind == "multipart":
            imports["form-data"] = "import FormData from 'form-data';"
            preamble.append("const form = new FormData();")
            for part in body.parts:
                preamble.append(f"form.append({js_string(part.name)}, {self._part(part, imports)});")
            config.append(("data", "form"))

        if req.auth.kind == "basic":
            config.append(("auth", js_object([
                ("username", js_string(req.auth.user)),
                ("password", js_string(req.auth.password)),
            ], level=2)))

        config.extend(self._transport(imports))

        sections = ["\n".join(imports.values())]
        if preamble:
            sections.append("\n".join(preamble))
        sections.append(f"const response = await axios({js_object(config)});")
        return "\n\n".join(sections) + "\n"

    def _part(self, part, imports: dict[str, str]) -> str:
        if part.file is None:
            return js_string(part.value)
        imports["fs"] = "import fs from 'fs';"
        if part.value_from_file:
            return f"fs.readFileSync({js_string(part.file)}, 'utf8')"
        value = f"fs.createReadStream({js_string(part.file)})"
        options = []
        if part.filename:
            options.append(("filename", js_string(part.filename)))
        if part.content_type:
            options.append(("contentType", js_string(part.content_type)))
        if options:
            value += ", " + js_object(options)
        return value

    def _transport(self, imports: dict[str, str]) -> list[tuple[str, str]]:
        req = self.request
        config = []
        if req.timeout is not None:
            config.append(("timeout", str(round(req.timeout * 1000))))
        if req.follow_redirects and req.max_redirects is not None:
            config.append(("maxRedirects", str(req.max_redirects)))
        if req.tls.insecure:
            imports["https"] = "import https from 'https';"
            config.append(("httpsAgent", "new https.Agent({ rejectUnauthorized: false })"))
        if req.proxy is not None:
            config.append(("proxy", self._proxy()))
        elif req.proxy_auth is not None:
            self.warn("--proxy-user was given without a proxy, it was ignored")
        return config

    def _proxy(self) -> str:
        req = self.request
        proxy = req.proxy if "://" in req.proxy else f"http://{req.proxy}"
        split = urlsplit(proxy)
        try:
            port = split.port
        except ValueError:
            self.warn(f"the proxy port in {req.proxy} isn't a number, the default port is used")
            port = None
        items = [
            ("protocol", js_string(split.scheme)),
            ("host", js_string(split.hostname or "")),
            ("port", str(port or DEFAULT_PROXY_PORTS.get(split.scheme, 1080))),
        ]
        if req.proxy_auth is not None:
            items.append(("auth", js_object([
                ("username", js_string(req.proxy_auth[0])),
                ("password", js_string(req.proxy_auth[1])),
            ], level=3)))
        return js_object(items, level=2)


generate = AxiosGenerator.generate
generate_from_text = text_converter(generate)
