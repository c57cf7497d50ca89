"""JavaScript generators: ``fetch()`` in the browser and ``node-fetch`` in Node.js."""

import json
import re

from curlconverter.generator.base import BaseGenerator, text_converter
from curlconverter.request.models import MultipartPart

_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")

FILE_INPUT = "document.querySelector('input[type=file]').files[0]"


def js_string(value: str) -> str:
    return json.dumps(value)


def js_key(key: str) -> str:
    return key if _IDENTIFIER.fullmatch(key) else js_string(key)


def js_object(items: list[tuple[str, str]], level: int = 1) -> str:
    """An object literal from (key, already rendered value) pairs."""
    if not items:
        return "{}"
    pad = "    " * level
    inner = ",\n".join(f"{pad}{js_key(key)}: {value}" for key, value in items)
    return "{\n" + inner + "\n" + "    " * (level - 1) + "}"


class FetchGenerator(BaseGenerator):
    language = "javascript"
    supported = frozenset({"follow_redirects", "timeout", "compressed", "upload_file"})

    def __init__(self, request):
        super().__init__(request)
        self.imports: dict[str, str] = {}

    def render(self) -> str:
        req = self.request
        preamble: list[str] = []
        options: list[tuple[str, str]] = []

        if req.method != "GET":
            options.append(("method", js_string(req.method)))

        headers = [(name, js_string(value)) for name, value in self.merged_headers()]
        implied = self.implied_content_type()
        if implied:
            headers.append(("Content-Type", js_string(implied)))
        if req.cookies:
            self.check_cookies()
            headers.append(("Cookie", js_string(req.cookie_header())))
        if req.auth.kind == "basic":
            headers.append(("Authorization", self.basic_auth(f"{req.auth.user}:{req.auth.password}")))
        elif req.auth.kind == "bearer":
            headers.append(("Authorization", js_string(f"Bearer {req.auth.token}")))
        if headers:
            options.append(("headers", js_object(headers, level=2)))

        body = self.render_body(preamble)
        if body is not None:
            options.append(("body", body))
        if req.timeout is not None:
            options.append(("signal", f"AbortSignal.timeout({round(req.timeout * 1000)})"))
        options.extend(self.extra_options())

        call = f"fetch({js_string(req.url)}"
        if options:
            call += ", " + js_object(options)
        call += ");"

        sections = []
        if self.imports:
            sections.append("\n".join(self.imports.values()))
        if preamble:
            sections.append("\n".join(preamble))
        sections.append(call)
        return "\n\n".join(sections) + "\n"

    # -- hooks overridden for Node.js -----------------------------------------

    def check_cookies(self) -> None:
        self.warn("browsers don't let fetch() set the Cookie header; it is only sent outside a browser")

    def basic_auth(self, credentials: str) -> str:
        return f"'Basic ' + btoa({js_string(credentials)})"

    def file_contents(self, path: str, text: bool = False) -> str:
        source = "standard input" if path == "-" else path
        self.warn(f"a browser can't read {source} from disk; the code takes the file from a file <input> instead")
        return f"await {FILE_INPUT}.text()" if text else FILE_INPUT

    def upload(self, part: MultipartPart) -> str:
        return self.file_contents(part.file)

    def extra_options(self) -> list[tuple[str, str]]:
        return []

    def form_data(self) -> str:
        return "new FormData()"

    # -- body -----------------------------------------------------------------

    def render_body(self, preamble: list[str]) -> str | None:
        req = self.request
        body = req.body
        if req.upload_file is not None:
            return self.file_contents(req.upload_file)
        if body.kind == "urlencoded":
            return js_string(body.raw)
        if body.kind == "raw":
            if body.file is not None:
                return self.file_contents(body.file)
            return js_string(body.data)
        if body.kind == "multipart":
            preamble.append(f"const form = {self.form_data()};")
            for part in body.parts:
                if part.value_from_file:
                    value = self.file_contents(part.file, text=True)
                elif part.file is not None:
                    value = self.upload(part)
                else:
                    value = js_string(part.value)
                preamble.append(f"form.append({js_string(part.name)}, {value});")
            return "form"
        return None


class NodeFetchGenerator(FetchGenerator):
    language = "node"
    supported = FetchGenerator.supported | {"insecure"}

    def render(self) -> str:
        self.imports["fetch"] = "import fetch from 'node-fetch';"
        return super().render()

    def check_cookies(self) -> None:
        pass

    def basic_auth(self, credentials: str) -> str:
        return f"'Basic ' + Buffer.from({js_string(credentials)}).toString('base64')"

    def file_contents(self, path: str, text: bool = False) -> str:
        self.imports["fs"] = "import fs from 'fs';"
        source = "0" if path == "-" else js_string(path)
        return f"fs.readFileSync({source}, 'utf8')" if text else f"fs.readFileSync({source})"

    def upload(self, part: MultipartPart) -> str:
        self.imports["fetch"] = "import fetch, { FormData, fileFromSync } from 'node-fetch';"
        args = [js_string(part.file)]
        if part.content_type:
            args.append(js_string(part.content_type))
        value = f"fileFromSync({', '.join(args)})"
        if part.filename:
            value += f", {js_string(part.filename)}"
        return value

    def form_data(self) -> str:
        if "FormData" not in self.imports["fetch"]:
            self.imports["fetch"] = "import fetch, { FormData } from 'node-fetch';"
        return "new FormData()"

    def extra_options(self) -> list[tuple[str, str]]:
        if not self.request.tls.insecure:
            return []
        self.imports["https"] = "import https from 'https';"
        return [("agent", "new https.Agent({ rejectUnauthorized: false })")]


generate_browser = FetchGenerator.generate
generate_browser_from_text = text_converter(generate_browser)

generate_node = NodeFetchGenerator.generate
generate_node_from_text = text_converter(generate_node)
