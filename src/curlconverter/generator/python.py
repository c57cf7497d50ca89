"""Python generator. Emits a script using the ``requests`` library."""

from urllib.parse import urlencode

from curlconverter.generator.base import BaseGenerator, text_converter
from curlconverter.request.models import MultipartPart

SHORTCUT_METHODS = {"GET", "POST", "PUT", "DELETE", "HEAD", "PATCH", "OPTIONS"}


def _dict(name: str, items: list[tuple[str, object]]) -> list[str]:
    lines = [f"{name} = {{"]
    for key, value in items:
        lines.append(f"    {key!r}: {value},")
    lines.append("}")
    return lines


class PythonGenerator(BaseGenerator):
    language = "python"
    supported = frozenset({
        "proxy", "proxy_auth", "insecure", "cert", "cacert", "follow_redirects",
        "timeout", "connect_timeout", "compressed", "upload_file", "digest",
    })

    def render(self) -> str:
        req = self.request
        imports = ["import requests"]
        blocks: list[list[str]] = []
        args = [repr(req.url)]

        if req.auth.kind == "digest":
            imports.append("from requests.auth import HTTPDigestAuth")

        if req.cookies:
            blocks.append(_dict("cookies", [(k, repr(v)) for k, v in req.cookies]))
            args.append("cookies=cookies")

        headers = self.merged_headers()
        implied = self.implied_content_type()
        if implied and req.body.kind == "raw":
            headers.append(("Content-Type", implied))
        if req.auth.kind == "bearer":
            headers.append(("Authorization", f"Bearer {req.auth.token}"))
        if headers:
            blocks.append(_dict("headers", [(k, repr(v)) for k, v in headers]))
            args.append("headers=headers")

        body_block, body_arg, body_imports = self._render_body()
        imports = body_imports + imports
        if body_block:
            blocks.append(body_block)
        if body_arg:
            args.append(body_arg)

        args.extend(self._render_options(blocks))

        if req.method in SHORTCUT_METHODS:
            call = f"requests.{req.method.lower()}({', '.join(args)})"
        else:
            call = f"requests.request({req.method!r}, {', '.join(args)})"

        sections = ["\n".join(dict.fromkeys(imports))]
        sections.extend("\n".join(block) for block in blocks)
        sections.append(f"response = {call}")
        return "\n\n".join(sections) + "\n"

    def _render_body(self) -> tuple[list[str], str | None, list[str]]:
        req = self.request
        body = req.body

        if req.upload_file is not None:
            return [], f"data=open({req.upload_file!r}, 'rb')", []

        if body.kind == "urlencoded":
            # Only use a dict when requests would encode it back to exactly what curl sends.
            if urlencode(body.fields) == body.raw:
                names = [name for name, _ in body.fields]
                if len(set(names)) == len(names):
                    return _dict("data", [(k, repr(v)) for k, v in body.fields]), "data=data", []
                lines = ["data = ["] + [f"    ({k!r}, {v!r})," for k, v in body.fields] + ["]"]
                return lines, "data=data", []
            return [f"data = {body.raw!r}"], "data=data", []

        if body.kind == "raw":
            if body.from_stdin:
                return ["data = sys.stdin.buffer.read()"], "data=data", ["import sys"]
            if body.file is not None:
                return [f"with open({body.file!r}, 'rb') as f:", "    data = f.read()"], "data=data", []
            return [f"data = {body.data!r}"], "data=data", []

        if body.kind == "multipart":
            items = [(part.name, self._render_part(part)) for part in body.parts]
            names = [name for name, _ in items]
            if len(set(names)) == len(names):
                return _dict("files", items), "files=files", []
            lines = ["files = ["] + [f"    ({k!r}, {v})," for k, v in items] + ["]"]
            return lines, "files=files", []

        return [], None, []

    def _render_part(self, part: MultipartPart) -> str:
        if part.value_from_file:
            content = f"open({part.file!r}).read()"
            filename = "None"
        elif part.file is not None:
            content = f"open({part.file!r}, 'rb')"
            filename = repr(part.filename if part.filename is not None else part.file.rsplit("/", 1)[-1])
        else:
            content = repr(part.value)
            filename = "None"
        if part.content_type:
            return f"({filename}, {content}, {part.content_type!r})"
        return f"({filename}, {content})"

    def _render_options(self, blocks: list[list[str]]) -> list[str]:
        req = self.request
        args = []

        if req.auth.kind == "basic":
            args.append(f"auth=({req.auth.user!r}, {req.auth.password!r})")
        elif req.auth.kind == "digest":
            args.append(f"auth=HTTPDigestAuth({req.auth.user!r}, {req.auth.password!r})")

        if req.proxy:
            proxy = req.proxy
            if req.proxy_auth is not None:
                scheme, sep, rest = proxy.rpartition("://")
                user, password = req.proxy_auth
                proxy = f"{scheme}{sep}{user}:{password}@{rest}"
            blocks.append(_dict("proxies", [("http", repr(proxy)), ("https", repr(proxy))]))
            args.append("proxies=proxies")
        elif req.proxy_auth is not None:
            self.warn("--proxy-user was given without a proxy, it was ignored")

        if req.tls.cert is not None:
            if req.tls.key is not None:
                args.append(f"cert=({req.tls.cert!r}, {req.tls.key!r})")
            else:
                args.append(f"cert={req.tls.cert!r}")
        elif req.tls.key is not None:
            self.warn("--key was given without --cert, it was ignored")

        if req.tls.insecure:
            args.append("verify=False")
        elif req.tls.cacert is not None:
            args.append(f"verify={req.tls.cacert!r}")

        if req.connect_timeout is not None:
            args.append(f"timeout=({req.connect_timeout!r}, {req.timeout!r})")
        elif req.timeout is not None:
            args.append(f"timeout={req.timeout!r}")

        # requests follows redirects on its own, except for HEAD.
        if req.follow_redirects and req.method == "HEAD":
            args.append("allow_redirects=True")
        return args


generate = PythonGenerator.generate
generate_from_text = text_converter(generate)
