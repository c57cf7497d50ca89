"""Go generator, a ``main`` package using ``net/http``."""

import json

from curlconverter.generator.base import BaseGenerator, text_converter

FATAL = ["\tif err != nil {", "\t\tlog.Fatal(err)", "\t}"]


def go_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


class GoGenerator(BaseGenerator):
    language = "go"
    supported = frozenset({
        "proxy", "proxy_auth", "insecure", "follow_redirects", "timeout", "compressed", "upload_file",
    })

    def __init__(self, request):
        super().__init__(request)
        self.imports = {"fmt", "io", "log", "net/http"}

    def render(self) -> str:
        req = self.request
        lines = self._client()
        body_lines, reader = self._body()
        lines += body_lines

        lines.append(f"\treq, err := http.NewRequest({go_string(req.method)}, {go_string(req.url)}, {reader})")
        lines += FATAL

        for name, value in self._headers():
            lines.append(f"\treq.Header.{self._header_call(name)}({go_string(name)}, {go_string(value)})")
        if req.body.kind == "multipart":
            lines.append('\treq.Header.Set("Content-Type", writer.FormDataContentType())')
        if req.auth.kind == "basic":
            lines.append(f"\treq.SetBasicAuth({go_string(req.auth.user)}, {go_string(req.auth.password)})")

        lines.append("\tresp, err := client.Do(req)")
        lines += FATAL
        lines.append("\tdefer resp.Body.Close()")
        lines.append("\tbodyText, err := io.ReadAll(resp.Body)")
        lines += FATAL
        lines.append('\tfmt.Printf("%s\\n", bodyText)')

        imports = "\n".join(f'\t"{name}"' for name in sorted(self.imports))
        return "package main\n\nimport (\n" + imports + "\n)\n\nfunc main() {\n" + "\n".join(lines) + "\n}\n"

    def _header_call(self, name: str) -> str:
        # Set for the first occurrence, Add for repeats so duplicates survive.
        seen = self._seen_headers
        key = name.lower()
        if key in seen:
            return "Add"
        seen.add(key)
        return "Set"

    def _headers(self) -> list[tuple[str, str]]:
        req = self.request
        self._seen_headers: set[str] = set()
        headers = list(req.headers)
        implied = self.implied_content_type()
        if implied and req.body.kind != "multipart":
            headers.append(("Content-Type", implied))
        if req.cookies:
            headers.append(("Cookie", req.cookie_header()))
        if req.auth.kind == "bearer":
            headers.append(("Authorization", f"Bearer {req.auth.token}"))
        return headers

    def _client(self) -> list[str]:
        req = self.request
        transport = []
        lines = []
        if req.tls.insecure:
            self.imports.add("crypto/tls")
            transport.append("\t\tTLSClientConfig: &tls.Config{InsecureSkipVerify: true},")
        if req.proxy is not None:
            self.imports.add("net/url")
            proxy = req.proxy if "://" in req.proxy else f"http://{req.proxy}"
            if req.proxy_auth is not None:
                scheme, _, rest = proxy.partition("://")
                proxy = f"{scheme}://{req.proxy_auth[0]}:{req.proxy_auth[1]}@{rest}"
            lines.append(f"\tproxyURL, err := url.Parse({go_string(proxy)})")
            lines += FATAL
            transport.append("\t\tProxy: http.ProxyURL(proxyURL),")
        elif req.proxy_auth is not None:
            self.warn("--proxy-user was given without a proxy, it was ignored")

        fields = []
        if transport:
            lines += ["\ttransport := &http.Transport{", *transport, "\t}"]
            fields.append("Transport: transport")
        if req.timeout is not None:
            self.imports.add("time")
            fields.append(f"Timeout: {round(req.timeout * 1000)} * time.Millisecond")
        lines.append("\tclient := &http.Client{" + ", ".join(fields) + "}")
        return lines

    def _open(self, var: str, path: str) -> list[str]:
        self.imports.add("os")
        if path == "-":
            return [f"\t{var} := os.Stdin"]
        return [f"\t{var}, err := os.Open({go_string(path)})", *FATAL, f"\tdefer {var}.Close()"]

    def _body(self) -> tuple[list[str], str]:
        req = self.request
        body = req.body
        if req.upload_file is not None:
            return self._open("data", req.upload_file), "data"
        if body.kind in ("urlencoded", "raw"):
            if body.kind == "raw" and body.file is not None:
                return self._open("data", body.file), "data"
            self.imports.add("strings")
            text = body.raw if body.kind == "urlencoded" else body.data
            return [f"\tvar data = strings.NewReader({go_string(text)})"], "data"
        if body.kind == "multipart":
            return self._multipart(), "form"
        return [], "nil"

    def _multipart(self) -> list[str]:
        self.imports.update({"bytes", "mime/multipart"})
        lines = ["\tform := new(bytes.Buffer)", "\twriter := multipart.NewWriter(form)"]
        for i, part in enumerate(self.request.body.parts):
            name = go_string(part.name)
            if part.value_from_file:
                self.imports.add("os")
                lines.append(f"\tcontent{i}, err := os.ReadFile({go_string(part.file)})")
                lines += FATAL
                lines.append(f"\tif err := writer.WriteField({name}, string(content{i})); err != nil {{")
            elif part.file is not None:
                if part.content_type:
                    self.warn(f"the Content-Type of form field {part.name} isn't supported in Go, it was ignored")
                filename = part.filename or part.file.rsplit("/", 1)[-1]
                lines.append(f"\tpart{i}, err := writer.CreateFormFile({name}, {go_string(filename)})")
                lines += FATAL
                lines += self._open(f"file{i}", part.file)
                lines.append(f"\tif _, err := io.Copy(part{i}, file{i}); err != nil {{")
            else:
                lines.append(f"\tif err := writer.WriteField({name}, {go_string(part.value)}); err != nil {{")
            lines += ["\t\tlog.Fatal(err)", "\t}"]
        lines.append("\twriter.Close()")
        return lines


generate = GoGenerator.generate
generate_from_text = text_converter(generate)
