"""PHP generator using the curl extension."""

from curlconverter.generator.base import FEATURES, BaseGenerator, text_converter

HTTP_VERSIONS = {
    "1.0": "CURL_HTTP_VERSION_1_0",
    "1.1": "CURL_HTTP_VERSION_1_1",
    "2": "CURL_HTTP_VERSION_2_0",
    "2-prior-knowledge": "CURL_HTTP_VERSION_2_PRIOR_KNOWLEDGE",
    "3": "CURL_HTTP_VERSION_3",
}


def php_string(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def php_file(path: str) -> str:
    return php_string("php://stdin" if path == "-" else path)


class PhpGenerator(BaseGenerator):
    language = "php"
    # ext-curl is libcurl, so every transport setting has an option.
    supported = frozenset(FEATURES)

    def render(self) -> str:
        req = self.request
        self.options: list[tuple[str, str]] = [("CURLOPT_URL", php_string(req.url))]
        if req.method == "HEAD":
            self.options.append(("CURLOPT_NOBODY", "true"))
        elif req.method != "GET":
            self.options.append(("CURLOPT_CUSTOMREQUEST", php_string(req.method)))
        self.options.append(("CURLOPT_RETURNTRANSFER", "true"))

        if req.headers:
            lines = "".join(f"    {php_string(f'{name}: {value}')},\n" for name, value in req.headers)
            self.options.append(("CURLOPT_HTTPHEADER", "[\n" + lines + "]"))
        if req.cookies:
            self.options.append(("CURLOPT_COOKIE", php_string(req.cookie_header())))
        if req.cookie_jar is not None:
            self.options.append(("CURLOPT_COOKIEJAR", php_string(req.cookie_jar)))
        self._auth()
        self._body()
        self._transport()

        setopts = "".join(f"curl_setopt($ch, {name}, {value});\n" for name, value in self.options)
        return (
            "<?php\n"
            "$ch = curl_init();\n"
            f"{setopts}\n"
            "$response = curl_exec($ch);\n\n"
            "curl_close($ch);\n"
        )

    def _auth(self) -> None:
        auth = self.request.auth
        if auth.kind in ("basic", "digest"):
            self.options.append(("CURLOPT_USERPWD", php_string(f"{auth.user}:{auth.password}")))
            if auth.kind == "digest":
                self.options.append(("CURLOPT_HTTPAUTH", "CURLAUTH_DIGEST"))
        elif auth.kind == "bearer":
            self.options.append(("CURLOPT_HTTPAUTH", "CURLAUTH_BEARER"))
            self.options.append(("CURLOPT_XOAUTH2_BEARER", php_string(auth.token)))

    def _body(self) -> None:
        req = self.request
        body = req.body
        if req.upload_file is not None:
            self.options.append(("CURLOPT_UPLOAD", "true"))
            self.options.append(("CURLOPT_INFILE", f"fopen({php_file(req.upload_file)}, 'r')"))
            if req.upload_file != "-":
                self.options.append(("CURLOPT_INFILESIZE", f"filesize({php_string(req.upload_file)})"))
        elif body.kind == "urlencoded":
            self.options.append(("CURLOPT_POSTFIELDS", php_string(body.raw)))
        elif body.kind == "raw":
            if body.file is not None:
                value = f"file_get_contents({php_file(body.file)})"
            else:
                value = php_string(body.data)
            self.options.append(("CURLOPT_POSTFIELDS", value))
        elif body.kind == "multipart":
            self.options.append(("CURLOPT_POSTFIELDS", self._multipart()))

    def _multipart(self) -> str:
        fields: dict[str, str] = {}
        for part in self.request.body.parts:
            if part.name in fields:
                self.warn(f"a PHP array can't hold the form field {part.name} twice; only the last one is kept")
            if part.value_from_file:
                value = f"file_get_contents({php_file(part.file)})"
            elif part.file is not None:
                args = [php_string(part.file)]
                if part.content_type or part.filename:
                    args.append(php_string(part.content_type or ""))
                if part.filename:
                    args.append(php_string(part.filename))
                value = f"new CURLFile({', '.join(args)})"
            else:
                if part.content_type:
                    self.warn(f"the Content-Type of form field {part.name} can't be set in PHP, it was ignored")
                value = php_string(part.value)
            fields[part.name] = value
        lines = "".join(f"    {php_string(name)} => {value},\n" for name, value in fields.items())
        return "[\n" + lines + "]"

    def _transport(self) -> None:
        req = self.request
        opts = self.options
        if req.proxy is not None:
            opts.append(("CURLOPT_PROXY", php_string(req.proxy)))
        if req.proxy_auth is not None:
            opts.append(("CURLOPT_PROXYUSERPWD", php_string(f"{req.proxy_auth[0]}:{req.proxy_auth[1]}")))
        if req.tls.insecure:
            opts.append(("CURLOPT_SSL_VERIFYPEER", "false"))
            opts.append(("CURLOPT_SSL_VERIFYHOST", "false"))
        if req.tls.cert is not None:
            opts.append(("CURLOPT_SSLCERT", php_string(req.tls.cert)))
        if req.tls.key is not None:
            opts.append(("CURLOPT_SSLKEY", php_string(req.tls.key)))
        if req.tls.cacert is not None:
            opts.append(("CURLOPT_CAINFO", php_string(req.tls.cacert)))
        if req.follow_redirects:
            opts.append(("CURLOPT_FOLLOWLOCATION", "true"))
        if req.max_redirects is not None:
            opts.append(("CURLOPT_MAXREDIRS", str(req.max_redirects)))
        if req.timeout is not None:
            opts.append(("CURLOPT_TIMEOUT_MS", str(round(req.timeout * 1000))))
        if req.connect_timeout is not None:
            opts.append(("CURLOPT_CONNECTTIMEOUT_MS", str(round(req.connect_timeout * 1000))))
        if req.compressed:
            opts.append(("CURLOPT_ENCODING", "''"))
        if req.http_version is not None:
            opts.append(("CURLOPT_HTTP_VERSION", HTTP_VERSIONS[req.http_version]))


generate = PhpGenerator.generate
generate_from_text = text_converter(generate)
