"""Ansible generator: a playbook task using the ``uri`` module."""

from urllib.parse import urlsplit

import yaml

from curlconverter.generator.base import BaseGenerator, text_converter


class AnsibleGenerator(BaseGenerator):
    language = "ansible"
    supported = frozenset({
        "insecure", "cert", "cacert", "follow_redirects", "timeout", "compressed", "upload_file", "digest",
    })

    def render(self) -> str:
        req = self.request
        uri: dict = {"url": req.url, "method": req.method}

        headers = dict(self.merged_headers())
        if req.cookies:
            headers["Cookie"] = req.cookie_header()
        if req.auth.kind == "bearer":
            headers["Authorization"] = f"Bearer {req.auth.token}"

        body = req.body
        if body.kind == "urlencoded":
            uri["body_format"] = "form-urlencoded"
            uri["body"] = body.raw
        elif body.kind == "raw":
            if body.from_stdin:
                self.fail("the uri module can't read the request body from standard input")
            if body.file is not None:
                uri["src"] = body.file
            else:
                uri["body"] = body.data
            implied = self.implied_content_type()
            if implied:
                headers["Content-Type"] = implied
        elif body.kind == "multipart":
            uri["body_format"] = "form-multipart"
            uri["body"] = self._multipart()
        if req.upload_file == "-":
            self.fail("the uri module can't upload a file from standard input")
        if req.upload_file is not None:
            uri["src"] = req.upload_file

        if headers:
            uri["headers"] = headers

        if req.auth.kind in ("basic", "digest"):
            uri["url_username"] = req.auth.user
            uri["url_password"] = req.auth.password
            # Without force_basic_auth the module answers the server's challenge, digest included.
            if req.auth.kind == "basic":
                uri["force_basic_auth"] = True

        if req.tls.insecure:
            uri["validate_certs"] = False
        if req.tls.cert is not None:
            uri["client_cert"] = req.tls.cert
        if req.tls.key is not None:
            uri["client_key"] = req.tls.key
        if req.tls.cacert is not None:
            uri["ca_path"] = req.tls.cacert
        if req.follow_redirects:
            uri["follow_redirects"] = "all"
        if req.timeout is not None:
            uri["timeout"] = max(1, round(req.timeout))
        if req.compressed:
            uri["decompress"] = True
        uri["return_content"] = True

        task = {"name": urlsplit(req.url).hostname, "uri": uri, "register": "result"}
        return yaml.safe_dump([task], sort_keys=False, default_flow_style=False, allow_unicode=True)

    def _multipart(self) -> dict:
        fields: dict = {}
        for part in self.request.body.parts:
            if part.name in fields:
                self.warn(f"the uri module can't send the form field {part.name} twice; only the last one is kept")
            if part.value_from_file:
                fields[part.name] = {"content": f"{{{{ lookup('file', '{part.file}') }}}}"}
            elif part.file is not None:
                entry = {"filename": part.file}
                if part.content_type:
                    entry["mime_type"] = part.content_type
                fields[part.name] = entry
            elif part.content_type:
                fields[part.name] = {"content": part.value, "mime_type": part.content_type}
            else:
                fields[part.name] = part.value
        return fields


generate = AnsibleGenerator.generate
generate_from_text = text_converter(generate)
