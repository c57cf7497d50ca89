"""JSON generator: describes the request as a JSON document."""

import json
from urllib.parse import parse_qsl, urlsplit

from curlconverter.generator.base import BaseGenerator, text_converter


class JsonGenerator(BaseGenerator):
    language = "json"
    supported = frozenset({
        "cookie_jar", "proxy", "proxy_auth", "insecure", "cert", "cacert", "follow_redirects",
        "max_redirects", "timeout", "connect_timeout", "compressed", "http_version", "upload_file", "digest",
    })

    def render(self) -> str:
        req = self.request
        split = urlsplit(req.url)
        doc: dict = {
            "url": req.url.split("?", 1)[0].split("#", 1)[0],
            "raw_url": req.url,
            "method": req.method.lower(),
        }
        if split.query:
            doc["queries"] = self._group(parse_qsl(split.query, keep_blank_values=True))
        if req.cookies:
            doc["cookies"] = self._group(req.cookies)
        if req.headers:
            doc["headers"] = self._group(req.headers)

        body = req.body
        if body.kind == "urlencoded":
            doc["data"] = self._group(body.fields)
        elif body.kind == "raw":
            doc["data"] = {"file": body.file} if body.file is not None else body.data
        elif body.kind == "multipart":
            files = [(p.name, p.file) for p in body.parts if p.is_upload]
            fields = [(p.name, p.value if p.file is None else f"<{p.file}") for p in body.parts if not p.is_upload]
            if files:
                doc["files"] = self._group(files)
            if fields:
                doc["data"] = self._group(fields)
        if req.upload_file is not None:
            doc["upload_file"] = req.upload_file

        if req.auth.kind in ("basic", "digest"):
            doc["auth"] = {"user": req.auth.user, "password": req.auth.password}
            if req.auth.kind == "digest":
                doc["auth_type"] = "digest"
        elif req.auth.kind == "bearer":
            doc["auth"] = {"token": req.auth.token}
            doc["auth_type"] = "bearer"

        doc.update(self._transport())
        return json.dumps(doc, indent=4, ensure_ascii=False) + "\n"

    def _transport(self) -> dict:
        req = self.request
        extra: dict = {}
        if req.cookie_jar is not None:
            extra["cookie_jar"] = req.cookie_jar
        if req.tls.insecure:
            extra["insecure"] = True
        for key in ("cert", "key", "cacert"):
            value = getattr(req.tls, key)
            if value is not None:
                extra[key] = value
        if req.proxy is not None:
            extra["proxy"] = req.proxy
        if req.proxy_auth is not None:
            extra["proxy_auth"] = {"user": req.proxy_auth[0], "password": req.proxy_auth[1]}
        if req.follow_redirects:
            extra["follow_redirects"] = True
        for key in ("max_redirects", "timeout", "connect_timeout", "http_version"):
            value = getattr(req, key)
            if value is not None:
                extra[key] = value
        if req.compressed:
            extra["compressed"] = True
        return extra

    @staticmethod
    def _group(items: list[tuple[str, str]]) -> dict:
        """Pairs as an object; a repeated key maps to the list of its values."""
        grouped: dict = {}
        for key, value in items:
            if key not in grouped:
                grouped[key] = value
            elif isinstance(grouped[key], list):
                grouped[key].append(value)
            else:
                grouped[key] = [grouped[key], value]
        return grouped


generate = JsonGenerator.generate
generate_from_text = text_converter(generate)
