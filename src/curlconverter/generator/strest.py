"""Strest generator, a YAML test file for the strest runner."""

from urllib.parse import parse_qsl, urlsplit

import yaml

from curlconverter.generator.base import BaseGenerator, text_converter


class StrestGenerator(BaseGenerator):
    language = "strest"
    supported = frozenset({"insecure", "digest"})

    def render(self) -> str:
        req = self.request
        split = urlsplit(req.url)
        request: dict = {"url": req.url.split("?", 1)[0].split("#", 1)[0], "method": req.method}

        headers = [{"name": name, "value": value} for name, value in req.headers]
        if req.cookies:
            headers.append({"name": "Cookie", "value": req.cookie_header()})
        if req.auth.kind == "bearer":
            headers.append({"name": "Authorization", "value": f"Bearer {req.auth.token}"})
        if headers:
            request["headers"] = headers

        if split.query:
            request["queryString"] = [
                {"name": name, "value": value} for name, value in parse_qsl(split.query, keep_blank_values=True)
            ]

        post_data = self._post_data()
        if post_data:
            request["postData"] = post_data

        entry: dict = {"request": request}
        if req.auth.kind in ("basic", "digest"):
            if req.auth.kind == "digest":
                self.warn("strest only does basic auth; the digest credentials are sent as basic auth")
            entry["auth"] = {"basic": {"username": req.auth.user, "password": req.auth.password}}
        if req.tls.insecure:
            entry["allowInsecure"] = True

        doc = {"version": 2, "requests": {"curl_converter": entry}}
        return yaml.safe_dump(doc, sort_keys=False, default_flow_style=False, allow_unicode=True)

    def _post_data(self) -> dict | None:
        body = self.request.body
        if self.request.upload_file is not None:
            self.fail("a strest file can't send the contents of a local file")
        if body.kind == "urlencoded":
            return {
                "mimeType": self.request.content_type,
                "params": [{"name": name, "value": value} for name, value in body.fields],
            }
        if body.kind == "raw":
            if body.file is not None:
                self.fail("a strest file can't send a body read from a file or standard input")
            return {"mimeType": self.request.content_type, "text": body.data}
        if body.kind == "multipart":
            params = []
            for part in body.parts:
                if part.file is not None:
                    self.fail("a strest file can't upload local files")
                params.append({"name": part.name, "value": part.value})
            return {"mimeType": "multipart/form-data", "params": params}
        return None


generate = StrestGenerator.generate
generate_from_text = text_converter(generate)
