"""End-to-end conversions of commands as they are pasted from a browser or a terminal."""

import json

import pytest

from curlconverter.generator.registry import Language, convert
from curlconverter.generator.validator import validate_output

BROWSER_COMMAND = """curl 'https://api.example.com/v1/items?page=2' \\
  -H 'authority: api.example.com' \\
  -H 'accept: application/json' \\
  -H 'content-type: application/json' \\
  -H $'x-note: it\\'s fine' \\
  -b 'session=abc123; theme=dark' \\
  --data-raw '{"name":"widget","tags":["a","b"]}' \\
  --compressed"""


class TestBrowserCommand:
    def test_python(self):
        code, warnings = convert(BROWSER_COMMAND, "python")
        assert validate_output("python", code) is None
        assert "'session': 'abc123'," in code
        assert "'x-note': \"it's fine\"," in code
        assert "data = '{\"name\":\"widget\",\"tags\":[\"a\",\"b\"]}'" in code
        assert "requests.post('https://api.example.com/v1/items?page=2'" in code
        assert warnings == []

    def test_json(self):
        code, _ = convert(BROWSER_COMMAND, "json")
        doc = json.loads(code)
        assert doc["queries"] == {"page": "2"}
        assert doc["cookies"] == {"session": "abc123", "theme": "dark"}
        assert doc["data"] == '{"name":"widget","tags":["a","b"]}'
        assert doc["compressed"] is True

    @pytest.mark.parametrize("language", [member.value for member in Language])
    def test_every_language(self, language):
        code, _ = convert(BROWSER_COMMAND, language)
        assert code.endswith("\n")
        assert "api.example.com" in code


class TestTerminalCommand:
    def test_upload_with_auth(self):
        command = "curl -sSf -u deploy:s3cret -F 'build=@dist/app.tar.gz' -F 'tag=v1.2' https://ci.example.com/upload"
        code, warnings = convert(command, "python")
        assert validate_output("python", code) is None
        assert "auth=('deploy', 's3cret')" in code
        assert "'build': ('app.tar.gz', open('dist/app.tar.gz', 'rb'))," in code
        assert [w.message for w in warnings] == ["--fail isn't supported and was ignored"]
