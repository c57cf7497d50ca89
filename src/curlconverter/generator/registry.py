"""Language keys and the backends registered under them."""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Callable, NamedTuple, Sequence

from curlconverter.errors import ConversionWarning, UnsupportedLanguageError
from curlconverter.generator import ansible, axios, go, javascript, json_string, php, python, ruby, strest
from curlconverter.generator.pipeline import Generate, convert_text, convert_tokens

logger = logging.getLogger(__name__)


class Language(str, Enum):
    ANSIBLE = "ansible"
    GO = "go"
    JAVASCRIPT = "javascript"
    JSON = "json"
    NODE = "node"
    NODE_AXIOS = "node-axios"
    PHP = "php"
    PYTHON = "python"
    RUBY = "ruby"
    STREST = "strest"


class GeneratorEntry(NamedTuple):
    generate: Generate
    generate_from_text: Callable[[str], tuple[str, list[ConversionWarning]]]


REGISTRY = MappingProxyType({
    Language.ANSIBLE: GeneratorEntry(ansible.generate, ansible.generate_from_text),
    Language.GO: GeneratorEntry(go.generate, go.generate_from_text),
    Language.JAVASCRIPT: GeneratorEntry(javascript.generate_browser, javascript.generate_browser_from_text),
    Language.JSON: GeneratorEntry(json_string.generate, json_string.generate_from_text),
    Language.NODE: GeneratorEntry(javascript.generate_node, javascript.generate_node_from_text),
    Language.NODE_AXIOS: GeneratorEntry(axios.generate, axios.generate_from_text),
    Language.PHP: GeneratorEntry(php.generate, php.generate_from_text),
    Language.PYTHON: GeneratorEntry(python.generate, python.generate_from_text),
    Language.RUBY: GeneratorEntry(ruby.generate, ruby.generate_from_text),
    Language.STREST: GeneratorEntry(strest.generate, strest.generate_from_text),
})

_missing = [member.value for member in Language if member not in REGISTRY]
if _missing:
    raise RuntimeError(f"no generator registered for: {', '.join(_missing)}")

# Undocumented keys kept for older callers.
ALIASES = MappingProxyType({
    "browser": Language.JAVASCRIPT,
    "node-fetch": Language.NODE,
    "javascript-axios": Language.NODE_AXIOS,
})


def language_keys() -> list[str]:
    """Every accepted --language value, canonical keys first."""
    return sorted(member.value for member in Language) + sorted(ALIASES)


def resolve_language(key: str) -> Language:
    if key in ALIASES:
        return ALIASES[key]
    try:
        return Language(key)
    except ValueError:
        raise UnsupportedLanguageError(
            f'unexpected --language: "{key}"\nmust be one of: {", ".join(language_keys())}',
            details={"language": key, "choices": language_keys()},
        ) from None


def lookup(key: str) -> GeneratorEntry:
    language = resolve_language(key)
    logger.debug("language %r resolved to %s", key, language.value)
    return REGISTRY[language]


def convert(command: str | Sequence[str], language: str = "python") -> tuple[str, list[ConversionWarning]]:
    """Library entry point.

    ``command`` is either a whole ``curl ...`` command line or the argument
    list that follows ``curl``.
    """
    entry = lookup(language)
    if isinstance(command, str):
        return convert_text(command, entry.generate)
    return convert_tokens(command, entry.generate)
