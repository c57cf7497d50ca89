"""Process-wide configuration for curlconverter."""

import os

VERSION = "4.3.0"
CURL_VERSION = "7.82.0"

DEFAULT_LANGUAGE = "python"

LANGUAGE_ENV_VAR = "CURLCONVERTER_LANGUAGE"


def version_string() -> str:
    return f"curlconverter {VERSION} (curl {CURL_VERSION})"


def default_language() -> str:
    """Language used when --language isn't passed.

    The CURLCONVERTER_LANGUAGE environment variable overrides the built-in default.
    """
    return os.getenv(LANGUAGE_ENV_VAR) or DEFAULT_LANGUAGE
