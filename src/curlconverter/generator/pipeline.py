"""Parse -> build -> generate, with warnings threaded through as return values."""

from typing import Callable, Sequence

from curlconverter.errors import ConversionWarning, CurlConverterError
from curlconverter.parser.args import ParsedArguments, parse_args
from curlconverter.parser.shell import split_command
from curlconverter.request.builder import build_request
from curlconverter.request.models import Request

Generate = Callable[[Request], tuple[str, list[ConversionWarning]]]


def _stage(func, arg, prior: list[ConversionWarning]):
    """Run one stage; its warnings are appended to ``prior``, also when it fails."""
    try:
        result, warnings = func(arg)
    except CurlConverterError as e:
        raise e.with_prior_warnings(prior)
    return result, prior + warnings


def build_from_parsed(parsed: ParsedArguments, generate: Generate) -> tuple[str, list[ConversionWarning]]:
    request, warnings = _stage(build_request, parsed, [])
    return _stage(generate, request, warnings)


def convert_tokens(
    tokens: Sequence[str],
    generate: Generate,
    strict: bool = True,
) -> tuple[str, list[ConversionWarning]]:
    """Convert curl arguments (without the leading ``curl``) to code."""
    parsed, warnings = parse_args(tokens, strict=strict)
    request, warnings = _stage(build_request, parsed, warnings)
    return _stage(generate, request, warnings)


def convert_text(text: str, generate: Generate) -> tuple[str, list[ConversionWarning]]:
    """Convert a whole ``curl ...`` command line to code."""
    return convert_tokens(split_command(text), generate)
