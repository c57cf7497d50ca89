"""CLI entry point for curlconverter."""

import traceback

import click

from curlconverter.config import default_language, version_string
from curlconverter.errors import ConversionWarning, CurlConverterError
from curlconverter.generator.pipeline import build_from_parsed
from curlconverter.generator.registry import Language, lookup
from curlconverter.parser.args import ensure_stdin_alone, parse_args
from curlconverter.parser.options import CLI_TABLE, CONVERTER_OPTION_NAMES


def usage() -> str:
    choices = "\n".join(
        f"  {member.value} (the default)" if member.value == default_language() else f"  {member.value}"
        for member in Language
    )
    return (
        "Usage: curlconverter [--language <language>] [-] [curl_options...]\n"
        "\n"
        "language: the language to convert the curl command to. The choices are\n"
        f"{choices}\n"
        "\n"
        "-: read curl command from stdin\n"
        "\n"
        "curl_options: these should be passed exactly as they would be passed to curl.\n"
        "  see 'curl --help' or 'curl --manual' for which options are allowed here"
    )


def render_error(err: Exception, verbose: bool = False) -> str:
    """Text printed to stderr for a failed conversion."""
    if verbose:
        return "".join(traceback.format_exception(type(err), err, err.__traceback__)).rstrip()
    message = err.message if isinstance(err, CurlConverterError) else str(err)
    return "\n".join(f"error: {line}" for line in message.split("\n"))


def print_warnings(warnings: list[ConversionWarning], verbose: bool) -> None:
    if not verbose:
        return
    for w in warnings:
        for line in w.message.strip().split("\n"):
            click.echo(f"warning: {line}", err=True)


def fail(ctx: click.Context, err: CurlConverterError, verbose: bool) -> None:
    # Warnings collected before the failure usually explain it.
    print_warnings(err.warnings, True)
    click.echo(render_error(err, verbose), err=True)
    ctx.exit(2)


def warn_whole_command(urls: list[str]) -> None:
    """Hint for people passing ``'curl example.com'`` as one argument."""
    if any(url.startswith("curl ") for url in urls):
        click.echo("warning: Passing a whole curl command as a single argument?", err=True)
        click.echo("warning: Pass options to curlconverter as if it was curl instead:", err=True)
        click.echo("warning: curlconverter 'curl example.com' -> curlconverter example.com", err=True)


@click.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
    add_help_option=False,
)
@click.argument("argv", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def main(ctx: click.Context, argv: tuple[str, ...]):
    """Convert a curl command to code in another language."""
    try:
        parsed, warnings = parse_args(argv, table=CLI_TABLE)
    except CurlConverterError as e:
        fail(ctx, e, "--verbose" in argv or "-v" in argv)
        return

    if parsed.get("help"):
        click.echo(usage())
        ctx.exit(0)
    if parsed.get("version"):
        click.echo(version_string())
        ctx.exit(0)
    if not argv:
        click.echo(usage())
        ctx.exit(2)

    verbose = bool(parsed.get("verbose"))
    try:
        entry = lookup(parsed.get("language") or default_language())
    except CurlConverterError as e:
        fail(ctx, e.with_prior_warnings(warnings), verbose)
        return

    if parsed.get("stdin"):
        try:
            ensure_stdin_alone(parsed)
            text = click.get_text_stream("stdin").read()
            code, more = entry.generate_from_text(text)
        except CurlConverterError as e:
            fail(ctx, e.with_prior_warnings(warnings), verbose)
            return
    else:
        curl_args = parsed.without(CONVERTER_OPTION_NAMES)
        warn_whole_command(list(curl_args.get("url", [])) + curl_args.positionals)
        try:
            code, more = build_from_parsed(curl_args, entry.generate)
        except CurlConverterError as e:
            fail(ctx, e.with_prior_warnings(warnings), verbose)
            return

    print_warnings(warnings + more, verbose)
    click.echo(code, nl=False)
