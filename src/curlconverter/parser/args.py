"""Flag parser: turns a curl argument list into ParsedArguments.

Replicates curl's own command line handling: short option clusters
(``-sSL``), attached short values (``-XPOST``), ``--name=value``, ``--no-``
negation of boolean options and unambiguous long-option abbreviations.
"""

import logging
from typing import Sequence

from pydantic import BaseModel, ConfigDict

from curlconverter.errors import ArgumentSyntaxError, ConversionWarning, WarningKind, warn
from curlconverter.parser.options import CURL_TABLE, OptionKind, OptionSpec, OptionTable

logger = logging.getLogger(__name__)

Value = bool | str | list[str]

# Flags that may accompany the stdin marker.
STDIN_COMPANIONS = frozenset({"stdin", "verbose", "language"})


class ParsedArguments(BaseModel):
    """Options keyed by canonical name, plus positional arguments (URLs).

    ``order`` holds one canonical name per flag occurrence, in the order the
    flags were given, so that precedence between different options can be
    decided later.
    """

    model_config = ConfigDict(frozen=True)

    values: dict[str, Value] = {}
    positionals: list[str] = []
    order: list[str] = []

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def get(self, name: str, default=None):
        return self.values.get(name, default)

    def names(self) -> list[str]:
        return list(self.values)

    def occurrences(self, names: set[str] | frozenset[str]) -> list[tuple[str, str]]:
        """Values of the given list options as (name, value), in encounter order."""
        seen: dict[str, int] = {}
        result = []
        for name in self.order:
            if name not in names:
                continue
            index = seen.get(name, 0)
            seen[name] = index + 1
            result.append((name, self.values[name][index]))
        return result

    def last_of(self, names: set[str] | frozenset[str]) -> str | None:
        """The most recently given option among ``names``."""
        for name in reversed(self.order):
            if name in names:
                return name
        return None

    def without(self, names: set[str] | frozenset[str]) -> "ParsedArguments":
        return ParsedArguments(
            values={k: v for k, v in self.values.items() if k not in names},
            positionals=list(self.positionals),
            order=[n for n in self.order if n not in names],
        )


def parse_args(
    tokens: Sequence[str],
    table: OptionTable = CURL_TABLE,
    strict: bool = True,
) -> tuple[ParsedArguments, list[ConversionWarning]]:
    """Parse curl arguments (without the leading ``curl``).

    In strict mode an unknown flag raises ArgumentSyntaxError; otherwise it
    becomes an ``unknown-flag`` warning and is skipped.
    """
    values: dict[str, Value] = {}
    positionals: list[str] = []
    order: list[str] = []
    warnings: list[ConversionWarning] = []

    def fail(message: str, **details) -> None:
        raise ArgumentSyntaxError(message, details=details, warnings=warnings)

    def unknown(spelling: str) -> None:
        message = f"option {spelling}: is unknown"
        if strict:
            fail(message, option=spelling)
        warnings.append(warn(WarningKind.UNKNOWN_FLAG, message))

    def store(spec: OptionSpec, spelling: str, value: str | bool) -> None:
        if spelling in spec.deprecated:
            warnings.append(warn(WarningKind.DEPRECATED_FLAG, spec.deprecated[spelling]))

        if spec.kind == OptionKind.STRING_LIST:
            values.setdefault(spec.name, []).append(value)
        elif spec.kind == OptionKind.ENUM:
            if spelling in spec.switches:
                value = spec.switches[spelling]
            elif value not in spec.choices:
                fail(
                    f"option {spelling}: unsupported value {value!r} (expected one of {', '.join(spec.choices)})",
                    option=spelling,
                    value=value,
                )
            values[spec.name] = value
        else:
            values[spec.name] = value
        order.append(spec.name)

    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1

        if token == "--":
            positionals.extend(tokens[i:])
            break

        if token.startswith("--"):
            word, sep, inline = token[2:].partition("=")
            try:
                resolved = _resolve_long(table, word)
            except ArgumentSyntaxError as e:
                raise e.with_prior_warnings(warnings)
            if resolved is None:
                unknown(f"--{word}")
                continue
            spelling, spec, negated = resolved

            if not spec.takes_value(spelling):
                if sep:
                    fail(f"option {spelling}: does not take a value", option=spelling)
                store(spec, spelling, not negated)
                continue

            if sep:
                value = inline
            elif i < len(tokens):
                value = tokens[i]
                i += 1
            else:
                fail(f"option {spelling}: requires parameter", option=spelling)
            store(spec, spelling, value)

        elif token.startswith("-") and token != "-":
            j = 1
            while j < len(token):
                char = token[j]
                j += 1
                spelling = f"-{char}"
                spec = table.lookup_short(char)
                if spec is None:
                    unknown(spelling)
                    continue
                if not spec.takes_value(spelling):
                    store(spec, spelling, True)
                    continue
                # A value-taking letter ends the cluster.
                if j < len(token):
                    value = token[j:]
                elif i < len(tokens):
                    value = tokens[i]
                    i += 1
                else:
                    fail(f"option {spelling}: requires parameter", option=spelling)
                store(spec, spelling, value)
                break

        elif token == "-" and "stdin" in table:
            store(table.spec("stdin"), "-", True)

        else:
            positionals.append(token)

    parsed = ParsedArguments(values=values, positionals=positionals, order=order)
    logger.debug("parsed %d options and %d positional arguments", len(values), len(positionals))
    return parsed, warnings


def _resolve_long(table: OptionTable, word: str) -> tuple[str, OptionSpec, bool] | None:
    """Find the spec for ``--word``: exact name, ``no-`` negation, then prefix."""
    spec = table.lookup_long(word)
    if spec is not None:
        return f"--{word}", spec, False

    if word.startswith("no-"):
        spec = table.lookup_long(word[3:])
        if spec is not None and spec.kind == OptionKind.BOOL and spec.negatable:
            return f"--{word[3:]}", spec, True

    hit = table.resolve_prefix(word)
    if hit is not None:
        full, spec = hit
        return f"--{full}", spec, False
    return None


def ensure_stdin_alone(parsed: ParsedArguments) -> None:
    """Reject ``-``/``--stdin`` combined with anything but verbosity and --language.

    A typo such as ``curlconverter - -data`` would otherwise leave the user
    staring at what looks like a hung terminal.
    """
    if not parsed.get("stdin"):
        return
    extra = [f"--{name}" for name in parsed.names() if name not in STDIN_COMPANIONS]
    extra += parsed.positionals
    if extra:
        raise ArgumentSyntaxError(
            "if you pass --stdin or -, you can't also pass " + ", ".join(extra),
            details={"extra": extra},
        )
