"""Split raw curl command text (as pasted by a user) into arguments."""

import re
import shlex

from curlconverter.errors import ArgumentSyntaxError

CURL_NAMES = ("curl", "curl.exe")

_CONTINUATION = re.compile(r"\\\r?\n")

_ANSI_C_ESCAPE = re.compile(
    r"\\(x[0-9a-fA-F]{1,2}|u[0-9a-fA-F]{1,4}|U[0-9a-fA-F]{1,8}|[0-7]{1,3}|c.|.)",
    re.DOTALL,
)

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "e": "\x1b",
    "E": "\x1b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "?": "?",
}


def split_command(text: str) -> list[str]:
    """Split a ``curl ...`` command line into the arguments after ``curl``.

    Handles backslash-newline continuations and bash ``$'...'`` strings;
    everything else follows POSIX shell quoting rules.
    """
    command = _CONTINUATION.sub(" ", text.strip())
    if not command:
        raise ArgumentSyntaxError("no curl command given")

    try:
        tokens = shlex.split(expand_ansi_c_strings(command))
    except ValueError as e:
        raise ArgumentSyntaxError(f"could not split curl command: {e}") from e

    if not tokens:
        raise ArgumentSyntaxError("no curl command given")
    if tokens[0] not in CURL_NAMES:
        raise ArgumentSyntaxError(
            f'command should begin with "curl" but instead begins with {tokens[0]!r}',
            details={"command": tokens[0]},
        )
    return tokens[1:]


def expand_ansi_c_strings(command: str) -> str:
    """Rewrite every unquoted ``$'...'`` string as an equivalent '...' string."""
    out = []
    quote = None
    i, n = 0, len(command)
    while i < n:
        c = command[i]
        if c == "\\" and quote != "'":
            out.append(command[i:i + 2])
            i += 2
            continue
        if quote is None and command.startswith("$'", i):
            end = i + 2
            while end < n and command[end] != "'":
                end += 2 if command[end] == "\\" else 1
            if end >= n:
                raise ArgumentSyntaxError("unterminated $'' string")
            out.append(shlex.quote(decode_ansi_c(command[i + 2:end])))
            i = end + 1
            continue
        if c in "'\"":
            if quote is None:
                quote = c
            elif quote == c:
                quote = None
        out.append(c)
        i += 1
    return "".join(out)


def decode_ansi_c(body: str) -> str:
    """Decode the escapes inside a bash ``$'...'`` string body."""

    def replace(match: re.Match) -> str:
        esc = match.group(1)
        head = esc[0]
        if head in "xuU" and len(esc) > 1:
            code = int(esc[1:], 16)
            return chr(code) if code <= 0x10FFFF else "\\" + esc
        if head in "01234567":
            return chr(int(esc, 8) & 0xFF)
        if head == "c" and len(esc) == 2:
            return chr(ord(esc[1].upper()) ^ 0x40)
        # Unknown escapes are kept verbatim, like bash does.
        return _SIMPLE_ESCAPES.get(esc, "\\" + esc)

    return _ANSI_C_ESCAPE.sub(replace, body)
