"""Infrastructure: split a raw command line into words.

Built on :mod:`shlex` in POSIX mode with whitespace splitting: single
and double quotes group words, a backslash escapes the next character
and ``#`` has no special meaning.
"""

from __future__ import annotations

import shlex

from minish.exceptions import TokenizeError


def tokenize(line: str, ignore_backslash: bool = False) -> list[str]:
    """Split *line* into words.

    Parameters
    ----------
    line:
        Raw text as submitted at the prompt.
    ignore_backslash:
        Treat ``\\`` as an ordinary character (useful for Windows paths).

    Raises
    ------
    TokenizeError
        On an unterminated quote or a trailing escape character.
    """
    lexer = shlex.shlex(line, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    if ignore_backslash:
        lexer.escape = ""
    try:
        return list(lexer)
    except ValueError as exc:
        raise TokenizeError(
            str(exc),
            hint="Close the quote or remove the trailing backslash.",
        ) from exc
