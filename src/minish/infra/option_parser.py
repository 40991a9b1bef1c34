"""Infrastructure: minimist-style option parsing.

Turns pre-split words into positional arguments and a flag mapping
without any declared schema:

* ``--key=value`` and ``--key value`` set *key*; ``--key`` alone sets
  ``True``; ``--no-key`` sets ``False``.
* ``-abc`` sets ``a``, ``b`` and ``c``; the last letter of a cluster
  takes the next word as its value when that word is not a flag.
  ``-n5`` and ``-k=v`` attach the value directly.
* ``--`` ends option parsing; everything after it is positional.
* Values that look like numbers become ``int`` or ``float``.
  Positional words always stay strings.
* A key given several times collects its values in a list.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from minish.core.models import ParsedArgs

_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[-+]?\d+)?", re.IGNORECASE)
_HEX_RE = re.compile(r"0x[0-9a-f]+", re.IGNORECASE)
_ATTACHED_NUMBER_RE = re.compile(r"-?\d+(?:\.\d*)?(?:e-?\d+)?")
_FLAG_RE = re.compile(r"--?[^-]")


def coerce_value(value: str) -> Any:
    """Return *value* as ``int``/``float`` when it looks numeric, else unchanged."""
    if _HEX_RE.fullmatch(value):
        return int(value, 16)
    if _NUMBER_RE.fullmatch(value):
        if any(ch in value for ch in ".eE"):
            return float(value)
        return int(value)
    return value


def _set(options: dict[str, Any], key: str, value: Any) -> None:
    if isinstance(value, str):
        value = coerce_value(value)
    existing = options.get(key)
    if existing is None or isinstance(existing, bool):
        options[key] = value
    elif isinstance(existing, list):
        existing.append(value)
    else:
        options[key] = [existing, value]


def _is_flag(word: str) -> bool:
    return _FLAG_RE.match(word) is not None


def parse_options(tokens: Sequence[str]) -> ParsedArgs:
    """Parse *tokens* into a :class:`ParsedArgs`."""
    words = list(tokens)
    positional: list[str] = []
    options: dict[str, Any] = {}

    if "--" in words:
        split = words.index("--")
        tail = words[split + 1:]
        words = words[:split]
    else:
        tail = []

    i = 0
    while i < len(words):
        word = words[i]
        following = words[i + 1] if i + 1 < len(words) else None

        if word.startswith("--") and "=" in word[3:]:
            key, _, value = word[2:].partition("=")
            _set(options, key, value)
        elif word.startswith("--no-") and len(word) > 5:
            _set(options, word[5:], False)
        elif word.startswith("--") and len(word) > 2:
            key = word[2:]
            if following is not None and not _is_flag(following):
                _set(options, key, following)
                i += 1
            else:
                _set(options, key, True)
        elif word.startswith("-") and len(word) > 1 and word[1] != "-":
            i += _parse_short(word, following, options)
        else:
            positional.append(word)
        i += 1

    positional.extend(tail)
    return ParsedArgs(positional=positional, options=options)


def _parse_short(word: str, following: str | None, options: dict[str, Any]) -> int:
    """Parse a short-flag cluster; return how many extra words were consumed."""
    letters = word[1:]
    for j, letter in enumerate(letters[:-1]):
        rest = letters[j + 1:]
        if rest == "-":
            _set(options, letter, rest)
            continue
        if letter.isalpha() and rest.startswith("="):
            _set(options, letter, rest[1:])
            return 0
        if letter.isalpha() and _ATTACHED_NUMBER_RE.fullmatch(rest):
            _set(options, letter, rest)
            return 0
        if not (rest[0].isalnum() or rest[0] == "_"):
            _set(options, letter, rest)
            return 0
        _set(options, letter, True)

    key = letters[-1]
    if key == "-":
        return 0
    if following is not None and not _is_flag(following):
        _set(options, key, following)
        return 1
    _set(options, key, True)
    return 0
