"""Infrastructure layer: terminal access and line-processing adapters.

Concrete implementations of the protocols in
:mod:`minish.core.protocols`: the raw key stream, the line editor, the
tokenizer and the option parser.

Rules
-----
* No imports from ``cli``.
* No user-facing messages; echo of typed input is the only output.
"""

from minish.infra.line_editor import BufferedLineEditor
from minish.infra.option_parser import coerce_value, parse_options
from minish.infra.terminal import TerminalKeyStream, key_descriptor
from minish.infra.tokenizer import tokenize

__all__: list[str] = [
    "BufferedLineEditor",
    "TerminalKeyStream",
    "coerce_value",
    "key_descriptor",
    "parse_options",
    "tokenize",
]
