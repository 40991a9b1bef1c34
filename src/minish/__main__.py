"""Allow ``python -m minish`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m minish`` behaves identically to the ``minish`` console
script.
"""

from __future__ import annotations

from minish.cli.app import cli

if __name__ == "__main__":
    cli()
