"""CLI layer: argument parsing, the demo shell and the error boundary.

This package is the outermost layer of the application.  It may import
from ``core``, ``infra`` and the ``shell`` facade, but no other layer
may import from ``cli``.
"""
