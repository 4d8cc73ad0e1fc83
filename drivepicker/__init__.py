"""Public package surface for drivepicker.

Exports ``main`` for programmatic CLI invocation and ``__version__``.
The picker core lives in ``drivepicker.tree_model`` and ``drivepicker.runtime``.
"""

from __future__ import annotations

__version__ = "0.1.0"


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["__version__", "main"]
