"""Module entrypoint for ``python -m drivepicker``.

All argument parsing and session setup happen in ``drivepicker.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
