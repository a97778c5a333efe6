"""Module entrypoint for ``python -m linepicker``.

All argument parsing and session setup happen in ``linepicker.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
