"""Module entrypoint for ``python -m pagepick``.

All argument parsing and session setup happen in ``pagepick.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
