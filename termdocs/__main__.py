"""Module entrypoint for ``python -m termdocs``.

This keeps module-mode execution behavior identical to the console script.
All argument parsing and server setup happen in ``termdocs.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
