"""Module entrypoint for ``python -m githd``."""

from .cli import main


if __name__ == "__main__":
    main()
