"""Entry point for `python -m tablerpc`."""

from .cli import main

if __name__ == "__main__":
    main()
