"""Allow ``python -m sitios``."""

from sitios.cli import main

if __name__ == "__main__":
    main()
