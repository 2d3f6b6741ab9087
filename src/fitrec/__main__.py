"""Allow ``python -m fitrec``."""

from fitrec.cli.app import main

if __name__ == "__main__":
    main()
