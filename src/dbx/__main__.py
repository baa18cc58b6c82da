"""Entry point for ``python -m dbx``."""

from dbx.cli.main import main


if __name__ == "__main__":
    main()
