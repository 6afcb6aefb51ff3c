"""Allow ``python -m lockwright``."""

from lockwright.cli.main import cli

if __name__ == "__main__":
    cli()
