"""Entry point for ``python -m spaceconvert``."""

from spaceconvert.cli.main import app

if __name__ == "__main__":
    app()
