"""Allow ``python -m staticpool``."""

from staticpool.cli import app

if __name__ == "__main__":
    app()
