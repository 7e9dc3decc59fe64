"""Allow ``python -m chunkscribe``."""

from chunkscribe.cli import app

if __name__ == "__main__":
    app()
