# profilehub/__main__.py
# Entry point for `python -m profilehub`

from .cli.app import app

if __name__ == "__main__":
    app()
