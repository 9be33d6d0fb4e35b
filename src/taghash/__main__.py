"""
taghash Package Main Entry Point

This module serves as the main entry point when the package is run as a module
using `python -m taghash`. It delegates to the Typer application.
"""

from taghash.cli.typer_app import app

if __name__ == "__main__":
    app(prog_name="taghash")
