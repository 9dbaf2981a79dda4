"""
Module entry point for: python -m question_import

Allows running the importer directly as a module:
    python -m question_import parse <file> [options]
    python -m question_import batch <directory> [options]
    python -m question_import formats
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
