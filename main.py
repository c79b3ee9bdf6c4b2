"""Main entry point for the studyverse CLI."""

from studyverse.cli.app import app


def main():
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    main()
