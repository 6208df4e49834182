"""TurnBASIC CLI entry point."""

from turnbasic.cli import app

if __name__ == "__main__":
    app()
