"""Module entry point for the grpnice CLI."""

from .cli import run

if __name__ == "__main__":
    run()
