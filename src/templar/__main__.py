"""Module entry point for running with python -m templar."""

from templar.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
