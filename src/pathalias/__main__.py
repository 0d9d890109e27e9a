"""CLI entry point for pathalias."""

from __future__ import annotations

from pathalias.cli import main

if __name__ == "__main__":
    main()
