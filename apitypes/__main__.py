# File: apitypes/__main__.py
"""
apitypes — Module entry point.

Allows running the generator directly via::

    python -m apitypes --source openapi.yaml --output ./src/api

This module simply delegates to the CLI entry point defined in ``apitypes.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from apitypes.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
