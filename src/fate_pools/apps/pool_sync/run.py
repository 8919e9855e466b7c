"""CLI entry point for the Fate pool sync app.

All command logic lives in the cli subpackage.
"""

from fate_pools.apps.pool_sync.cli import app

__all__ = ["app", "main"]


def main() -> None:
    """Run the Fate pool sync CLI application."""
    app()


if __name__ == "__main__":
    main()
