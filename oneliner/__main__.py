"""
Main entry point for running OneLiner as a module.

This allows the package to be executed directly with:
python -m oneliner
"""

from oneliner.main import app


def main() -> None:
    """Run the OneLiner CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
