"""Main entry point for the rod_tickler package."""
from rod_tickler.cli import cli


def main():
    """Main entry point function."""
    cli()


if __name__ == "__main__":
    main()
