"""Entry point for 'python -m mongomcp' command."""

from mongomcp.cli import main

if __name__ == "__main__":
    main()
