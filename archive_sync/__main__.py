"""Allow `python -m archive_sync`."""

from archive_sync.cli import main

if __name__ == "__main__":
    main()
