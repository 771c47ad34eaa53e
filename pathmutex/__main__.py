"""Allows `python -m pathmutex`."""
from pathmutex.cli import main

if __name__ == "__main__":
    main()  # pylint: disable=no-value-for-parameter
