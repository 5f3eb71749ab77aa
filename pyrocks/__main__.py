"""Allow running as `python -m pyrocks`."""

from .command import main

main()
