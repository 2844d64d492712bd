"""
Jukebox package __main__ entry point.

Allows running with: python -m jukebox FILE_OR_URL...
"""

import sys

from jukebox.app.cli import main

if __name__ == "__main__":
    sys.exit(main())
