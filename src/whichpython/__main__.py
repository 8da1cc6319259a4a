"""Entry point for ``python -m whichpython``."""

import sys

from whichpython.cli import main

if __name__ == "__main__":
    sys.exit(main())
