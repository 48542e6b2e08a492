"""Allow running as ``python -m scpmerge``."""

import sys

from scpmerge.main import main

if __name__ == "__main__":
    sys.exit(main())
