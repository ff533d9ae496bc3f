#!/usr/bin/env python3
"""vmtray - Module entry point."""
import sys

from vmtray.cli import main

if __name__ == "__main__":
    sys.exit(main())
