#!/usr/bin/env python3
"""
Istoria - personal memory archive

Main entry point, equivalent to the ``istoria`` console script.
"""

import sys

from istoria.cli import main


if __name__ == "__main__":
    sys.exit(main())
