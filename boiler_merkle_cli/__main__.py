"""
Module execution entry point.

Allows running with: python -m boiler_merkle_cli
"""

import sys
from boiler_merkle_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
