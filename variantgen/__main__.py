"""
Main entry point for running the package as a module.

Usage:
    python -m variantgen import photo.jpg
    python -m variantgen render --limit 100
    python -m variantgen replace <asset> new.jpg --redirects
    python -m variantgen report --type summary
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
