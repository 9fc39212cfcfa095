"""
Entry point for the media importer.
"""

import sys

from tweet_importer.cli import main

if __name__ == "__main__":
    sys.exit(main())
