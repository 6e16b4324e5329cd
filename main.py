#!/usr/bin/env python3
"""
spiregen - Command line launcher

Usage:
    python main.py --seed 12345                       # builtin catalog, JSON to stdout
    python main.py --catalog rooms.json --settings gen.json --format dot -o layout.dot
"""

import sys

from spiregen.cli import main

if __name__ == "__main__":
    sys.exit(main())
