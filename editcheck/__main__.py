#!/usr/bin/env python3
"""
editcheck package runner.
`python3 -m editcheck` dispatches to cli.main().
"""

import sys

from editcheck.cli import main

if __name__ == '__main__':
    sys.exit(main())
