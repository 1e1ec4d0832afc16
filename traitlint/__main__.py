#!/usr/bin/env python3
"""
traitlint/__main__.py
=====================

Entry point for ``python -m traitlint``; see :mod:`traitlint.main`.
"""

from traitlint.main import main

if __name__ == "__main__":
    raise SystemExit(main())
