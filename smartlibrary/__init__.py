#!/usr/bin/env python

"""
    SmartLibrary, loanable copies and the loans held against them.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

__version__ = "0.1.0"
