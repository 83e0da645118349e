#!/usr/bin/env python

"""
    Core module for SmartLibrary: the reservation core and the catalog
    it serves.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from smartlibrary.core.models import Item, Loan, StatusEnum
from smartlibrary.core.status import StatusPolicy
from smartlibrary.core.store import ItemStore, LoanLedger
from smartlibrary.core.reservations import ReservationCoordinator, BorrowResult
from smartlibrary.core.catalog import Catalog

__all__ = [
    "Item", "Loan", "StatusEnum", "StatusPolicy", "ItemStore", "LoanLedger",
    "ReservationCoordinator", "BorrowResult", "Catalog"
]
