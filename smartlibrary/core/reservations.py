#!/usr/bin/env python

"""
    Borrow and return transactions.

    Each call pairs exactly one stock change with exactly one loan row
    change inside a single database transaction, so that for every item
    `stock + active loans` stays equal to the copies it was provisioned
    with. Nothing here retries; a caller seeing `TransactionFailure` may
    simply try again.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from dataclasses import dataclass
from smartlibrary.core.db import transaction
from smartlibrary.core.models import Loan, StatusEnum
from smartlibrary.core.status import StatusPolicy
from smartlibrary.core.store import ItemStore, LoanLedger
from smartlibrary.core.exceptions import (
    NotFoundError,
    OutOfStockError,
    TransactionFailure,
)

logger = logging.getLogger(__name__)


@dataclass
class BorrowResult:
    loan: Loan
    new_stock: int
    new_status: StatusEnum
    title: str = None


class ReservationCoordinator:

    def __init__(self, session_factory, items: ItemStore = None, ledger: LoanLedger = None):
        self.session_factory = session_factory
        self.items = items or ItemStore()
        self.ledger = ledger or LoanLedger()

    def borrow(self, item_id: int, borrower_name: str, borrower_phone: str,
               handled_by: str) -> BorrowResult:
        """
        Lends one copy of an item.

        Args:
            item_id: the item to draw a copy from.
            borrower_name, borrower_phone: who takes the copy.
            handled_by: the staff member processing the loan.

        Returns:
            BorrowResult with the new Loan and the item's new stock/status.

        Raises:
            ItemNotFoundError: no such item.
            OutOfStockError: no copy left on the shelf.
            TransactionFailure: lock timeout or store error; nothing was written.
        """
        try:
            with transaction(self.session_factory) as tx:
                item = self.items.lock_and_read(tx, item_id)
                if item.stock <= 0:
                    raise OutOfStockError(f"No copies of '{item.title}' left to borrow.")

                new_stock = item.stock - 1
                new_status = StatusPolicy.for_borrow(new_stock)
                self.items.write(tx, item, new_stock, new_status)
                loan = self.ledger.insert(
                    tx, item_id, borrower_name, borrower_phone, handled_by)
                title = item.title
        except (NotFoundError, OutOfStockError) as e:
            logger.info(f"Borrow of item {item_id} rejected: {e}")
            raise
        except TransactionFailure:
            logger.exception(f"Borrow of item {item_id} failed")
            raise
        except Exception as e:
            logger.exception(f"Borrow of item {item_id} failed")
            raise TransactionFailure(f"Failed to borrow item {item_id}: {str(e)}.") from e

        logger.info(
            f"Item {item_id} lent to {borrower_name} by {handled_by}: "
            f"loan {loan.id}, stock {new_stock}, {new_status.value}")
        return BorrowResult(loan=loan, new_stock=new_stock, new_status=new_status, title=title)

    def return_loan(self, item_id: int, loan_id: int) -> None:
        """
        Takes back the copy recorded by `loan_id`.

        The loan must have been drawn against `item_id`; a loan id that
        belongs to another item is reported as not found.

        Raises:
            ItemNotFoundError, LoanNotFoundError: nothing to return.
            TransactionFailure: lock timeout or store error; nothing was written.
        """
        try:
            with transaction(self.session_factory) as tx:
                # Locked first so the delete runs under the item's lock too
                item = self.items.lock_and_read(tx, item_id)
                self.ledger.delete_matching(tx, loan_id, item_id)

                new_stock = item.stock + 1
                active_loans = self.ledger.count_active(tx, item_id)
                new_status = StatusPolicy.for_return(new_stock, active_loans)
                self.items.write(tx, item, new_stock, new_status)
        except NotFoundError as e:
            logger.info(f"Return of loan {loan_id} on item {item_id} rejected: {e}")
            raise
        except TransactionFailure:
            logger.exception(f"Return of loan {loan_id} on item {item_id} failed")
            raise
        except Exception as e:
            logger.exception(f"Return of loan {loan_id} on item {item_id} failed")
            raise TransactionFailure(f"Failed to return loan {loan_id}: {str(e)}.") from e

        logger.info(
            f"Loan {loan_id} returned on item {item_id}: "
            f"stock {new_stock}, {new_status.value}")
