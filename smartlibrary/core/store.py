#!/usr/bin/env python

"""
    Durable state of the reservation core.

    `ItemStore` owns an item's copy count and status, `LoanLedger` owns
    the loan rows. Both only ever work inside a `Transaction` opened by
    the caller, and neither commits.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List
from sqlalchemy import func, text
from sqlalchemy.exc import OperationalError
from smartlibrary.configs import LOCK_TIMEOUT
from smartlibrary.core.db import Transaction, supports_row_locks
from smartlibrary.core.locks import ItemLocks
from smartlibrary.core.models import Item, Loan, StatusEnum
from smartlibrary.core.exceptions import (
    ItemNotFoundError,
    LoanNotFoundError,
    LockTimeoutError,
    TransactionFailure,
)

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for lock_not_available
PG_LOCK_NOT_AVAILABLE = '55P03'


class ItemStore:

    def __init__(self, lock_timeout: float = LOCK_TIMEOUT, locks: ItemLocks = None):
        self.lock_timeout = lock_timeout
        self.locks = locks if locks is not None else ItemLocks()

    def lock_and_read(self, tx: Transaction, item_id: int) -> Item:
        """Locks the item for the rest of `tx` and returns its current row.

        Concurrent callers asking for the same item block here until `tx`
        commits or rolls back.

        Raises:
            ItemNotFoundError: no item with this id.
            LockTimeoutError: the lock was not granted within `lock_timeout`.
        """
        session = tx.session
        query = session.query(Item).filter(Item.id == item_id).populate_existing()
        if supports_row_locks(session):
            if session.get_bind().dialect.name == 'postgresql':
                timeout_ms = int(self.lock_timeout * 1000)
                session.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))
            try:
                item = query.with_for_update().one_or_none()
            except OperationalError as e:
                if getattr(e.orig, 'pgcode', None) == PG_LOCK_NOT_AVAILABLE:
                    raise LockTimeoutError(f"Item {item_id} is locked by another transaction.") from e
                raise
            tx.hold(item_id)
        else:
            if not tx.holds(item_id):
                if not (lock := self.locks.acquire(item_id, self.lock_timeout)):
                    raise LockTimeoutError(f"Item {item_id} is locked by another transaction.")
                tx.hold(item_id, lock)
            item = query.one_or_none()

        if item is None:
            raise ItemNotFoundError(f"Item {item_id} not found.")
        return item

    def write(self, tx: Transaction, item: Item, stock: int, status: StatusEnum) -> Item:
        if not tx.holds(item.id):
            raise TransactionFailure(f"Item {item.id} must be locked before it is written.")
        item.stock = stock
        item.status = status
        tx.session.flush()
        return item


class LoanLedger:

    def insert(self, tx: Transaction, item_id: int, borrower_name: str,
               borrower_phone: str, handled_by: str) -> Loan:
        loan = Loan(
            item_id=item_id,
            borrower_name=borrower_name,
            borrower_phone=borrower_phone,
            handled_by=handled_by,
        )
        tx.session.add(loan)
        tx.session.flush()
        # borrowed_at comes from the database clock
        tx.session.refresh(loan)
        return loan

    def delete_matching(self, tx: Transaction, loan_id: int, item_id: int) -> Loan:
        """Deletes the loan only if it was drawn against `item_id`."""
        loan = tx.session.query(Loan).filter(
            Loan.id == loan_id,
            Loan.item_id == item_id
        ).one_or_none()
        if loan is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found for item {item_id}.")
        tx.session.delete(loan)
        tx.session.flush()
        return loan

    def count_active(self, tx: Transaction, item_id: int) -> int:
        return tx.session.query(func.count(Loan.id)).filter(
            Loan.item_id == item_id
        ).scalar()

    def list_for_items(self, session, item_ids: Iterable[int]) -> Dict[int, List[Loan]]:
        item_ids = list(item_ids)
        loans = defaultdict(list)
        if not item_ids:
            return loans
        for loan in session.query(Loan).filter(
                Loan.item_id.in_(item_ids)).order_by(Loan.borrowed_at.asc(), Loan.id.asc()):
            loans[loan.item_id].append(loan)
        return loans
