#!/usr/bin/env python

"""
    Catalog operations around the reservation core.

    Items are created here with their initial number of copies, and
    their descriptive fields and cover may change later, but `stock`
    and `status` are never touched after creation: only
    `ReservationCoordinator` moves copies in and out.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from smartlibrary.core.db import transaction
from smartlibrary.core.models import Item
from smartlibrary.core.status import StatusPolicy
from smartlibrary.core.store import LoanLedger
from smartlibrary.core.exceptions import (
    CoverUploadError,
    InvalidItemError,
    ItemNotFoundError,
    TransactionFailure,
)

logger = logging.getLogger(__name__)


class Catalog:

    FIELDS = ('title', 'author', 'publisher', 'year', 'category', 'description', 'added_by')
    DEFAULT_LIMIT = 500

    def __init__(self, session_factory, ledger: LoanLedger = None, covers=None):
        self.session_factory = session_factory
        self.ledger = ledger or LoanLedger()
        self.covers = covers

    @classmethod
    def _clean(cls, fields: dict) -> dict:
        unknown = set(fields) - set(cls.FIELDS)
        if unknown:
            raise InvalidItemError(f"Unknown item fields: {', '.join(sorted(unknown))}.")
        if 'title' in fields and not (fields['title'] or '').strip():
            raise InvalidItemError("Title is required.")
        return fields

    def _upload_cover(self, cover_file) -> Optional[str]:
        if not cover_file or not cover_file.filename:
            return None
        if self.covers is None:
            raise CoverUploadError("Cover storage is not configured.")
        return self.covers.upload(cover_file.file, cover_file.filename, cover_file.content_type)

    def _discard_cover(self, url):
        if url and self.covers is not None:
            self.covers.delete(url)

    def create(self, title: str, stock: int = 0, cover_file=None, **fields) -> Item:
        """Adds an item with `stock` copies, all of them on the shelf."""
        fields = self._clean(dict(fields, title=title))
        try:
            stock = int(stock)
        except (TypeError, ValueError):
            raise InvalidItemError(f"Stock must be a whole number, not {stock!r}.")
        if stock < 0:
            raise InvalidItemError("Stock must be zero or more.")

        cover = self._upload_cover(cover_file)
        try:
            with transaction(self.session_factory) as tx:
                item = Item(
                    stock=stock,
                    status=StatusPolicy.initial(stock),
                    cover=cover,
                    **fields
                )
                tx.session.add(item)
                tx.session.flush()
                tx.session.refresh(item)
        except SQLAlchemyError as e:
            self._discard_cover(cover)
            raise TransactionFailure(f"Failed to add item: {str(e)}.") from e

        item.borrowers = []
        logger.info(f"Item {item.id} '{item.title}' added with {stock} copies")
        return item

    def update(self, item_id: int, cover_file=None, keep_cover: bool = True, **fields) -> Item:
        """Updates descriptive fields and the cover.

        A new `cover_file` replaces the current cover; without one the
        cover is kept when `keep_cover` is set and removed otherwise.
        """
        fields = self._clean(fields)
        new_cover = self._upload_cover(cover_file)
        try:
            with transaction(self.session_factory) as tx:
                item = tx.session.get(Item, item_id)
                if item is None:
                    raise ItemNotFoundError(f"Item {item_id} not found.")
                old_cover = item.cover
                for name, value in fields.items():
                    setattr(item, name, value)
                if new_cover or not keep_cover:
                    item.cover = new_cover
                tx.session.flush()
                tx.session.refresh(item)
                item.borrowers = self.ledger.list_for_items(tx.session, [item.id])[item.id]
        except ItemNotFoundError:
            self._discard_cover(new_cover)
            raise
        except SQLAlchemyError as e:
            self._discard_cover(new_cover)
            raise TransactionFailure(f"Failed to update item {item_id}: {str(e)}.") from e

        if old_cover and old_cover != item.cover:
            self._discard_cover(old_cover)
        logger.info(f"Item {item_id} updated")
        return item

    def delete(self, item_id: int) -> None:
        """Deletes an item; its loans go with it."""
        try:
            with transaction(self.session_factory) as tx:
                item = tx.session.get(Item, item_id)
                if item is None:
                    raise ItemNotFoundError(f"Item {item_id} not found.")
                cover = item.cover
                tx.session.delete(item)
        except SQLAlchemyError as e:
            raise TransactionFailure(f"Failed to delete item {item_id}: {str(e)}.") from e

        self._discard_cover(cover)
        logger.info(f"Item {item_id} deleted")

    def get(self, item_id: int) -> Item:
        with self.session_factory() as session:
            item = session.get(Item, item_id)
            if item is None:
                raise ItemNotFoundError(f"Item {item_id} not found.")
            item.borrowers = self.ledger.list_for_items(session, [item.id])[item.id]
            return item

    def list_with_borrowers(self, offset: int = None, limit: int = None) -> List[Item]:
        """Returns items newest first, each with its active loans oldest first."""
        with self.session_factory() as session:
            items = Item.get_many(session, offset=offset, limit=limit or self.DEFAULT_LIMIT)
            loans = self.ledger.list_for_items(session, [i.id for i in items])
            for item in items:
                item.borrowers = loans[item.id]
            return items
