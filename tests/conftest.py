#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.conftest
    ~~~~~~~~~~~~~~

    Shared fixtures: every test gets its own file-backed SQLite database,
    so that several threads can open their own connections to it.

    :copyright: (c) 2025 by Authors.
    :license: see LICENSE for more details.
"""

import os

os.environ.setdefault("TESTING", "true")

import pytest
from smartlibrary.core import db as database
from smartlibrary.core.models import Item, Loan
from smartlibrary.core.status import StatusPolicy
from smartlibrary.core.store import ItemStore
from smartlibrary.core.reservations import ReservationCoordinator


@pytest.fixture
def engine(tmp_path):
    engine = database.make_engine(f"sqlite:///{tmp_path / 'library.db'}", echo=False)
    database.init(engine)
    try:
        yield engine
    finally:
        engine.dispose()

@pytest.fixture
def session_factory(engine):
    return database.make_session_factory(engine)

@pytest.fixture
def coordinator(session_factory):
    return ReservationCoordinator(session_factory, items=ItemStore(lock_timeout=5))

@pytest.fixture
def make_item(session_factory):
    """Provisions an item with `stock` copies directly in the database."""
    def _make_item(stock=1, title="Laskar Pelangi", **fields):
        with session_factory.begin() as session:
            item = Item(
                title=title,
                stock=stock,
                status=StatusPolicy.initial(stock),
                **fields
            )
            session.add(item)
            session.flush()
            return item.id
    return _make_item

@pytest.fixture
def snapshot(session_factory):
    """Returns (stock, status, active loan count) for an item at rest."""
    def _snapshot(item_id):
        with session_factory() as session:
            item = session.get(Item, item_id)
            loans = session.query(Loan).filter(Loan.item_id == item_id).count()
            return item.stock, item.status, loans
    return _snapshot
