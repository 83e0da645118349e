#!/usr/bin/env python

"""
    Item and Loan models for SmartLibrary.

    An Item carries the number of copies still on the shelf (`stock`);
    every copy off the shelf is one Loan row pointing at the Item.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, CheckConstraint,
    Enum as SQLAlchemyEnum
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from smartlibrary.core.db import Base
import enum


class StatusEnum(enum.Enum):
    AVAILABLE = "Available"
    BORROWED = "Borrowed"


class Item(Base):
    __tablename__ = 'items'

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255))
    publisher = Column(String(255))
    year = Column(Integer)
    category = Column(String(100))
    cover = Column(Text)
    description = Column(Text)
    stock = Column(Integer, default=0, nullable=False)
    status = Column(SQLAlchemyEnum(StatusEnum), nullable=False)
    added_by = Column(String(100))
    created_at = Column(DateTime(timezone=True), default=func.now())
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now())

    loans = relationship(
        'Loan', back_populates='item', order_by='Loan.borrowed_at',
        cascade='all, delete-orphan', passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint('stock >= 0', name='chk_item_stock_non_negative'),
    )

    def __repr__(self):
        return f"<Item {self.id} {self.title!r} stock={self.stock} {self.status.value}>"


class Loan(Base):
    __tablename__ = 'loans'

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey('items.id', ondelete='CASCADE'), nullable=False, index=True)
    borrower_name = Column(String(255), nullable=False)
    borrower_phone = Column(String(50))
    handled_by = Column(String(100))
    borrowed_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)

    item = relationship('Item', back_populates='loans')

    def __repr__(self):
        return f"<Loan {self.id} item={self.item_id} {self.borrower_name!r}>"
