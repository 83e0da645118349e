#!/usr/bin/env python
"""
    Item Schemas for SmartLibrary.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from smartlibrary.core.models import StatusEnum
from smartlibrary.schemas.loan import Loan

class Item(BaseModel):
    id: int
    title: str
    author: Optional[str] = None
    publisher: Optional[str] = None
    year: Optional[int] = None
    category: Optional[str] = None
    cover: Optional[str] = None
    description: Optional[str] = None
    stock: int
    status: StatusEnum
    added_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "id": 1,
                "title": "Laskar Pelangi",
                "author": "Andrea Hirata",
                "stock": 3,
                "status": "Available",
                "added_by": "Admin Utama SmartLibrary",
            }
        }

class ItemWithBorrowers(Item):
    borrowers: List[Loan] = []
