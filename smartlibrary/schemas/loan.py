#!/usr/bin/env python
"""
    Loan Schemas for SmartLibrary.

    Loans are rendered with the field names the library front end has
    always used for a borrower: `name`, `phone`, `date` and `handledBy`.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class Loan(BaseModel):
    id: int
    item_id: int
    name: str = Field(validation_alias="borrower_name")
    phone: Optional[str] = Field(None, validation_alias="borrower_phone")
    date: Optional[datetime] = Field(None, validation_alias="borrowed_at")
    handledBy: Optional[str] = Field(None, validation_alias="handled_by")

    class Config:
        from_attributes = True

class BorrowRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    handled_by: str = Field(..., alias="handledBy", min_length=1, max_length=100)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "Alice",
                "phone": "555-0100",
                "handledBy": "staff1"
            }
        }

class BorrowResponse(BaseModel):
    message: str
    loan: Loan
    newStock: int
    newStatus: str
