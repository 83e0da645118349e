#!/usr/bin/env python

"""
    API routes for SmartLibrary,
    covering the catalog and the borrow / return endpoints.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from typing import List, Optional
from fastapi import (
    APIRouter,
    Depends,
    Request,
    UploadFile,
    File,
    Form,
    HTTPException,
    status,
)
from fastapi.responses import PlainTextResponse, Response
from smartlibrary.core.catalog import Catalog
from smartlibrary.core.reservations import ReservationCoordinator
from smartlibrary.core.exceptions import (
    CoverUploadError,
    InvalidItemError,
    NotFoundError,
    OutOfStockError,
    TransactionFailure,
)
from smartlibrary.schemas.item import ItemWithBorrowers
from smartlibrary.schemas.loan import BorrowRequest, BorrowResponse, Loan

router = APIRouter()


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog

def get_coordinator(request: Request) -> ReservationCoordinator:
    return request.app.state.coordinator


@router.get('/', response_class=PlainTextResponse)
async def home():
    return "SmartLibrary API is running..."

@router.get('/items', response_model=List[ItemWithBorrowers])
def get_items(offset: Optional[int] = None, limit: Optional[int] = None,
              catalog: Catalog = Depends(get_catalog)):
    try:
        return catalog.list_with_borrowers(offset=offset, limit=limit)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch items: {str(e)}")

@router.get('/items/{item_id}', response_model=ItemWithBorrowers)
def get_item(item_id: int, catalog: Catalog = Depends(get_catalog)):
    try:
        return catalog.get(item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.post('/items', response_model=ItemWithBorrowers, status_code=status.HTTP_201_CREATED)
def create_item(
    title: str = Form(..., min_length=1),
    author: Optional[str] = Form(None),
    publisher: Optional[str] = Form(None),
    year: Optional[int] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    stock: int = Form(0, ge=0, description="Number of copies provisioned"),
    added_by: Optional[str] = Form(None, alias="added_by_admin"),
    cover_file: Optional[UploadFile] = File(None, description="Cover image"),
    catalog: Catalog = Depends(get_catalog),
):
    try:
        return catalog.create(
            title=title, stock=stock, cover_file=cover_file,
            author=author, publisher=publisher, year=year, category=category,
            description=description, added_by=added_by,
        )
    except InvalidItemError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CoverUploadError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except TransactionFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.put('/items/{item_id}', response_model=ItemWithBorrowers)
def update_item(
    item_id: int,
    title: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    publisher: Optional[str] = Form(None),
    year: Optional[int] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    added_by: Optional[str] = Form(None, alias="added_by_admin"),
    existing_cover: Optional[str] = Form(None, description="Keep the current cover when set"),
    cover_file: Optional[UploadFile] = File(None, description="Replacement cover image"),
    catalog: Catalog = Depends(get_catalog),
):
    fields = dict(
        title=title, author=author, publisher=publisher, year=year,
        category=category, description=description, added_by=added_by,
    )
    try:
        return catalog.update(
            item_id,
            cover_file=cover_file,
            keep_cover=bool(existing_cover),
            **{k: v for k, v in fields.items() if v is not None}
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidItemError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (CoverUploadError, TransactionFailure) as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.delete('/items/{item_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: int, catalog: Catalog = Depends(get_catalog)):
    try:
        catalog.delete(item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransactionFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post('/items/{item_id}/borrow', response_model=BorrowResponse,
             status_code=status.HTTP_201_CREATED)
def borrow_item(item_id: int, borrow: BorrowRequest,
                coordinator: ReservationCoordinator = Depends(get_coordinator)):
    """
    Lends one copy of the item to the borrower and records who handled it.
    """
    try:
        result = coordinator.borrow(
            item_id, borrow.name, borrow.phone, borrow.handled_by)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except OutOfStockError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except TransactionFailure:
        raise HTTPException(status_code=500, detail="Failed to process the loan.")

    return BorrowResponse(
        message=f'"{result.title}" borrowed successfully.',
        loan=Loan.model_validate(result.loan),
        newStock=result.new_stock,
        newStatus=result.new_status.value,
    )

@router.delete('/items/{item_id}/loans/{loan_id}', status_code=status.HTTP_204_NO_CONTENT)
def return_item(item_id: int, loan_id: int,
                coordinator: ReservationCoordinator = Depends(get_coordinator)):
    """
    Takes back a copy. The loan must belong to this item.
    """
    try:
        coordinator.return_loan(item_id, loan_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransactionFailure:
        raise HTTPException(status_code=500, detail="Failed to process the return.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
