"""
Route definitions for the catalogue API.

Endpoints under /api/books:
- GET    /                 : list books, or search them with ?search=
- GET    /search?q=        : search books by keyword
- GET    /stats            : number of books per status
- GET    /{book_id}        : get one book
- POST   /                 : create a book
- PUT    /{book_id}        : replace a book's editable fields
- PUT    /{book_id}/status : change a book's status
- DELETE /{book_id}        : delete a book
- POST   /price            : ask the local model for a price

Reads attach a ``price`` asked from the local model; a failed lookup only
leaves ``price`` empty and never fails the request.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..ai import PriceLookup, get_price_lookup
from ..storage import get_db
from . import store
from .schemas import (
    Book,
    BookCreate,
    BookStats,
    BookStatus,
    BookStatusUpdate,
    PriceQuote,
    PriceRequest,
)
from .service import with_price, with_prices


router = APIRouter(prefix="/api/books", tags=["books"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Book not found")


@router.get("", response_model=List[Book])
def list_books(
    search: Optional[str] = Query(default=None, description="Keyword (title/author/genre/ISBN)"),
    status: Optional[BookStatus] = Query(default=None, description="Filter by status"),
    db: Session = Depends(get_db),
    lookup: PriceLookup = Depends(get_price_lookup),
) -> List[Book]:
    if search is not None:
        records = store.search_books(db, search, status)
    else:
        records = store.list_books(db, status)
    return with_prices(records, lookup)


@router.get("/search", response_model=List[Book])
def search_books(
    q: Optional[str] = Query(default=None, description="Keyword (title/author/genre/ISBN)"),
    db: Session = Depends(get_db),
    lookup: PriceLookup = Depends(get_price_lookup),
) -> List[Book]:
    return with_prices(store.search_books(db, q), lookup)


@router.get("/stats", response_model=BookStats)
def book_stats(db: Session = Depends(get_db)) -> BookStats:
    counts = store.count_by_status(db)
    return BookStats(
        total_books=sum(counts.values()),
        available_books=counts[BookStatus.AVAILABLE],
        borrowed_books=counts[BookStatus.BORROWED],
        maintenance_books=counts[BookStatus.MAINTENANCE],
    )


@router.post("/price", response_model=PriceQuote)
def quote_price(
    req: PriceRequest,
    lookup: PriceLookup = Depends(get_price_lookup),
) -> PriceQuote:
    result = lookup.price_for(req.title, req.author)
    return PriceQuote(title=req.title, author=req.author, price=result.price)


@router.get("/{book_id}", response_model=Book)
def get_book(
    book_id: int,
    db: Session = Depends(get_db),
    lookup: PriceLookup = Depends(get_price_lookup),
) -> Book:
    record = store.get_book(db, book_id)
    if record is None:
        raise _not_found()
    return with_price(record, lookup)


@router.post("", response_model=Book, status_code=201)
def create_book(req: BookCreate, db: Session = Depends(get_db)) -> Book:
    return Book.model_validate(store.create_book(db, req))


@router.put("/{book_id}", response_model=Book)
def update_book(book_id: int, req: BookCreate, db: Session = Depends(get_db)) -> Book:
    record = store.update_book(db, book_id, req)
    if record is None:
        raise _not_found()
    return Book.model_validate(record)


@router.put("/{book_id}/status", response_model=Book)
def update_book_status(
    book_id: int, req: BookStatusUpdate, db: Session = Depends(get_db)
) -> Book:
    record = store.update_status(db, book_id, req.status)
    if record is None:
        raise _not_found()
    return Book.model_validate(record)


@router.delete("/{book_id}")
def delete_book(book_id: int, db: Session = Depends(get_db)):
    if not store.delete_book(db, book_id):
        raise _not_found()
    return {"status": "ok"}
