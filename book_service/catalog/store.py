"""
Relational data store for the catalogue API.

Books live in a single ``books`` table managed through SQLAlchemy. The
functions below take an open ``Session`` (see ``storage.get_db``) and
either return ORM rows or ``None``/``False`` when the requested book does
not exist; turning that into an HTTP status is the router's job.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy import Integer, String, func, or_, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from ..storage import Base
from .schemas import BookCreate, BookStatus


class BookRecord(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[Optional[str]] = mapped_column(String(32))
    genre: Mapped[Optional[str]] = mapped_column(String(100))
    pages: Mapped[Optional[int]] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BookStatus.AVAILABLE.value
    )


def _norm(s: Optional[str]) -> str:
    return (s or "").strip().lower()


def _escape_like(s: str) -> str:
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_books(db: Session, status: Optional[BookStatus] = None) -> List[BookRecord]:
    stmt = select(BookRecord).order_by(BookRecord.id)
    if status is not None:
        stmt = stmt.where(BookRecord.status == status.value)
    return list(db.scalars(stmt))


def get_book(db: Session, book_id: int) -> Optional[BookRecord]:
    return db.get(BookRecord, book_id)


def count_by_status(db: Session) -> Dict[BookStatus, int]:
    """Number of books in each status; statuses with no books count 0."""
    counts = {status: 0 for status in BookStatus}
    stmt = select(BookRecord.status, func.count(BookRecord.id)).group_by(BookRecord.status)
    for status, n in db.execute(stmt):
        counts[BookStatus(status)] = n
    return counts


def search_books(
    db: Session, term: Optional[str], status: Optional[BookStatus] = None
) -> List[BookRecord]:
    """Search books by keyword.

    Parameters
    ----------
    db : Session
        Open database session.
    term : Optional[str]
        Keyword. Books whose title, author, genre or ISBN contain it
        (case-insensitive) are returned. A blank or missing keyword
        returns every book.
    status : Optional[BookStatus]
        Restrict the result to books in this status.

    Returns
    -------
    List[BookRecord]
        Matching rows ordered by id.
    """
    nq = _norm(term)
    if not nq:
        return list_books(db, status)

    pattern = f"%{_escape_like(nq)}%"
    stmt = (
        select(BookRecord)
        .where(
            or_(
                func.lower(BookRecord.title).like(pattern, escape="\\"),
                func.lower(BookRecord.author).like(pattern, escape="\\"),
                func.lower(BookRecord.genre).like(pattern, escape="\\"),
                func.lower(BookRecord.isbn).like(pattern, escape="\\"),
            )
        )
        .order_by(BookRecord.id)
    )
    if status is not None:
        stmt = stmt.where(BookRecord.status == status.value)
    return list(db.scalars(stmt))


def _apply(record: BookRecord, data: BookCreate) -> None:
    record.title = data.title
    record.author = data.author
    record.isbn = data.isbn
    record.genre = data.genre
    record.pages = data.pages
    record.status = data.status.value


def create_book(db: Session, data: BookCreate) -> BookRecord:
    record = BookRecord()
    _apply(record, data)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def update_book(db: Session, book_id: int, data: BookCreate) -> Optional[BookRecord]:
    record = get_book(db, book_id)
    if record is None:
        return None
    _apply(record, data)
    db.commit()
    db.refresh(record)
    return record


def update_status(db: Session, book_id: int, status: BookStatus) -> Optional[BookRecord]:
    record = get_book(db, book_id)
    if record is None:
        return None
    record.status = status.value
    db.commit()
    db.refresh(record)
    return record


def delete_book(db: Session, book_id: int) -> bool:
    record = get_book(db, book_id)
    if record is None:
        return False
    db.delete(record)
    db.commit()
    return True
