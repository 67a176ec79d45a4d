"""Attach model-generated prices to stored books."""

import logging
from typing import Iterable, List

from ..ai import PriceLookup
from .schemas import Book
from .store import BookRecord


logger = logging.getLogger(__name__)


def with_price(record: BookRecord, lookup: PriceLookup) -> Book:
    book = Book.model_validate(record)
    result = lookup.price_for(book.title, book.author)
    if result.failure is not None:
        logger.debug("No price for book %s: %s", book.id, result.failure.value)
    book.price = result.price
    return book


def with_prices(records: Iterable[BookRecord], lookup: PriceLookup) -> List[Book]:
    # one model run per book, sequentially
    return [with_price(r, lookup) for r in records]
