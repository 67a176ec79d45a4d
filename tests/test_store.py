from book_service.catalog import store
from book_service.catalog.schemas import BookCreate, BookStatus


def _seed(db):
    store.create_book(db, BookCreate(title="Dune", author="Frank Herbert", genre="Science Fiction", isbn="9780441013593"))
    store.create_book(db, BookCreate(title="Emma", author="Jane Austen", genre="Classic", status=BookStatus.BORROWED))
    store.create_book(db, BookCreate(title="Neuromancer", author="William Gibson", genre="Science Fiction"))


def test_create_assigns_ids_and_defaults(db):
    rec = store.create_book(db, BookCreate(title="  Dune ", author="Frank Herbert"))
    assert rec.id is not None
    assert rec.title == "Dune"
    assert rec.status == "available"


def test_list_books_ordered_and_filtered(db):
    _seed(db)
    assert [b.title for b in store.list_books(db)] == ["Dune", "Emma", "Neuromancer"]
    assert [b.title for b in store.list_books(db, BookStatus.BORROWED)] == ["Emma"]


def test_search_matches_any_field_case_insensitive(db):
    _seed(db)
    assert [b.title for b in store.search_books(db, "science")] == ["Dune", "Neuromancer"]
    assert [b.title for b in store.search_books(db, "AUSTEN")] == ["Emma"]
    assert [b.title for b in store.search_books(db, "0441")] == ["Dune"]
    assert store.search_books(db, "nothing like this") == []


def test_search_blank_term_lists_all(db):
    _seed(db)
    assert len(store.search_books(db, "   ")) == 3
    assert len(store.search_books(db, None)) == 3


def test_search_with_status(db):
    _seed(db)
    assert store.search_books(db, "science", BookStatus.BORROWED) == []


def test_update_and_status(db):
    rec = store.create_book(db, BookCreate(title="Dune", author="Frank Herbert"))
    updated = store.update_book(db, rec.id, BookCreate(title="Dune Messiah", author="Frank Herbert", pages=256))
    assert updated.title == "Dune Messiah"
    assert updated.pages == 256
    assert store.update_status(db, rec.id, BookStatus.MAINTENANCE).status == "maintenance"


def test_missing_rows(db):
    assert store.get_book(db, 42) is None
    assert store.update_book(db, 42, BookCreate(title="x", author="y")) is None
    assert store.update_status(db, 42, BookStatus.BORROWED) is None
    assert store.delete_book(db, 42) is False


def test_delete(db):
    rec = store.create_book(db, BookCreate(title="Dune", author="Frank Herbert"))
    assert store.delete_book(db, rec.id) is True
    assert store.get_book(db, rec.id) is None


def test_search_wildcards_are_literal(db):
    store.create_book(db, BookCreate(title="100% Wolf", author="Jayne Lyons"))
    store.create_book(db, BookCreate(title="snake_case for humans", author="A. Writer"))
    store.create_book(db, BookCreate(title="Dune", author="Frank Herbert"))
    assert [b.title for b in store.search_books(db, "%")] == ["100% Wolf"]
    assert [b.title for b in store.search_books(db, "_")] == ["snake_case for humans"]
    assert store.search_books(db, "\\") == []


def test_count_by_status(db):
    assert store.count_by_status(db) == {s: 0 for s in BookStatus}
    _seed(db)
    counts = store.count_by_status(db)
    assert counts[BookStatus.AVAILABLE] == 2
    assert counts[BookStatus.BORROWED] == 1
    assert counts[BookStatus.MAINTENANCE] == 0
