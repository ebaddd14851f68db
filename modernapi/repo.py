"""Storage of books in the database."""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, Table, Text, delete, insert, select, update
from sqlalchemy.engine import Engine

from modernapi.model import DBBook

metadata = MetaData()

books_table = Table(
    DBBook.TABLE_NAME,
    metadata,
    Column("isbn", Integer),
    Column("name", Text),
    Column("publisher", Text),
)


def _to_book(row) -> DBBook:
    return DBBook(isbn=row.isbn, name=row.name or "", publisher=row.publisher or "")


class BookRepository:
    """Reads and writes rows of the books table."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def add_book(self, book: DBBook) -> None:
        """Insert ``book``."""
        with self.engine.begin() as connection:
            connection.execute(insert(books_table).values(isbn=book.isbn, name=book.name, publisher=book.publisher))

    def update_book(self, book: DBBook) -> None:
        """Set name and publisher of the rows with the book's isbn."""
        with self.engine.begin() as connection:
            connection.execute(
                update(books_table)
                .where(books_table.c.isbn == book.isbn)
                .values(name=book.name, publisher=book.publisher)
            )

    def get_book(self, isbn: int) -> DBBook:
        """Return the book with ``isbn``, or an empty book if there is none."""
        with self.engine.connect() as connection:
            row = connection.execute(select(books_table).where(books_table.c.isbn == isbn).limit(1)).first()
        return DBBook() if row is None else _to_book(row)

    def get_all_books(self) -> list[DBBook]:
        """Return every stored book."""
        with self.engine.connect() as connection:
            return [_to_book(row) for row in connection.execute(select(books_table))]

    def remove_book(self, isbn: int) -> None:
        """Delete the books with ``isbn``."""
        with self.engine.begin() as connection:
            connection.execute(delete(books_table).where(books_table.c.isbn == isbn))