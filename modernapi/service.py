"""Book service operations on top of the repository."""

from __future__ import annotations

import logging

from modernapi.model import Book, DBBook
from modernapi.repo import BookRepository

log = logging.getLogger(__name__)


def _to_db(book: Book) -> DBBook:
    return DBBook(isbn=book.isbn, name=book.name, publisher=book.publisher)


class BookService:
    """Adds, updates, lists, fetches and removes books."""

    def __init__(self, repository: BookRepository) -> None:
        self.repository = repository

    def add_book(self, book: Book) -> str:
        """Store ``book`` and return a status message."""
        log.info("adding book")
        record = _to_db(book)
        self.repository.add_book(record)
        return (
            f"book with isbn({record.isbn}), name({record.name}), "
            f"publisher({record.publisher}) added successfully"
        )

    def update_book(self, book: Book) -> str:
        """Update the stored book with the same isbn and return a status message."""
        log.info("updating book")
        record = _to_db(book)
        self.repository.update_book(record)
        return (
            f"book with isbn({record.isbn}), name({record.name}), "
            f"publisher({record.publisher}) updated successfully"
        )

    def list_books(self) -> list[Book]:
        """Return all books, passed through their JSON form."""
        log.info("listing books")
        return [Book.from_json(record.to_json()) for record in self.repository.get_all_books()]

    def get_book(self, isbn: int) -> Book:
        """Return the book with ``isbn``; an empty book if there is none."""
        log.info("fetching book")
        record = self.repository.get_book(isbn)
        return Book(isbn=record.isbn, name=record.name, publisher=record.publisher)

    def remove_book(self, isbn: int) -> str:
        """Remove the book with ``isbn`` and return a status message."""
        log.info("removing book")
        self.repository.remove_book(isbn)
        return f"book with isbn({isbn}) removed successfully"