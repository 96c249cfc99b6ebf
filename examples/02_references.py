"""
Example 02: References and Serialized Fields

This example maps a book that points at its author through a foreign key
and stores its cover as a serialized blob.
"""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel

from row_mapper import ConnectionConfig, DataLayer, Repository, entity


@dataclass
class Author:
    id: Optional[int] = None
    name: str = ""


class Cover(BaseModel):
    color: str
    tags: list[str] = []


@dataclass
class Book:
    id: Optional[int] = None
    title: str = ""
    author: Optional[Author] = None
    cover: Optional[Cover] = None
    shelf: Optional[str] = None
    loans: list[str] = field(default_factory=list)


def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:")

    with DataLayer(config) as db:
        db.execute("CREATE TABLE authors (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
        db.execute("""
            CREATE TABLE books (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL,
                author_id INTEGER REFERENCES authors(id),
                cover BLOB
            )
        """)

        authors = entity(Author, "authors").columns("id", "name").build(db)
        books = (
            entity(Book, "books")
            .column("id")
            .column("title")
            .column("author", "author_id", references=authors)
            .column("cover", serializes=Cover)
            .constructor(Book)
            .constructor(lambda shelf: Book(shelf=shelf), str)
            .build(db)
        )

        author_repo = Repository(authors)
        book_repo = Repository(books)

        print("=== References and Serialized Fields ===\n")

        herbert = Author(name="Frank Herbert")
        author_repo.store(herbert)
        book_repo.store(Book(title="Dune", author=herbert, cover=Cover(color="sand")))
        book_repo.store(Book(title="Children of Dune", author=herbert))

        # The extra argument picks the one-argument constructor
        dune = book_repo.by_id(1, "A-12")
        print(f"{dune.title} by {dune.author.name}, cover {dune.cover}, shelf {dune.shelf}")

        # Unmapped fields are never touched by refresh
        dune.loans.append("reader-7")
        book_repo.refresh(dune)
        print(f"Loans after refresh: {dune.loans}\n")

        print("Books without a cover:")
        for book in book_repo.selection({"cover": None}):
            print(f"  - {book.title}")


if __name__ == "__main__":
    main()
