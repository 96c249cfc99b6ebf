"""Integration test for the SQLite mapping workflow.

Covers: binding against a live schema, references and serialized fields,
persist/refresh round trips, criteria selection and transactions against a
real SQLite in-memory database.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel

from row_mapper import Entity, Repository, entity
from row_mapper.core.connection import DataLayer
from row_mapper.core.exceptions import FieldDecodeError
from row_mapper.core.registry import EntityRegistry

# --- Test models ---


@dataclass
class Author(Entity):
    id: int | None = None
    name: str = ""
    email: str | None = None


class Cover(BaseModel):
    color: str
    tags: list[str] = []


@dataclass
class Book(Entity):
    id: int | None = None
    title: str = ""
    author: Author | None = None
    cover: Cover | None = None
    pages: int | None = None
    notes: list[str] = field(default_factory=list)


# --- Fixtures ---


@pytest.fixture
def authors(library: DataLayer) -> EntityRegistry:
    return entity(Author, "authors").columns("id", "name", "email").build(library)


@pytest.fixture
def books(library: DataLayer, authors: EntityRegistry) -> EntityRegistry:
    return (
        entity(Book, "books")
        .column("id")
        .column("title", datatype=str)
        .column("author", "author_id", references=authors)
        .column("cover", serializes=Cover)
        .column("pages", datatype=int)
        .constructor(Book)
        .constructor(lambda title: Book(title=title), str)
        .build(library)
    )


# --- Tests ---


@pytest.mark.integration
class TestRoundTrip:
    def test_persist_then_load(self, authors: EntityRegistry, books: EntityRegistry) -> None:
        author_repo: Repository[Author] = Repository(authors)
        book_repo: Repository[Book] = Repository(books)

        ann = Author(name="Ann", email="ann@example.com")
        assert author_repo.persist(ann)
        assert ann.persisted

        dune = Book(title="Dune", author=ann, cover=Cover(color="sand", tags=["desert"]), pages=412)
        assert book_repo.persist(dune)
        assert dune.id == 1

        loaded = book_repo.by_id(1)
        assert loaded == dune
        assert loaded is not dune
        assert loaded.author == ann
        assert loaded.cover == Cover(color="sand", tags=["desert"])

    def test_insert_then_update(self, library: DataLayer, authors: EntityRegistry) -> None:
        repo: Repository[Author] = Repository(authors)
        ann = Author(name="Ann")
        repo.store(ann)
        ann.email = "ann@example.com"
        repo.store(ann)

        rows = library.fetch_all("SELECT id, name, email FROM authors")
        assert rows == [{"id": 1, "name": "Ann", "email": "ann@example.com"}]

    def test_unmapped_field_untouched(self, books: EntityRegistry) -> None:
        repo: Repository[Book] = Repository(books)
        book = Book(title="Emma", notes=["reread"])
        repo.store(book)
        repo.refresh(book)
        assert book.notes == ["reread"]


@pytest.mark.integration
class TestSelection:
    @pytest.fixture(autouse=True)
    def _seed(self, authors: EntityRegistry, books: EntityRegistry) -> None:
        author_repo: Repository[Author] = Repository(authors)
        book_repo: Repository[Book] = Repository(books)
        ann, bob = Author(name="Ann"), Author(name="Bob")
        author_repo.store(ann)
        author_repo.store(bob)
        book_repo.store(Book(title="Dune", author=ann, pages=412))
        book_repo.store(Book(title="Emma", author=bob))
        book_repo.store(Book(title="Ulysses", author=ann, pages=730))

    def test_by_reference_key(self, books: EntityRegistry) -> None:
        result = Repository(books).selection({"author_id": 1})
        assert [b.title for b in result.unwrap()] == ["Dune", "Ulysses"]
        assert all(b.author.name == "Ann" for b in result)

    def test_nested_groups_and_limit(self, books: EntityRegistry) -> None:
        criteria = {"@or": {"pages": None, "@and": {"author_id": 1, "pages": 730}}, "@limit": 5}
        result = Repository(books).selection(criteria)
        assert [b.title for b in result.unwrap()] == ["Emma", "Ulysses"]

    def test_extras_select_constructor(self, books: EntityRegistry) -> None:
        result = Repository(books).selection({"title": "Emma"}, "ignored")
        # Mapped fields overwrite whatever the constructor set
        assert result.unwrap()[0].title == "Emma"

    def test_corrupt_row_stops_read(self, library: DataLayer, books: EntityRegistry) -> None:
        library.execute("UPDATE books SET pages = ? WHERE title = ?", ("many", "Emma"))
        result = Repository(books).all()
        assert [b.title for b in result] == ["Dune"]
        assert isinstance(result.error, FieldDecodeError)


@pytest.mark.integration
class TestTransactions:
    def test_rollback_discards_inserts(
        self, library: DataLayer, authors: EntityRegistry, count_rows
    ) -> None:
        repo: Repository[Author] = Repository(authors)
        with pytest.raises(RuntimeError), library.transaction():
            repo.store(Author(name="Ann"))
            repo.store(Author(name="Bob"))
            raise RuntimeError("abort")

        assert count_rows("authors") == 0

    def test_commit_keeps_inserts(
        self, library: DataLayer, authors: EntityRegistry, count_rows
    ) -> None:
        repo: Repository[Author] = Repository(authors)
        with library.transaction():
            repo.store(Author(name="Ann"))
            repo.store(Author(name="Bob"))

        assert count_rows("authors") == 2
        assert [a.name for a in repo.all()] == ["Ann", "Bob"]
