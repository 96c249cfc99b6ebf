"""Unit tests for Repository reads."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from row_mapper.core.connection import DataLayer
from row_mapper.core.criteria import NOT_NULL, Criteria
from row_mapper.core.exceptions import (
    DuplicateLimitError,
    EntityConstructionError,
    FieldDecodeError,
    NoMatchingConstructor,
    QueryExecutionError,
)
from row_mapper.mapping.builder import entity
from row_mapper.mapping.state import is_persisted
from row_mapper.repository.base import Repository


@dataclass
class Book:
    id: int | None = None
    title: str = ""
    pages: int | None = None
    shelf: str | None = None


@pytest.fixture
def repo(library: DataLayer) -> Repository[Book]:
    library.execute(
        "INSERT INTO books (title, pages) VALUES (?, ?), (?, ?), (?, ?)",
        ("Dune", 412, "Emma", None, "Ulysses", 730),
    )
    registry = (
        entity(Book, "books")
        .column("id")
        .column("title")
        .column("pages", datatype=int)
        .constructor(Book)
        .constructor(lambda shelf: Book(shelf=shelf), str)
        .build(library)
    )
    return Repository(registry)


class TestReads:
    def test_by_id(self, repo: Repository[Book]) -> None:
        book = repo.by_id(2)
        assert book == Book(id=2, title="Emma", pages=None)
        assert is_persisted(book)

    def test_by_id_missing(self, repo: Repository[Book]) -> None:
        assert repo.by_id(404) is None

    def test_by_id_with_extras(self, repo: Repository[Book]) -> None:
        book = repo.by_id(1, "B3")
        assert book is not None
        assert book.shelf == "B3"

    def test_all(self, repo: Repository[Book]) -> None:
        result = repo.all()
        assert result.complete
        assert [b.title for b in result] == ["Dune", "Emma", "Ulysses"]
        assert len(result) == 3
        assert result[0].id == 1

    def test_selection(self, repo: Repository[Book]) -> None:
        result = repo.selection({"@or": {"title": "Dune", "pages": None}})
        assert [b.title for b in result.unwrap()] == ["Dune", "Emma"]

    def test_selection_not_null_and_limit(self, repo: Repository[Book]) -> None:
        result = repo.selection(Criteria().add("pages", NOT_NULL).add("@limit", 1))
        assert [b.title for b in result.unwrap()] == ["Dune"]

    def test_selection_without_criteria(self, repo: Repository[Book]) -> None:
        assert len(repo.selection()) == 3

    def test_selection_passes_extras(self, repo: Repository[Book]) -> None:
        result = repo.selection({"title": "Emma"}, "C1")
        assert result[0].shelf == "C1"

    def test_malformed_criteria_raise(self, repo: Repository[Book]) -> None:
        with pytest.raises(DuplicateLimitError):
            repo.selection(Criteria().add("@limit", 1).add("@limit", 2))


class TestPartialResults:
    def test_failure_mid_iteration_keeps_converted_rows(
        self, library: DataLayer, repo: Repository[Book], caplog: pytest.LogCaptureFixture
    ) -> None:
        library.execute("UPDATE books SET pages = ? WHERE id = ?", ("lots", 2))

        with caplog.at_level(logging.ERROR, logger="row_mapper"):
            result = repo.all()

        assert not result.complete
        assert [b.title for b in result] == ["Dune"]
        assert isinstance(result.error, FieldDecodeError)
        assert "stopped after 1 row(s)" in caplog.text
        with pytest.raises(FieldDecodeError):
            result.unwrap()

    def test_constructor_failure_keeps_converted_rows(
        self, library: DataLayer, repo: Repository[Book]
    ) -> None:
        built: list[Book] = []

        def limited() -> Book:
            if built:
                raise RuntimeError("only one book allowed")
            built.append(Book())
            return built[0]

        registry = (
            entity(Book, "books").columns("id", "title").constructor(limited).build(library)
        )
        result = Repository(registry).all()

        assert [b.title for b in result] == ["Dune"]
        assert isinstance(result.error, EntityConstructionError)
        assert isinstance(result.error.__cause__, RuntimeError)

    def test_execution_error_reported(self, repo: Repository[Book]) -> None:
        result = repo.selection({"no_such_column": 1})
        assert len(result) == 0
        assert isinstance(result.error, QueryExecutionError)
        assert "no_such_column" in result.sql

    def test_no_matching_constructor_reported(self, repo: Repository[Book]) -> None:
        result = repo.all(1, 2)
        assert isinstance(result.error, NoMatchingConstructor)
        assert result.items == []


class TestWrites:
    def test_persist_then_by_id_round_trip(self, repo: Repository[Book]) -> None:
        book = Book(title="Middlemarch", pages=880)
        assert repo.persist(book)
        loaded = repo.by_id(repo.primary_key(book))
        assert loaded == book

    def test_refresh(self, library: DataLayer, repo: Repository[Book]) -> None:
        book = repo.by_id(1)
        assert book is not None
        library.execute("UPDATE books SET title = ? WHERE id = ?", ("Dune Messiah", 1))
        repo.refresh(book)
        assert book.title == "Dune Messiah"

    def test_store_propagates(self, library: DataLayer, repo: Repository[Book]) -> None:
        library.execute("DROP TABLE books")
        with pytest.raises(QueryExecutionError):
            repo.store(Book(title="Lost"))
