"""Criteria trees and their compilation to a WHERE clause.

A criteria tree is either built from nodes directly::

    Group(Glue.AND, [Equals("a", 1), Group(Glue.OR, [Equals("b", 2), IsNull("c")])])

or from the keyword form, an ordered multimap whose keys are column names or
``@``-keywords::

    Criteria(a=1).add("@or", {"b": 2, "c": NULL})

Keywords: ``@or`` / ``@and`` group their sub-criteria, ``@limit`` caps the
row count. The values ``NULL`` (``"@null"``) and ``NOT_NULL``
(``"@not_null"``) match with IS NULL / IS NOT NULL; ``None`` means NULL too.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from row_mapper.core.enums import Glue
from row_mapper.core.exceptions import (
    DuplicateLimitError,
    InvalidLimitError,
    MalformedCriteria,
    UnknownCriteriaKeyword,
)

NULL = "@null"
NOT_NULL = "@not_null"

_KEYWORD_GLUE = {"@or": Glue.OR, "@and": Glue.AND}


# --- Nodes ---


@dataclass(frozen=True)
class Equals:
    column: str
    value: Any


@dataclass(frozen=True)
class IsNull:
    column: str


@dataclass(frozen=True)
class IsNotNull:
    column: str


@dataclass(frozen=True)
class Limit:
    count: Any


@dataclass(frozen=True)
class Group:
    glue: Glue
    children: tuple[CriteriaNode, ...] = ()

    def __init__(self, glue: Glue | str, children: Iterable[CriteriaNode] = ()) -> None:
        object.__setattr__(self, "glue", Glue(glue))
        object.__setattr__(self, "children", tuple(children))


CriteriaNode = Union[Equals, IsNull, IsNotNull, Limit, Group]


# --- Keyword form ---


class Criteria:
    """Ordered criteria multimap; a key may appear more than once."""

    def __init__(self, items: Mapping[str, Any] | Iterable[tuple[str, Any]] = (), **kwargs: Any):
        self._items: list[tuple[str, Any]] = []
        pairs = items.items() if isinstance(items, Mapping) else items
        for key, value in pairs:
            self.add(key, value)
        for key, value in kwargs.items():
            self.add(key, value)

    def add(self, key: str, value: Any) -> Criteria:
        self._items.append((key, value))
        return self

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Criteria({self._items!r})"


CriteriaLike = Union[Group, Criteria, Mapping[str, Any], Iterable[tuple[str, Any]], None]


def _pairs(criteria: Any, keyword: str) -> list[tuple[str, Any]]:
    if isinstance(criteria, Mapping):
        pairs = list(criteria.items())
    elif isinstance(criteria, Iterable) and not isinstance(criteria, (str, bytes)):
        pairs = list(criteria)
    else:
        raise MalformedCriteria(keyword, criteria)
    for pair in pairs:
        if not (isinstance(pair, tuple) and len(pair) == 2 and isinstance(pair[0], str)):
            raise MalformedCriteria(keyword, criteria)
    return pairs


def parse_criteria(
    criteria: CriteriaLike, glue: Glue = Glue.AND, keyword: str = "criteria"
) -> Group:
    """Turn the keyword form into a node tree glued with *glue*.

    Raises:
        UnknownCriteriaKeyword: For an unrecognised ``@`` key.
        MalformedCriteria: If *criteria* (or an ``@or``/``@and`` value) is
            not a collection of column/value pairs.
    """
    if criteria is None:
        return Group(glue)
    if isinstance(criteria, Group):
        return criteria

    children: list[CriteriaNode] = []
    for key, value in _pairs(criteria, keyword):
        if key.startswith("@"):
            if key in _KEYWORD_GLUE:
                children.append(parse_criteria(value, _KEYWORD_GLUE[key], key))
            elif key == "@limit":
                children.append(Limit(value))
            else:
                raise UnknownCriteriaKeyword(key)
        elif value is None or (isinstance(value, str) and value == NULL):
            children.append(IsNull(key))
        elif isinstance(value, str) and value == NOT_NULL:
            children.append(IsNotNull(key))
        else:
            children.append(Equals(key, value))
    return Group(glue, children)


# --- Compilation ---


@dataclass
class CompiledCriteria:
    """A WHERE fragment, its positional bind values and the row limit."""

    where: str = ""
    values: list[Any] = field(default_factory=list)
    limit: int | None = None


def _backtick(identifier: str) -> str:
    return "`" + identifier.replace("`", "``") + "`"


class CriteriaCompiler:
    """Compiles criteria trees into parameterized SQL.

    Args:
        quote: Identifier quoting function. Defaults to backticks.
    """

    def __init__(self, quote: Callable[[str], str] | None = None) -> None:
        self._quote = quote or _backtick

    def compile(self, tree: CriteriaLike, glue: Glue = Glue.AND) -> CompiledCriteria:
        """Compile *tree*; the keyword form is glued with *glue* at the top level.

        Raises:
            DuplicateLimitError: If more than one limit appears anywhere.
            InvalidLimitError: If a limit is not a non-negative integer.
            UnknownCriteriaKeyword: For an unrecognised ``@`` key.
            MalformedCriteria: If a group is not a collection of pairs.
        """
        root = parse_criteria(tree, glue)
        result = CompiledCriteria()
        clauses = self._compile_children(root, result)
        result.where = f" {root.glue.value} ".join(clauses)
        return result

    def _compile_children(self, group: Group, result: CompiledCriteria) -> list[str]:
        clauses: list[str] = []
        for node in group.children:
            clause = self._compile_node(node, result)
            if clause:
                clauses.append(clause)
        return clauses

    def _compile_node(self, node: CriteriaNode, result: CompiledCriteria) -> str | None:
        if isinstance(node, Equals):
            value = node.value
            if value is None or (isinstance(value, str) and value == NULL):
                return f"{self._quote(node.column)} IS NULL"
            if isinstance(value, str) and value == NOT_NULL:
                return f"{self._quote(node.column)} IS NOT NULL"
            result.values.append(value)
            return f"{self._quote(node.column)} = ?"
        if isinstance(node, IsNull):
            return f"{self._quote(node.column)} IS NULL"
        if isinstance(node, IsNotNull):
            return f"{self._quote(node.column)} IS NOT NULL"
        if isinstance(node, Limit):
            self._set_limit(node.count, result)
            return None
        if isinstance(node, Group):
            inner = self._compile_children(node, result)
            if not inner:
                return None
            return "( " + f" {node.glue.value} ".join(inner) + " )"
        raise TypeError(f"Not a criteria node: {node!r}")

    @staticmethod
    def _set_limit(count: Any, result: CompiledCriteria) -> None:
        if result.limit is not None:
            raise DuplicateLimitError()
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise InvalidLimitError(count)
        result.limit = count
