"""Repository layer - the caller-facing read/write operations."""

from __future__ import annotations

from row_mapper.repository.base import Repository

__all__ = [
    "Repository",
]
