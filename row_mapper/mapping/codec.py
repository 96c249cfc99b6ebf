"""Serialized-field codecs.

A serialized field is stored as an opaque byte blob. Values are dumped to
JSON through a pydantic TypeAdapter for the declared type, so anything
pydantic can validate (models, dataclasses, containers, scalars) can be
stored. The encoding is an internal detail and not meant to be queried.
"""

from __future__ import annotations

from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError


class CodecError(ValueError):
    """Raised when a value cannot be encoded or decoded."""


class Codec(Protocol):
    """Converts between a field value and its stored bytes."""

    def encode(self, value: Any) -> bytes: ...

    def decode(self, data: Any) -> Any: ...


class JsonCodec:
    """Pydantic JSON codec for one declared type.

    Raises:
        TypeError: If pydantic cannot build a schema for *target_type*.
    """

    def __init__(self, target_type: type) -> None:
        self.target_type = target_type
        try:
            self._adapter: TypeAdapter[Any] = TypeAdapter(target_type)
        except PydanticSchemaGenerationError as e:
            raise TypeError(f"{target_type.__name__} cannot be serialized: {e}") from e

    def encode(self, value: Any) -> bytes:
        try:
            return self._adapter.dump_json(value)
        except Exception as e:
            raise CodecError(f"cannot encode {type(value).__name__}: {e}") from e

    def decode(self, data: Any) -> Any:
        # Drivers return bytes, bytearray or memoryview for blob columns
        if isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        if not isinstance(data, (bytes, str)):
            raise CodecError(f"expected bytes, got {type(data).__name__}")
        try:
            return self._adapter.validate_json(data)
        except ValidationError as e:
            raise CodecError(
                f"stored value is not a valid {self.target_type.__name__}: "
                f"{e.error_count()} error(s)"
            ) from e
