"""Entity lifecycle state.

The mapper tracks whether an object is backed by a row with one hidden
attribute. Any class whose instances accept that attribute can be mapped;
subclassing Entity only adds convenience accessors.
"""

from __future__ import annotations

from typing import Any

from row_mapper.core.enums import EntityState

STATE_ATTR = "_row_mapper_state"


def state_of(entity: Any) -> EntityState:
    """Lifecycle state of *entity*; directly constructed objects are transient."""
    return getattr(entity, STATE_ATTR, EntityState.TRANSIENT)  # type: ignore[no-any-return]


def is_persisted(entity: Any) -> bool:
    return state_of(entity) is EntityState.PERSISTED


def can_hold_state(cls: type) -> bool:
    """True if instances of *cls* accept the hidden state attribute.

    Classes built only from ``__slots__`` (such as ``@dataclass(slots=True)``)
    have no instance ``__dict__`` and cannot be mapped unless a slot is
    reserved for the state.
    """
    for klass in cls.__mro__:
        if klass is object:
            continue
        slots = klass.__dict__.get("__slots__")
        if slots is None:
            return True
        names = (slots,) if isinstance(slots, str) else tuple(slots)
        if "__dict__" in names or STATE_ATTR in names:
            return True
    return False


def mark_persisted(entity: Any) -> None:
    """Record that a row exists for *entity*. There is no way back."""
    # Bypasses frozen dataclasses' __setattr__
    object.__setattr__(entity, STATE_ATTR, EntityState.PERSISTED)


class Entity:
    """Optional mixin exposing the lifecycle state of a mapped object."""

    @property
    def state(self) -> EntityState:
        return state_of(self)

    @property
    def persisted(self) -> bool:
        return is_persisted(self)
