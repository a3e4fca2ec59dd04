from __future__ import annotations

from enum import Enum
from typing import Mapping, TypeVar

from .exceptions import InvalidTransitionError

S = TypeVar("S", bound=Enum)


def check_transition(table: Mapping[S, frozenset], *, entity: str, current: S, target: S) -> None:
    """Reject any edge that is not listed in the entity's transition table."""

    if target not in table.get(current, frozenset()):
        raise InvalidTransitionError(
            f"{entity} cannot move from '{current.value}' to '{target.value}'",
            entity=entity,
            current=current.value,
            target=target.value,
        )
