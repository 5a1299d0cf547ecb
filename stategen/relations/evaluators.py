"""Logical relations between a condition set and a permutation.

Each relation answers one question: does this permutation satisfy this set
of states? The group map is passed along because some relations need to
know which states are mutually exclusive.

    OR   at least one condition state is in the permutation
    XOR  exactly one condition state is in the permutation
    AND  every condition state is in the permutation; naming two states of
         the same group is a modeling error, since a permutation holds one
         state per group
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection, Mapping, Sequence

from stategen.errors import ErrorCode, ErrorContext, InvalidStateRepresentation


class LogicalRelation(ABC):
    """Predicate over a permutation.

    Implementations must be constructible without arguments so the
    registry can instantiate them.
    """

    @abstractmethod
    def validate(
        self,
        groups: Mapping[str, Sequence[str]],
        permutation: Collection[str],
        condition_states: Collection[str],
    ) -> bool:
        """Return True if ``permutation`` satisfies ``condition_states``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _matches(permutation: Collection[str], condition_states: Collection[str]) -> int:
    return len(set(condition_states) & set(permutation))


class OrRelation(LogicalRelation):
    def validate(self, groups, permutation, condition_states) -> bool:
        return _matches(permutation, condition_states) >= 1


class XorRelation(LogicalRelation):
    def validate(self, groups, permutation, condition_states) -> bool:
        return _matches(permutation, condition_states) == 1


class AndRelation(LogicalRelation):
    """All condition states must be active at once.

    Raises:
        InvalidStateRepresentation: If two condition states belong to the
            same group, whatever the permutation.
    """

    def validate(self, groups, permutation, condition_states) -> bool:
        wanted = set(condition_states)
        for group_name, states in groups.items():
            clashing = [s for s in states if s in wanted]
            if len(clashing) > 1:
                raise InvalidStateRepresentation(
                    "An AND relation cannot require two states of the same state "
                    f"group: group '{group_name}' would need {', '.join(clashing)}",
                    error_code=ErrorCode.CONTRADICTORY_CONDITION,
                    context=ErrorContext(
                        permutation=tuple(permutation),
                        states=clashing,
                        extra={"group": group_name},
                    ),
                )
        return wanted.issubset(permutation)
