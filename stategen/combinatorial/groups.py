"""State groups of a stateful entity.

A StateGroupMap is the read-only view of an entity's groups that every
later stage works from: which states exist, which group owns each state,
and the position of each group inside a permutation.

Example:
    >>> groups = StateGroupMap.from_groups([
    ...     StateGroup("Position", ("Left", "Middle", "Right")),
    ...     StateGroup("Movable", ("On", "Off")),
    ... ])
    >>> groups.validate_unique_states()
    >>> groups.group_of("Off")  # "Movable"
    >>> groups.total_permutations  # 3 * 2 = 6
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping, Sequence

from stategen.description.models import StateGroup
from stategen.errors import ErrorCode, ErrorContext, InvalidStateRepresentation

logger = logging.getLogger(__name__)


class StateGroupMap(Mapping[str, tuple[str, ...]]):
    """Ordered mapping of group name to the states of that group.

    Iteration follows group declaration order, which is also the order of
    states inside every permutation.
    """

    def __init__(self, groups: Iterable[StateGroup]) -> None:
        self.groups: tuple[StateGroup, ...] = tuple(groups)

        names = [g.name for g in self.groups]
        if len(names) != len(set(names)):
            duplicates = [n for n in names if names.count(n) > 1]
            raise ValueError(f"Duplicate state group names: {sorted(set(duplicates))}")

        self._by_name: dict[str, StateGroup] = {g.name: g for g in self.groups}
        self._index: dict[str, int] = {g.name: i for i, g in enumerate(self.groups)}
        # First owner wins; duplicates are reported by validate_unique_states().
        self._owner: dict[str, str] = {}
        for group in self.groups:
            for state in group.states:
                self._owner.setdefault(state, group.name)

    @classmethod
    def from_groups(cls, groups: Iterable[StateGroup]) -> StateGroupMap:
        return cls(groups)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, Sequence[str]]]) -> StateGroupMap:
        """Build from ordered ``(group name, states)`` pairs."""
        return cls(StateGroup(name, tuple(states)) for name, states in pairs)

    def __getitem__(self, name: str) -> tuple[str, ...]:
        return self._by_name[name].states

    def __iter__(self) -> Iterator[str]:
        return iter(g.name for g in self.groups)

    def __len__(self) -> int:
        return len(self.groups)

    @property
    def group_names(self) -> list[str]:
        return [g.name for g in self.groups]

    @property
    def total_permutations(self) -> int:
        """Product of every group's state count (0 when there are no groups)."""
        if not self.groups:
            return 0
        result = 1
        for group in self.groups:
            result *= group.size
        return result

    def pairs(self) -> list[tuple[str, tuple[str, ...]]]:
        return [(g.name, g.states) for g in self.groups]

    def states_of(self, group: str) -> tuple[str, ...]:
        """Get the states of a group.

        Raises:
            KeyError: If the group does not exist.
        """
        if group not in self._by_name:
            raise KeyError(
                f"State group '{group}' not found. Available: {self.group_names}"
            )
        return self._by_name[group].states

    def index_of(self, group: str) -> int:
        """Position of ``group`` inside a permutation."""
        return self._index[group]

    def group_of(self, state: str) -> str | None:
        """Name of the group declaring ``state``, or None if no group does."""
        return self._owner.get(state)

    def contains_state(self, state: str) -> bool:
        return state in self._owner

    def duplicate_states(self) -> list[str]:
        """Every state name declared more than once, in first-seen order."""
        counts = Counter(s for g in self.groups for s in g.states)
        seen: list[str] = []
        for group in self.groups:
            for state in group.states:
                if counts[state] > 1 and state not in seen:
                    seen.append(state)
        return seen

    def validate_unique_states(self, entity_name: str | None = None) -> None:
        """Reject state names repeated within a group or across groups.

        Raises:
            InvalidStateRepresentation: Listing every offending name once.
        """
        duplicates = self.duplicate_states()
        if duplicates:
            raise InvalidStateRepresentation(
                "A state name cannot appear twice, neither in the same group nor "
                f"in a different one. Problematic states: {', '.join(duplicates)}",
                error_code=ErrorCode.DUPLICATE_STATE,
                context=ErrorContext(entity_name=entity_name, states=duplicates),
            )
        logger.debug(
            "Validated %d state groups (%d states)", len(self.groups), len(self._owner)
        )

    def __repr__(self) -> str:
        groups = ", ".join(f"{g.name}({g.size})" for g in self.groups)
        return f"StateGroupMap([{groups}], total={self.total_permutations})"
