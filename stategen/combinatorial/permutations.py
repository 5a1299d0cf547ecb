"""Permutations of a stateful entity's states.

A Permutation holds exactly one state per group, in group declaration
order. It is the generator's notion of one concrete state of an instance.
The full set of permutations is the Cartesian product of all groups.

Example:
    >>> perms = list(enumerate_permutations([
    ...     ("Position", ["Left", "Right"]),
    ...     ("Movable", ["On", "Off"]),
    ... ]))
    >>> [p.states for p in perms]
    [('Left', 'On'), ('Left', 'Off'), ('Right', 'On'), ('Right', 'Off')]
    >>> perms[0].type_name("State")
    'LeftOnState'
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Permutation:
    """One state per group, in group declaration order.

    Permutations are never mutated; a transition produces a new one.
    """

    states: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", tuple(self.states))

    def __iter__(self) -> Iterator[str]:
        return iter(self.states)

    def __len__(self) -> int:
        return len(self.states)

    def __getitem__(self, index: int) -> str:
        return self.states[index]

    def __contains__(self, state: object) -> bool:
        return state in self.states

    def replace(self, index: int, state: str) -> Permutation:
        """Return a copy with the state at ``index`` substituted."""
        states = list(self.states)
        states[index] = state
        return Permutation(tuple(states))

    def type_name(self, suffix: str) -> str:
        """Canonical wrapper name: the states concatenated, then ``suffix``."""
        return "".join(self.states) + suffix

    def __repr__(self) -> str:
        return f"Permutation([{', '.join(self.states)}])"


def enumerate_permutations(
    groups: Iterable[tuple[str, Sequence[str]]],
) -> Iterator[Permutation]:
    """Lazily yield every combination of one state per group.

    The first group varies slowest, so the output is ordered the same way
    on every run. Zero groups yield nothing.

    Args:
        groups: Ordered ``(group name, states)`` pairs.

    Yields:
        Permutation objects, ``prod(len(states))`` of them.
    """
    state_lists = [tuple(states) for _, states in groups]
    if not state_lists:
        return

    logger.debug(
        "Enumerating permutations over %d groups (sizes %s)",
        len(state_lists),
        [len(s) for s in state_lists],
    )
    for combo in itertools.product(*state_lists):
        yield Permutation(combo)
