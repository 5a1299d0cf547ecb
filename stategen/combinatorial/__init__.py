"""State-space expansion for stategen.

Groups of mutually exclusive states are expanded into permutations, one
state per group, in declaration order:

    StateGroup -> StateGroupMap -> enumerate_permutations -> Permutation

Modules:
    groups: StateGroupMap
    permutations: Permutation, enumerate_permutations
"""

from stategen.combinatorial.groups import StateGroupMap
from stategen.combinatorial.permutations import Permutation, enumerate_permutations

__all__ = [
    "StateGroupMap",
    "Permutation",
    "enumerate_permutations",
]
