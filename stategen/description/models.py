"""Declarative description of a stateful entity.

A description partitions an entity's state space into independent state
groups and attaches availability and transition rules to each of its
capabilities. It is plain data: the generator never calls into the entity
it describes.

Example:
    >>> robot = EntityDescription(
    ...     name="Robot",
    ...     groups=(
    ...         StateGroup("Position", ("Left", "Middle", "Right", "Up", "Down")),
    ...         StateGroup("Movable", ("On", "Off")),
    ...     ),
    ...     capabilities=(
    ...         Capability(
    ...             name="move_up",
    ...             availability=(
    ...                 ConditionSet.of("On", "Middle", relation=RelationKind.AND),
    ...                 ConditionSet.of("On", "Down", relation=RelationKind.AND),
    ...             ),
    ...             transitions=(
    ...                 TransitionRule.when("Up", "Middle"),
    ...                 TransitionRule.when("Middle", "Down"),
    ...             ),
    ...         ),
    ...         Capability(name="position", returns="str", available_for_all=True),
    ...     ),
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RelationKind(str, Enum):
    """Built-in gate semantics for a condition set."""

    AND = "and"
    OR = "or"
    XOR = "xor"


def _normalize_relation(relation: RelationKind | str) -> RelationKind | str:
    if isinstance(relation, RelationKind):
        return relation
    try:
        return RelationKind(relation.lower())
    except ValueError:
        return relation


@dataclass(frozen=True)
class ConditionSet:
    """A set of states combined by one relation.

    Attributes:
        states: State names the relation is evaluated over.
        relation: A built-in RelationKind, or the identifier of a relation
            registered on a RelationRegistry.
    """

    states: frozenset[str]
    relation: RelationKind | str = RelationKind.OR

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", frozenset(self.states))
        object.__setattr__(self, "relation", _normalize_relation(self.relation))

    @classmethod
    def of(cls, *states: str, relation: RelationKind | str = RelationKind.OR) -> ConditionSet:
        return cls(frozenset(states), relation)

    @property
    def relation_id(self) -> str:
        """Stable identifier of the relation, as used by the registry."""
        if isinstance(self.relation, RelationKind):
            return self.relation.value
        return self.relation

    def __repr__(self) -> str:
        return f"{self.relation_id.upper()}({', '.join(sorted(self.states))})"


@dataclass(frozen=True)
class TransitionRule:
    """Move to ``target`` when ``condition`` holds for the current permutation."""

    target: str
    condition: ConditionSet = field(
        default_factory=lambda: ConditionSet(frozenset(), RelationKind.AND)
    )

    @classmethod
    def when(
        cls,
        target: str,
        *states: str,
        relation: RelationKind | str = RelationKind.AND,
    ) -> TransitionRule:
        """Build a rule whose condition defaults to AND over ``states``."""
        return cls(target, ConditionSet(frozenset(states), relation))


@dataclass(frozen=True)
class Parameter:
    """A capability argument, forwarded verbatim to the wrapped entity."""

    name: str
    type_name: str


@dataclass(frozen=True)
class Capability:
    """An operation exposed by the stateful entity.

    Attributes:
        name: Operation name.
        returns: Declared value type, or None for an operation whose
            effect is a state mutation with no value result. Only those
            operations take part in transitions.
        parameters: Arguments of the operation.
        type_parameters: Generic parameters of the operation itself.
        available_for_all: Available regardless of the current states.
        availability: Condition sets combined with OR; the capability is
            available when any of them validates.
        transitions: Rules computing the successor states.
    """

    name: str
    returns: str | None = None
    parameters: tuple[Parameter, ...] = ()
    type_parameters: tuple[str, ...] = ()
    available_for_all: bool = False
    availability: tuple[ConditionSet, ...] = ()
    transitions: tuple[TransitionRule, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Capability name cannot be empty")
        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "type_parameters", tuple(self.type_parameters))
        object.__setattr__(self, "availability", tuple(self.availability))
        object.__setattr__(self, "transitions", tuple(self.transitions))

    @property
    def is_mutation(self) -> bool:
        """True when the capability has no value result."""
        return self.returns is None


@dataclass(frozen=True)
class StateGroup:
    """A named partition of mutually exclusive states."""

    name: str
    states: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("State group name cannot be empty")
        object.__setattr__(self, "states", tuple(self.states))

    @property
    def size(self) -> int:
        return len(self.states)

    def __repr__(self) -> str:
        return f"StateGroup({self.name!r}, states={list(self.states)})"


@dataclass(frozen=True)
class EntityDescription:
    """Everything the generator needs to know about one stateful entity.

    Attributes:
        name: Type name of the wrapped entity.
        groups: State groups, in declaration order.
        capabilities: Public instance capabilities, in declaration order.
        type_parameters: Generic parameters of the entity type. Generated
            wrappers re-declare them.
        module: Namespace the generated wrappers belong to.
    """

    name: str
    groups: tuple[StateGroup, ...] = ()
    capabilities: tuple[Capability, ...] = ()
    type_parameters: tuple[str, ...] = ()
    module: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Entity name cannot be empty")
        object.__setattr__(self, "groups", tuple(self.groups))
        object.__setattr__(self, "capabilities", tuple(self.capabilities))
        object.__setattr__(self, "type_parameters", tuple(self.type_parameters))

    def group_pairs(self) -> list[tuple[str, tuple[str, ...]]]:
        """Groups as ordered ``(name, states)`` pairs."""
        return [(g.name, g.states) for g in self.groups]

    def capability(self, name: str) -> Capability:
        """Get a capability by name.

        Raises:
            KeyError: If no capability has that name.
        """
        for capability in self.capabilities:
            if capability.name == name:
                return capability
        raise KeyError(
            f"Capability '{name}' not found. "
            f"Available: {[c.name for c in self.capabilities]}"
        )

