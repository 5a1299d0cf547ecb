"""Per-permutation resolution of a single capability.

For one capability and one permutation the resolver decides:

1. Availability: unconditional, or any availability condition validates.
2. Result: the declared value type, or, for a capability with no value
   result, the successor permutation its transition rules lead to.

Transition rules only look at the permutation being resolved. Rules whose
conditions validate contribute their target state; each target replaces
the current state of the group it belongs to, and every other group keeps
its state.

Example:
    >>> resolver = CapabilityResolver(groups)
    >>> resolved = resolver.resolve(move_up, Permutation(("Middle", "On")))
    >>> resolved.available
    True
    >>> resolved.result.type_name
    'UpOnState'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stategen.combinatorial.groups import StateGroupMap
from stategen.combinatorial.permutations import Permutation
from stategen.description.models import Capability, ConditionSet
from stategen.errors import ErrorCode, ErrorContext, InvalidStateRepresentation
from stategen.relations.registry import RelationRegistry, evaluate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValueResult:
    """The capability returns its original value type."""

    type_name: str


@dataclass(frozen=True)
class TransitionResult:
    """The capability returns the wrapper of ``successor``.

    Attributes:
        successor: Permutation reached after the capability runs. May equal
            the permutation it was resolved for.
        type_name: Canonical name of the successor's wrapper.
        targets: Target states of the transition rules that applied.
    """

    successor: Permutation
    type_name: str
    targets: tuple[str, ...] = ()


CapabilityResult = ValueResult | TransitionResult


@dataclass(frozen=True)
class ResolvedCapability:
    """Outcome of resolving one capability against one permutation."""

    capability: Capability
    available: bool
    result: CapabilityResult | None = None

    @property
    def name(self) -> str:
        return self.capability.name

    @property
    def is_transition(self) -> bool:
        return isinstance(self.result, TransitionResult)


class CapabilityResolver:
    """Resolves capabilities against the permutations of one entity.

    Args:
        groups: The entity's validated group map.
        registry: Relation registry; the module default when omitted.
        name_suffix: Suffix of generated wrapper names.
        entity_name: Entity name, used for error context only.
    """

    def __init__(
        self,
        groups: StateGroupMap,
        registry: RelationRegistry | None = None,
        name_suffix: str = "State",
        entity_name: str | None = None,
    ) -> None:
        self.groups = groups
        self.registry = registry
        self.name_suffix = name_suffix
        self.entity_name = entity_name

    def _holds(
        self,
        condition: ConditionSet,
        capability: Capability,
        permutation: Permutation,
    ) -> bool:
        try:
            return evaluate(
                permutation,
                condition.relation,
                condition.states,
                self.groups,
                registry=self.registry,
            )
        except InvalidStateRepresentation as e:
            e.context.capability_name = e.context.capability_name or capability.name
            e.context.permutation = e.context.permutation or permutation.states
            e.context.entity_name = e.context.entity_name or self.entity_name
            raise

    def _error(
        self,
        message: str,
        code: ErrorCode,
        capability: Capability,
        permutation: Permutation,
        states: list[str],
    ) -> InvalidStateRepresentation:
        return InvalidStateRepresentation(
            message,
            error_code=code,
            context=ErrorContext(
                entity_name=self.entity_name,
                capability_name=capability.name,
                permutation=permutation.states,
                states=states,
            ),
        )

    def is_available(self, capability: Capability, permutation: Permutation) -> bool:
        """Decide whether ``capability`` is exposed in ``permutation``.

        Raises:
            InvalidStateRepresentation: If the capability is marked both
                available for all states and available for specific states,
                or any availability condition is itself invalid, whether or
                not another condition matches.
        """
        if capability.available_for_all and capability.availability:
            raise self._error(
                f"Capability '{capability.name}' cannot be both available for all "
                "states and available for specific states",
                ErrorCode.CONFLICTING_AVAILABILITY,
                capability,
                permutation,
                [],
            )
        if capability.available_for_all:
            return True
        # Every condition is evaluated so an invalid one fails even when an
        # earlier one already matched.
        results = [
            self._holds(condition, capability, permutation)
            for condition in capability.availability
        ]
        return any(results)

    def successor(self, capability: Capability, permutation: Permutation) -> tuple[Permutation, tuple[str, ...]]:
        """Compute the permutation reached after ``capability`` runs.

        Returns:
            The successor permutation and the target states that applied.

        Raises:
            InvalidStateRepresentation: If an applicable rule targets an
                unknown state, or two applicable rules target different
                states of the same group.
        """
        targets = [
            rule.target
            for rule in capability.transitions
            if self._holds(rule.condition, capability, permutation)
        ]

        unknown = [t for t in dict.fromkeys(targets) if not self.groups.contains_state(t)]
        if unknown:
            raise self._error(
                f"Capability '{capability.name}' has transitions to states that do "
                f"not exist. States: {', '.join(unknown)}",
                ErrorCode.UNKNOWN_TARGET_STATE,
                capability,
                permutation,
                unknown,
            )

        by_group: dict[str, list[str]] = {}
        for target in dict.fromkeys(targets):
            by_group.setdefault(self.groups.group_of(target), []).append(target)

        ambiguous = {g: ts for g, ts in by_group.items() if len(ts) > 1}
        if ambiguous:
            listing = " and ".join(
                f"{g}: [{', '.join(ts)}]" for g, ts in ambiguous.items()
            )
            raise self._error(
                f"Capability '{capability.name}' has transitions to different states "
                f"of the same group. States: {listing}",
                ErrorCode.AMBIGUOUS_TRANSITION,
                capability,
                permutation,
                [t for ts in ambiguous.values() for t in ts],
            )

        result = permutation
        for group, (target,) in by_group.items():
            result = result.replace(self.groups.index_of(group), target)
        return result, tuple(dict.fromkeys(targets))

    def resolve(self, capability: Capability, permutation: Permutation) -> ResolvedCapability:
        """Resolve availability and result type of ``capability``."""
        if not self.is_available(capability, permutation):
            return ResolvedCapability(capability, available=False)

        if not capability.is_mutation:
            return ResolvedCapability(
                capability, available=True, result=ValueResult(capability.returns)
            )

        successor, targets = self.successor(capability, permutation)
        if targets:
            logger.debug(
                "%s: %s -> %s via %s",
                capability.name,
                list(permutation.states),
                list(successor.states),
                list(targets),
                extra={
                    "entity": self.entity_name,
                    "capability": capability.name,
                    "permutation": list(permutation.states),
                },
            )
        return ResolvedCapability(
            capability,
            available=True,
            result=TransitionResult(
                successor=successor,
                type_name=successor.type_name(self.name_suffix),
                targets=targets,
            ),
        )
