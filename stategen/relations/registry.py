"""Lookup of relation implementations by stable identifier.

The registry is the single place where a relation named by a rule is
checked and instantiated. Built-in relations are registered under
``"and"``, ``"or"`` and ``"xor"``; custom relations are validated when
they are registered, so a bad registration fails before generation starts.

Example:
    >>> class NoneOf(LogicalRelation):
    ...     def validate(self, groups, permutation, condition_states):
    ...         return not set(condition_states) & set(permutation)
    >>>
    >>> registry = RelationRegistry()
    >>> registry.register("none", NoneOf)
    >>> evaluate(perm, "none", {"Off"}, groups, registry=registry)
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Collection, Mapping, Sequence

from stategen.description.models import RelationKind
from stategen.errors import ErrorCode, InvalidStateRepresentation
from stategen.relations.evaluators import AndRelation, LogicalRelation, OrRelation, XorRelation

logger = logging.getLogger(__name__)

BUILTIN_RELATIONS: dict[str, type[LogicalRelation]] = {
    RelationKind.AND.value: AndRelation,
    RelationKind.OR.value: OrRelation,
    RelationKind.XOR.value: XorRelation,
}


def _instantiate(identifier: str, relation_cls: object) -> LogicalRelation:
    if not (
        inspect.isclass(relation_cls)
        and issubclass(relation_cls, LogicalRelation)
        and not inspect.isabstract(relation_cls)
    ):
        raise InvalidStateRepresentation(
            f"Relation '{identifier}' must be a non-abstract class implementing "
            f"{LogicalRelation.__name__}, got {relation_cls!r}",
            error_code=ErrorCode.INVALID_RELATION,
            relation=identifier,
        )
    try:
        return relation_cls()
    except TypeError as e:
        raise InvalidStateRepresentation(
            f"Relation '{identifier}' must be constructible without arguments",
            error_code=ErrorCode.INVALID_RELATION,
            cause=e,
            relation=identifier,
        ) from e


class RelationRegistry:
    """Dispatch table from relation identifier to relation instance."""

    def __init__(self, include_builtins: bool = True) -> None:
        self._relations: dict[str, LogicalRelation] = {}
        if include_builtins:
            for identifier, relation_cls in BUILTIN_RELATIONS.items():
                self._relations[identifier] = relation_cls()

    @staticmethod
    def _key(relation: RelationKind | str) -> str:
        if isinstance(relation, RelationKind):
            return relation.value
        return relation.lower()

    def register(
        self,
        identifier: str,
        relation_cls: type[LogicalRelation],
        replace: bool = False,
    ) -> LogicalRelation:
        """Register a relation class under ``identifier``.

        The class is instantiated immediately.

        Raises:
            InvalidStateRepresentation: If the class is abstract, does not
                derive from LogicalRelation, or needs constructor arguments.
            ValueError: If the identifier is taken and ``replace`` is False.
        """
        if not identifier:
            raise ValueError("Relation identifier cannot be empty")
        key = self._key(identifier)
        if key in self._relations and not replace:
            raise ValueError(f"Relation '{key}' is already registered")

        instance = _instantiate(key, relation_cls)
        self._relations[key] = instance
        logger.debug("Registered relation %r -> %s", key, type(instance).__name__)
        return instance

    def get(self, relation: RelationKind | str) -> LogicalRelation:
        """Resolve a relation by kind or identifier.

        Raises:
            InvalidStateRepresentation: If nothing is registered under it.
        """
        key = self._key(relation)
        try:
            return self._relations[key]
        except KeyError:
            raise InvalidStateRepresentation(
                f"Relation '{key}' does not resolve to a registered relation. "
                f"Available: {sorted(self._relations)}",
                error_code=ErrorCode.INVALID_RELATION,
                relation=key,
            ) from None

    def __contains__(self, relation: object) -> bool:
        if not isinstance(relation, str):
            return False
        return self._key(relation) in self._relations

    @property
    def identifiers(self) -> list[str]:
        return sorted(self._relations)

    def __repr__(self) -> str:
        return f"RelationRegistry({self.identifiers})"


default_registry = RelationRegistry()


def evaluate(
    permutation: Collection[str],
    relation: RelationKind | str,
    condition_states: Collection[str],
    groups: Mapping[str, Sequence[str]],
    registry: RelationRegistry | None = None,
) -> bool:
    """Evaluate ``condition_states`` under ``relation`` against a permutation.

    Raises:
        InvalidStateRepresentation: If the relation cannot be resolved, or
            the relation itself rejects the condition.
    """
    resolved = (registry or default_registry).get(relation)
    return resolved.validate(groups, permutation, condition_states)
