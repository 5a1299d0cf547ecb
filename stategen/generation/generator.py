"""Expansion of a stateful entity into its compilation unit.

The generator ties the pipeline together:

    EntityDescription -> StateGroupMap (validated) -> permutations
        -> WrapperAssembler (per permutation) -> CompilationUnit

Any inconsistency aborts generation for the whole entity; a partial unit
is never returned.

Example:
    >>> unit = generate(robot)
    >>> len(unit)  # 5 positions * 2 switch states
    10
    >>> wrapper = unit.get("MiddleOnState")
    >>> unit.successor_of(wrapper.member("move_up")).type_name
    'UpOnState'
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from stategen.combinatorial.groups import StateGroupMap
from stategen.combinatorial.permutations import Permutation, enumerate_permutations
from stategen.config.settings import GeneratorConfig
from stategen.description.models import EntityDescription
from stategen.errors import ErrorCode, ErrorContext, InvalidStateRepresentation
from stategen.generation.resolver import CapabilityResolver, TransitionResult
from stategen.generation.wrapper import MemberDescription, WrapperAssembler, WrapperDescription
from stategen.relations.registry import RelationRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilationUnit:
    """All wrappers generated for one entity, in enumeration order.

    Attributes:
        entity: The entity the wrappers were generated for.
        wrappers: One WrapperDescription per permutation.
        name_suffix: Suffix used to derive wrapper names from permutations.

    Raises:
        InvalidStateRepresentation: If two wrappers share a type name.
    """

    entity: EntityDescription
    wrappers: tuple[WrapperDescription, ...]
    name_suffix: str = "State"
    _by_name: dict[str, WrapperDescription] = field(
        init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "wrappers", tuple(self.wrappers))
        _check_name_collisions(self.entity, self.wrappers)
        object.__setattr__(self, "_by_name", {w.type_name: w for w in self.wrappers})

    @property
    def namespace(self) -> str | None:
        return self.entity.module

    @property
    def type_names(self) -> list[str]:
        return [w.type_name for w in self.wrappers]

    def __len__(self) -> int:
        return len(self.wrappers)

    def __iter__(self) -> Iterator[WrapperDescription]:
        return iter(self.wrappers)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._by_name

    def get(self, type_name: str) -> WrapperDescription:
        """Get a wrapper by its type name.

        Raises:
            KeyError: If no wrapper has that name.
        """
        if type_name not in self._by_name:
            raise KeyError(f"No wrapper named '{type_name}' in the compilation unit")
        return self._by_name[type_name]

    def wrapper_for(self, permutation: Permutation) -> WrapperDescription:
        return self.get(permutation.type_name(self.name_suffix))

    def successor_of(self, member: MemberDescription) -> WrapperDescription:
        """Resolve the wrapper a transition member returns.

        Raises:
            ValueError: If the member returns a plain value.
            KeyError: If the successor is not part of this unit.
        """
        if not isinstance(member.result, TransitionResult):
            raise ValueError(f"'{member.name}' returns a value, not a wrapper")
        return self.wrapper_for(member.result.successor)

    def unresolved_references(self) -> list[str]:
        """Names of successor wrappers referenced but not generated."""
        missing: list[str] = []
        for wrapper in self.wrappers:
            for member in wrapper.transitions():
                name = member.result.successor.type_name(self.name_suffix)
                if name not in self._by_name and name not in missing:
                    missing.append(name)
        return missing

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form handed to an emitter."""
        return {
            "entity": self.entity.name,
            "namespace": self.namespace,
            "type_parameters": list(self.entity.type_parameters),
            "groups": {g.name: list(g.states) for g in self.entity.groups},
            "wrappers": [w.to_dict() for w in self.wrappers],
        }

    def __repr__(self) -> str:
        return f"CompilationUnit({self.entity.name!r}, wrappers={len(self.wrappers)})"


class StateGenerator:
    """Expands entity descriptions into compilation units.

    Each permutation is resolved independently of the others. With
    ``config.max_workers > 1`` permutations are assembled on a thread pool
    and collected back in enumeration order, so the unit (and the error
    raised for an inconsistent description) is the same as a sequential run.

    Args:
        config: Generator settings; defaults are used when omitted.
        registry: Relation registry; the module default when omitted.
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        registry: RelationRegistry | None = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.registry = registry

    def generate(self, entity: EntityDescription) -> CompilationUnit:
        """Generate every wrapper of ``entity``.

        Raises:
            InvalidStateRepresentation: If the description is inconsistent.
        """
        try:
            return self._generate(entity)
        except InvalidStateRepresentation as e:
            if e.context.entity_name is None:
                e.context.entity_name = entity.name
            raise

    def _generate(self, entity: EntityDescription) -> CompilationUnit:
        groups = StateGroupMap.from_groups(entity.groups)
        groups.validate_unique_states(entity.name)

        resolver = CapabilityResolver(
            groups,
            registry=self.registry,
            name_suffix=self.config.name_suffix,
            entity_name=entity.name,
        )
        assembler = WrapperAssembler(
            entity,
            resolver,
            wrapped_field_name=self.config.wrapped_field_name,
            constructor_argument_name=self.config.constructor_argument_name,
        )

        permutations = enumerate_permutations(groups.pairs())
        if self.config.max_workers > 1:
            wrappers = self._assemble_parallel(assembler, permutations)
        else:
            wrappers = [assembler.assemble(p) for p in permutations]

        unit = CompilationUnit(entity, tuple(wrappers), self.config.name_suffix)

        dangling = unit.unresolved_references()
        if dangling:
            raise InvalidStateRepresentation(
                f"Transitions reference wrappers that were not generated: {', '.join(dangling)}",
                error_code=ErrorCode.DANGLING_REFERENCE,
                context=ErrorContext(entity_name=entity.name, states=dangling),
            )

        logger.debug(
            "Generated %d wrappers for %s (%d groups, %d capabilities)",
            len(unit),
            entity.name,
            len(groups),
            len(entity.capabilities),
            extra={"entity": entity.name},
        )
        return unit

    def _assemble_parallel(
        self,
        assembler: WrapperAssembler,
        permutations: Iterable[Permutation],
    ) -> list[WrapperDescription]:
        """Assemble wrappers on a thread pool, keeping enumeration order."""
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures: list[Future[WrapperDescription]] = [
                executor.submit(assembler.assemble, permutation)
                for permutation in permutations
            ]
            # Earliest failing permutation wins, as in a sequential run.
            return [future.result() for future in futures]


def _check_name_collisions(
    entity: EntityDescription,
    wrappers: Iterable[WrapperDescription],
) -> None:
    """Reject distinct permutations that share a wrapper name.

    Names concatenate state names, so ``(AB, C)`` and ``(A, BC)`` both
    become ``ABCState``.

    Raises:
        InvalidStateRepresentation: Listing every colliding permutation.
    """
    by_name: dict[str, list[Permutation]] = {}
    for wrapper in wrappers:
        by_name.setdefault(wrapper.type_name, []).append(wrapper.permutation)

    collisions = {name: perms for name, perms in by_name.items() if len(perms) > 1}
    if not collisions:
        return

    listing = "; ".join(
        f"{name}: {', '.join(repr(p) for p in perms)}" for name, perms in collisions.items()
    )
    raise InvalidStateRepresentation(
        f"Different permutations produce the same wrapper name. Collisions: {listing}",
        error_code=ErrorCode.NAME_COLLISION,
        context=ErrorContext(entity_name=entity.name),
        permutations={
            name: [list(p.states) for p in perms] for name, perms in collisions.items()
        },
    )


def generate(
    entity: EntityDescription,
    config: GeneratorConfig | None = None,
    registry: RelationRegistry | None = None,
) -> CompilationUnit:
    """Generate the compilation unit of ``entity`` with a one-off generator."""
    return StateGenerator(config=config, registry=registry).generate(entity)
