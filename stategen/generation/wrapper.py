"""Generated-type descriptions, one per permutation.

A WrapperDescription is the abstract model of one generated type: it wraps
an instance of the stateful entity and exposes only the capabilities that
are available in its permutation. Capabilities without a value result
return the wrapper of their successor permutation instead, which turns
state rules into type-checked ones.

Descriptions are plain data handed to an external emitter; nothing here
knows about any target syntax.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from stategen.combinatorial.permutations import Permutation
from stategen.description.models import Capability, EntityDescription, Parameter
from stategen.generation.resolver import (
    CapabilityResolver,
    CapabilityResult,
    ResolvedCapability,
    TransitionResult,
)

logger = logging.getLogger(__name__)


class Invocation(str, Enum):
    """How a generated member calls through to the wrapped entity."""

    FORWARD = "forward"
    FORWARD_AND_WRAP = "forward_and_wrap"


@dataclass(frozen=True)
class FieldDescription:
    name: str
    type_name: str


@dataclass(frozen=True)
class ConstructorDescription:
    """The single constructor: take the entity and store it in the field."""

    parameter_name: str
    parameter_type: str
    field_name: str


@dataclass(frozen=True)
class MemberDescription:
    """A capability exposed by a wrapper.

    Attributes:
        name: Capability name.
        parameters: Arguments forwarded to the wrapped entity.
        type_parameters: Generic parameters of the capability.
        result: ValueResult for value-returning capabilities, otherwise a
            TransitionResult naming the successor wrapper.
        invocation: FORWARD returns the entity's value; FORWARD_AND_WRAP
            calls the entity and returns a successor wrapper around it.
    """

    name: str
    parameters: tuple[Parameter, ...]
    type_parameters: tuple[str, ...]
    result: CapabilityResult
    invocation: Invocation

    @property
    def return_type(self) -> str:
        return self.result.type_name

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "parameters": [{"name": p.name, "type": p.type_name} for p in self.parameters],
            "type_parameters": list(self.type_parameters),
            "returns": self.return_type,
            "invocation": self.invocation.value,
        }
        if isinstance(self.result, TransitionResult):
            data["successor"] = list(self.result.successor.states)
        return data


@dataclass(frozen=True)
class WrapperDescription:
    """The generated type for one permutation."""

    type_name: str
    permutation: Permutation
    entity: str
    type_parameters: tuple[str, ...]
    wrapped_field: FieldDescription
    constructor: ConstructorDescription
    members: tuple[MemberDescription, ...] = ()

    @property
    def member_names(self) -> list[str]:
        return [m.name for m in self.members]

    def member(self, name: str) -> MemberDescription:
        """Get a member by name.

        Raises:
            KeyError: If the capability is not available in this wrapper.
        """
        for member in self.members:
            if member.name == name:
                return member
        raise KeyError(
            f"'{name}' is not available in {self.type_name}. "
            f"Available: {self.member_names}"
        )

    def transitions(self) -> list[MemberDescription]:
        return [m for m in self.members if isinstance(m.result, TransitionResult)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type_name": self.type_name,
            "states": list(self.permutation.states),
            "entity": self.entity,
            "type_parameters": list(self.type_parameters),
            "field": {"name": self.wrapped_field.name, "type": self.wrapped_field.type_name},
            "constructor": {
                "parameter": self.constructor.parameter_name,
                "type": self.constructor.parameter_type,
                "assigns": self.constructor.field_name,
            },
            "members": [m.to_dict() for m in self.members],
        }

    def __repr__(self) -> str:
        return f"WrapperDescription({self.type_name!r}, members={self.member_names})"


@dataclass
class WrapperAssembler:
    """Builds the WrapperDescription of each permutation of one entity.

    Attributes:
        entity: The entity being wrapped.
        resolver: Resolver bound to the entity's group map.
        wrapped_field_name: Name of the field holding the entity.
        constructor_argument_name: Name of the constructor's parameter.
    """

    entity: EntityDescription
    resolver: CapabilityResolver
    wrapped_field_name: str = "_wrapped"
    constructor_argument_name: str = "stateful_object"
    _entity_type: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._entity_type = _generic_name(self.entity.name, self.entity.type_parameters)

    @property
    def name_suffix(self) -> str:
        return self.resolver.name_suffix

    def type_name(self, permutation: Permutation) -> str:
        return permutation.type_name(self.name_suffix)

    def resolve_all(
        self,
        permutation: Permutation,
        capabilities: Iterable[Capability] | None = None,
    ) -> list[ResolvedCapability]:
        """Resolve every capability, available or not, in declaration order."""
        if capabilities is None:
            capabilities = self.entity.capabilities
        return [self.resolver.resolve(c, permutation) for c in capabilities]

    def _member(self, resolved: ResolvedCapability) -> MemberDescription:
        capability = resolved.capability
        result = resolved.result
        if isinstance(result, TransitionResult):
            result = TransitionResult(
                successor=result.successor,
                type_name=_generic_name(result.type_name, self.entity.type_parameters),
                targets=result.targets,
            )
            invocation = Invocation.FORWARD_AND_WRAP
        else:
            invocation = Invocation.FORWARD
        return MemberDescription(
            name=capability.name,
            parameters=capability.parameters,
            type_parameters=capability.type_parameters,
            result=result,
            invocation=invocation,
        )

    def assemble(
        self,
        permutation: Permutation,
        capabilities: Iterable[Capability] | None = None,
    ) -> WrapperDescription:
        """Build the wrapper of ``permutation``.

        Only available capabilities become members.

        Raises:
            InvalidStateRepresentation: Propagated from capability resolution.
        """
        members = tuple(
            self._member(resolved)
            for resolved in self.resolve_all(permutation, capabilities)
            if resolved.available
        )
        wrapper = WrapperDescription(
            type_name=self.type_name(permutation),
            permutation=permutation,
            entity=self._entity_type,
            type_parameters=self.entity.type_parameters,
            wrapped_field=FieldDescription(self.wrapped_field_name, self._entity_type),
            constructor=ConstructorDescription(
                parameter_name=self.constructor_argument_name,
                parameter_type=self._entity_type,
                field_name=self.wrapped_field_name,
            ),
            members=members,
        )
        logger.debug(
            "Assembled %s with %d members",
            wrapper.type_name,
            len(members),
            extra={"entity": self.entity.name, "permutation": list(permutation.states)},
        )
        return wrapper


def _generic_name(name: str, type_parameters: tuple[str, ...]) -> str:
    if not type_parameters:
        return name
    return f"{name}[{', '.join(type_parameters)}]"
