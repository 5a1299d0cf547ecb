"""stategen - State-Machine Wrapper Generator.

stategen takes a declarative description of a stateful entity, a partition
of its state space into independent state groups plus availability and
transition rules per capability, and derives one wrapper type per reachable
combination of states. Each wrapper exposes only the capabilities valid in
its combination, and capabilities that change state return the wrapper of
the combination they lead to.

Example:
    >>> from stategen import (
    ...     Capability, ConditionSet, EntityDescription, RelationKind,
    ...     StateGroup, TransitionRule, generate,
    ... )
    >>>
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
    ...     ),
    ... )
    >>> unit = generate(robot)
    >>> unit.get("MiddleOnState").member("move_up").return_type
    'UpOnState'
    >>> unit.get("LeftOnState").member_names
    []

Core Models:
    EntityDescription: Groups and capabilities of one stateful entity
    StateGroup: A named set of mutually exclusive states
    Capability: An operation gated by availability and transition rules
    Permutation: One state per group
    WrapperDescription: The generated type for one permutation
    CompilationUnit: Every wrapper of one entity
"""

import logging

from stategen.combinatorial import Permutation, StateGroupMap, enumerate_permutations
from stategen.config import GeneratorConfig, load_config
from stategen.description import (
    Capability,
    ConditionSet,
    EntityDescription,
    Parameter,
    RelationKind,
    StateGroup,
    TransitionRule,
    load_description,
)
from stategen.errors import (
    DescriptionLoadError,
    ErrorCode,
    ErrorContext,
    InvalidStateRepresentation,
    StateGenError,
)
from stategen.generation import (
    CapabilityResolver,
    CompilationUnit,
    Invocation,
    MemberDescription,
    ResolvedCapability,
    StateGenerator,
    TransitionResult,
    ValueResult,
    WrapperAssembler,
    WrapperDescription,
    generate,
)
from stategen.relations import (
    AndRelation,
    LogicalRelation,
    OrRelation,
    RelationRegistry,
    XorRelation,
    default_registry,
    evaluate,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # Description
    "EntityDescription",
    "StateGroup",
    "Capability",
    "ConditionSet",
    "TransitionRule",
    "Parameter",
    "RelationKind",
    "load_description",
    # Combinatorial
    "StateGroupMap",
    "Permutation",
    "enumerate_permutations",
    # Relations
    "LogicalRelation",
    "AndRelation",
    "OrRelation",
    "XorRelation",
    "RelationRegistry",
    "default_registry",
    "evaluate",
    # Generation
    "CapabilityResolver",
    "ResolvedCapability",
    "ValueResult",
    "TransitionResult",
    "WrapperAssembler",
    "WrapperDescription",
    "MemberDescription",
    "Invocation",
    "StateGenerator",
    "CompilationUnit",
    "generate",
    # Config
    "GeneratorConfig",
    "load_config",
    # Errors
    "StateGenError",
    "InvalidStateRepresentation",
    "DescriptionLoadError",
    "ErrorCode",
    "ErrorContext",
]
