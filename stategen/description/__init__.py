"""Declarative descriptions of stateful entities.

Modules:
    models: EntityDescription, StateGroup, Capability, ConditionSet,
        TransitionRule, Parameter, RelationKind
    loader: load_description and the pydantic schema it validates against
"""

from stategen.description.loader import (
    CapabilitySchema,
    ConditionSchema,
    EntitySchema,
    ParameterSchema,
    StateGroupSchema,
    TransitionSchema,
    load_description,
)
from stategen.description.models import (
    Capability,
    ConditionSet,
    EntityDescription,
    Parameter,
    RelationKind,
    StateGroup,
    TransitionRule,
)

__all__ = [
    # Models
    "EntityDescription",
    "StateGroup",
    "Capability",
    "ConditionSet",
    "TransitionRule",
    "Parameter",
    "RelationKind",
    # Loader
    "load_description",
    "EntitySchema",
    "StateGroupSchema",
    "CapabilitySchema",
    "ConditionSchema",
    "TransitionSchema",
    "ParameterSchema",
]
