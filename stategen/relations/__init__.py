"""Logical relations used by availability and transition rules.

Modules:
    evaluators: LogicalRelation, AndRelation, OrRelation, XorRelation
    registry: RelationRegistry, default_registry, evaluate
"""

from stategen.relations.evaluators import AndRelation, LogicalRelation, OrRelation, XorRelation
from stategen.relations.registry import (
    BUILTIN_RELATIONS,
    RelationRegistry,
    default_registry,
    evaluate,
)

__all__ = [
    "LogicalRelation",
    "AndRelation",
    "OrRelation",
    "XorRelation",
    "RelationRegistry",
    "BUILTIN_RELATIONS",
    "default_registry",
    "evaluate",
]
