"""Wrapper generation for stategen.

    CapabilityResolver -> WrapperAssembler -> StateGenerator -> CompilationUnit

Modules:
    resolver: CapabilityResolver, ResolvedCapability, ValueResult, TransitionResult
    wrapper: WrapperAssembler, WrapperDescription, MemberDescription,
        ConstructorDescription, FieldDescription, Invocation
    generator: StateGenerator, CompilationUnit, generate
"""

from stategen.generation.generator import CompilationUnit, StateGenerator, generate
from stategen.generation.resolver import (
    CapabilityResolver,
    ResolvedCapability,
    TransitionResult,
    ValueResult,
)
from stategen.generation.wrapper import (
    ConstructorDescription,
    FieldDescription,
    Invocation,
    MemberDescription,
    WrapperAssembler,
    WrapperDescription,
)

__all__ = [
    # Resolver
    "CapabilityResolver",
    "ResolvedCapability",
    "ValueResult",
    "TransitionResult",
    # Wrapper
    "WrapperAssembler",
    "WrapperDescription",
    "MemberDescription",
    "ConstructorDescription",
    "FieldDescription",
    "Invocation",
    # Generator
    "StateGenerator",
    "CompilationUnit",
    "generate",
]
