"""Exception hierarchy for stategen.

stategen raises a small, structured set of errors:
- Structured error codes for programmatic handling
- Context naming the entity, capability and states involved
- Actionable suggestions for fixing the description

Every inconsistency found while expanding a stateful entity is reported as
an InvalidStateRepresentation. The error code tells the triggers apart:

    E101  duplicate state name across or within groups
    E102  relation identifier that does not resolve to an evaluator
    E103  AND condition naming two states of the same group
    E104  capability both unconditionally and conditionally available
    E105  transition targeting a state that no group declares
    E106  ambiguous transition (two targets in one group)
    E107  transition referencing a wrapper missing from the unit
    E108  two permutations whose state names join to the same wrapper name

Example:
    try:
        unit = generate(description)
    except InvalidStateRepresentation as e:
        print(f"Error: {e}")
        print(e.format_verbose())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for stategen.

    Error codes are organized by category:
    - E1xx: State representation errors
    - E2xx: Description and configuration input errors
    - E9xx: Unknown/internal errors
    """

    # State representation errors (E1xx)
    DUPLICATE_STATE = "E101"
    INVALID_RELATION = "E102"
    CONTRADICTORY_CONDITION = "E103"
    CONFLICTING_AVAILABILITY = "E104"
    UNKNOWN_TARGET_STATE = "E105"
    AMBIGUOUS_TRANSITION = "E106"
    DANGLING_REFERENCE = "E107"
    NAME_COLLISION = "E108"

    # Input errors (E2xx)
    INVALID_DESCRIPTION = "E201"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if 100 <= code_num < 200:
            return "state"
        elif 200 <= code_num < 300:
            return "input"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context describing where an error was detected.

    Attributes:
        entity_name: Name of the stateful entity being expanded.
        capability_name: Capability being resolved, if any.
        permutation: States of the permutation being resolved, if any.
        states: The offending state names.
        extra: Additional context-specific information.
        timestamp: When the error occurred.

    Example:
        context = ErrorContext(
            entity_name="Robot",
            capability_name="move_up",
            permutation=("Middle", "On"),
            states=["Up", "Down"],
        )
    """

    entity_name: str | None = None
    capability_name: str | None = None
    permutation: tuple[str, ...] | None = None
    states: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "entity_name": self.entity_name,
            "capability_name": self.capability_name,
            "permutation": list(self.permutation) if self.permutation is not None else None,
            "states": list(self.states) or None,
            "extra": self.extra or None,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.entity_name:
            parts.append(f"entity={self.entity_name}")
        if self.capability_name:
            parts.append(f"capability={self.capability_name}")
        if self.permutation is not None:
            parts.append(f"permutation=[{', '.join(self.permutation)}]")
        return " > ".join(parts) if parts else "unknown location"


class StateGenError(Exception):
    """Base exception for all stategen errors.

    Attributes:
        error_code: Unique ErrorCode for this error.
        message: Human-readable error description.
        context: ErrorContext naming the entity, capability and states.
        suggestions: List of actionable steps to resolve the issue.
        recoverable: Whether retrying could succeed.
        cause: The underlying exception (if any).
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        recoverable: bool = True,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self.recoverable = recoverable
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.context.states:
            lines.append(f"States: {', '.join(self.context.states)}")

        if self.cause is not None:
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


_SUGGESTIONS: dict[ErrorCode, list[str]] = {
    ErrorCode.DUPLICATE_STATE: [
        "Give every state a name that is unique across all groups",
        "Prefix shared names with their group, e.g. 'DoorOpen' and 'LidOpen'",
    ],
    ErrorCode.INVALID_RELATION: [
        "Use one of the built-in relations: 'and', 'or', 'xor'",
        "Register custom relations with RelationRegistry.register() before generating",
    ],
    ErrorCode.CONTRADICTORY_CONDITION: [
        "An AND condition can name at most one state per group",
        "Split the condition into several availability rules, or use 'or'",
    ],
    ErrorCode.CONFLICTING_AVAILABILITY: [
        "Remove either available_for_all or the specific availability rules",
    ],
    ErrorCode.UNKNOWN_TARGET_STATE: [
        "Check the transition target for typos",
        "Declare the target state in one of the entity's groups",
    ],
    ErrorCode.AMBIGUOUS_TRANSITION: [
        "Make the transition conditions mutually exclusive",
        "A capability can move each group to at most one state per permutation",
    ],
    ErrorCode.NAME_COLLISION: [
        "Rename states so that no two combinations concatenate to the same name",
        "Avoid state names that are prefixes or suffixes of states in neighbouring groups",
    ],
}


class InvalidStateRepresentation(StateGenError):
    """The declarative description of a stateful entity is inconsistent.

    Raised synchronously by the core and never recovered internally;
    generation for the whole entity is aborted.
    """

    error_code = ErrorCode.UNKNOWN
    default_message = "Invalid state representation"

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        if suggestions is None and error_code is not None:
            suggestions = list(_SUGGESTIONS.get(error_code, []))
        super().__init__(
            message=message,
            error_code=error_code,
            context=context,
            cause=cause,
            recoverable=False,
            suggestions=suggestions,
            **extra_context,
        )


class DescriptionLoadError(StateGenError):
    """A declarative description could not be read or failed validation."""

    error_code = ErrorCode.INVALID_DESCRIPTION
    default_message = "Failed to load entity description"
    default_suggestions = [
        "Check that the file exists and is valid YAML or JSON",
        "Compare the document against the documented description schema",
    ]

    def __init__(
        self,
        message: str | None = None,
        source: str | None = None,
        **kwargs: Any,
    ) -> None:
        if source is not None:
            kwargs.setdefault("source", source)
        kwargs.setdefault("recoverable", False)
        super().__init__(message=message, **kwargs)
