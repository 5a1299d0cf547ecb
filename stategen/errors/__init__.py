"""stategen error handling.

Provides the exception hierarchy used across the generator:

- Structured error codes, one per inconsistency kind
- Context naming the entity, capability and states involved
- Suggestions for fixing the description
"""

from stategen.errors.base import (
    DescriptionLoadError,
    ErrorCode,
    ErrorContext,
    InvalidStateRepresentation,
    StateGenError,
)

__all__ = [
    "ErrorCode",
    "ErrorContext",
    "StateGenError",
    "InvalidStateRepresentation",
    "DescriptionLoadError",
]
