"""Observability helpers for stategen."""

from stategen.observability.logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    configure_from_settings,
    configure_logging,
    record_context,
)

__all__ = [
    "configure_logging",
    "configure_from_settings",
    "StructuredFormatter",
    "HumanReadableFormatter",
    "record_context",
]
