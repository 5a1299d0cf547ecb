"""Load entity descriptions from plain data.

Descriptions are written as YAML (or JSON) documents and validated with
pydantic before being converted to the frozen models the generator
consumes. Only the shape of the document is checked here; state-level
consistency (duplicate states, relation validity, transition targets)
is left to the generator, which reports it as InvalidStateRepresentation.

Example document (YAML 1.1 reads bare On/Off as booleans, so quote them)::

    name: Robot
    module: robots.generated
    groups:
      - name: Position
        states: [Left, Middle, Right, Up, Down]
      - name: Movable
        states: ["On", "Off"]
    capabilities:
      - name: move_up
        available_for:
          - {states: ["On", Middle], relation: and}
          - {states: ["On", Down], relation: and}
        transitions:
          - {target: Up, when: [Middle]}
          - {target: Middle, when: [Down]}
      - name: stay
        available_for_all: true
      - name: turn_off
        available_for: [["On"]]

Example:
    >>> from pathlib import Path
    >>> robot = load_description(Path("robot.yaml"))
    >>> robot.name
    'Robot'
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from stategen.description.models import (
    Capability,
    ConditionSet,
    EntityDescription,
    Parameter,
    RelationKind,
    StateGroup,
    TransitionRule,
)
from stategen.errors import DescriptionLoadError

logger = logging.getLogger(__name__)


class _Schema(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class StateGroupSchema(_Schema):
    """A state group as written in a description document."""

    name: str = Field(..., min_length=1, description="Group name")
    states: list[str] = Field(default_factory=list, description="States, in order")

    def to_model(self) -> StateGroup:
        return StateGroup(self.name, tuple(self.states))


class ConditionSchema(_Schema):
    """A condition set; a bare list of states is accepted as shorthand."""

    states: list[str] = Field(default_factory=list)
    relation: str = Field(default=RelationKind.OR.value, min_length=1)

    @model_validator(mode="before")
    @classmethod
    def accept_bare_list(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            return {"states": list(data)}
        return data

    def to_model(self) -> ConditionSet:
        return ConditionSet(frozenset(self.states), self.relation)


class TransitionSchema(_Schema):
    """A transition rule: move to ``target`` when ``when`` holds."""

    target: str = Field(..., min_length=1)
    when: list[str] = Field(default_factory=list)
    relation: str = Field(default=RelationKind.AND.value, min_length=1)

    def to_model(self) -> TransitionRule:
        return TransitionRule(self.target, ConditionSet(frozenset(self.when), self.relation))


class ParameterSchema(_Schema):
    name: str = Field(..., min_length=1)
    type_name: str = Field(..., alias="type", min_length=1)

    def to_model(self) -> Parameter:
        return Parameter(self.name, self.type_name)


class CapabilitySchema(_Schema):
    """A capability as written in a description document."""

    name: str = Field(..., min_length=1)
    returns: str | None = Field(default=None, description="Value type; omit for mutations")
    parameters: list[ParameterSchema] = Field(default_factory=list)
    type_parameters: list[str] = Field(default_factory=list)
    available_for_all: bool = False
    available_for: list[ConditionSchema] = Field(default_factory=list)
    transitions: list[TransitionSchema] = Field(default_factory=list)

    @field_validator("returns", mode="before")
    @classmethod
    def normalize_void(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in ("", "none", "void"):
            return None
        return v

    def to_model(self) -> Capability:
        return Capability(
            name=self.name,
            returns=self.returns,
            parameters=tuple(p.to_model() for p in self.parameters),
            type_parameters=tuple(self.type_parameters),
            available_for_all=self.available_for_all,
            availability=tuple(c.to_model() for c in self.available_for),
            transitions=tuple(t.to_model() for t in self.transitions),
        )


class EntitySchema(_Schema):
    """Top-level description document."""

    name: str = Field(..., min_length=1)
    module: str | None = None
    type_parameters: list[str] = Field(default_factory=list)
    groups: list[StateGroupSchema] = Field(default_factory=list)
    capabilities: list[CapabilitySchema] = Field(default_factory=list)

    @field_validator("groups")
    @classmethod
    def unique_group_names(cls, v: list[StateGroupSchema]) -> list[StateGroupSchema]:
        names = [g.name for g in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate state group names: {duplicates}")
        return v

    @field_validator("capabilities")
    @classmethod
    def unique_capability_names(cls, v: list[CapabilitySchema]) -> list[CapabilitySchema]:
        names = [c.name for c in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate capability names: {duplicates}")
        return v

    def to_model(self) -> EntityDescription:
        return EntityDescription(
            name=self.name,
            groups=tuple(g.to_model() for g in self.groups),
            capabilities=tuple(c.to_model() for c in self.capabilities),
            type_parameters=tuple(self.type_parameters),
            module=self.module,
        )


def _read_document(path: Path) -> Any:
    if not path.exists():
        raise DescriptionLoadError(
            f"Description file not found: {path}",
            source=str(path),
        )
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise DescriptionLoadError(
            f"Failed to parse description: {e}",
            source=str(path),
            cause=e,
        ) from e
    except OSError as e:
        raise DescriptionLoadError(
            f"Failed to read description: {e}",
            source=str(path),
            cause=e,
        ) from e


def load_description(source: Mapping[str, Any] | str | os.PathLike[str]) -> EntityDescription:
    """Load and validate an entity description.

    Args:
        source: A mapping, a YAML or JSON document as a string, or a path
            (``pathlib.Path`` or other ``os.PathLike``) to such a document.

    Returns:
        The validated EntityDescription.

    Raises:
        DescriptionLoadError: If the document is missing, unreadable,
            unparseable or does not match the schema.
    """
    origin: str | None = None
    if isinstance(source, os.PathLike):
        origin = os.fspath(source)
        data = _read_document(Path(origin))
    elif isinstance(source, str):
        try:
            data = yaml.safe_load(source)
        except yaml.YAMLError as e:
            raise DescriptionLoadError(f"Failed to parse description: {e}", cause=e) from e
    else:
        data = source

    if not isinstance(data, Mapping):
        raise DescriptionLoadError(
            f"Description must be a mapping, got {type(data).__name__}",
            source=origin,
        )

    try:
        schema = EntitySchema.model_validate(dict(data))
    except ValidationError as e:
        raise DescriptionLoadError(
            f"Invalid description: {e.error_count()} validation error(s)\n{e}",
            source=origin,
            cause=e,
        ) from e

    description = schema.to_model()
    logger.debug(
        "Loaded description %r: %d groups, %d capabilities",
        description.name,
        len(description.groups),
        len(description.capabilities),
    )
    return description
