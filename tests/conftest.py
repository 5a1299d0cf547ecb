"""Pytest fixtures for stategen tests."""

from __future__ import annotations

import pytest

from stategen import (
    Capability,
    ConditionSet,
    EntityDescription,
    Parameter,
    RelationKind,
    StateGroup,
    StateGroupMap,
    TransitionRule,
)

AND = RelationKind.AND


def _move(name: str, available_with: tuple[str, str], transitions: list[tuple[str, str]]) -> Capability:
    return Capability(
        name=name,
        availability=(
            ConditionSet.of("On", "Middle", relation=AND),
            ConditionSet.of(*available_with, relation=AND),
        ),
        transitions=tuple(TransitionRule.when(target, source) for target, source in transitions),
    )


@pytest.fixture
def robot() -> EntityDescription:
    """A robot arm moving between five positions, switchable on and off."""
    return EntityDescription(
        name="Robot",
        module="robots.generated",
        groups=(
            StateGroup("Position", ("Left", "Right", "Middle", "Up", "Down")),
            StateGroup("Movable", ("On", "Off")),
        ),
        capabilities=(
            _move("move_up", ("On", "Down"), [("Up", "Middle"), ("Middle", "Down")]),
            _move("move_down", ("On", "Up"), [("Middle", "Up"), ("Down", "Middle")]),
            _move("move_left", ("On", "Right"), [("Middle", "Right"), ("Left", "Middle")]),
            _move("move_right", ("On", "Left"), [("Middle", "Left"), ("Right", "Middle")]),
            Capability(name="stay", available_for_all=True),
            Capability(
                name="turn_off",
                availability=(ConditionSet.of("On"),),
                transitions=(TransitionRule.when("Off"),),
            ),
            Capability(
                name="turn_on",
                availability=(ConditionSet.of("Off"),),
                transitions=(TransitionRule.when("On"),),
            ),
            Capability(
                name="position",
                returns="str",
                available_for_all=True,
            ),
            Capability(
                name="calibrate",
                returns="float",
                parameters=(Parameter("offset", "float"),),
                availability=(ConditionSet.of("Off"),),
                transitions=(TransitionRule.when("Middle"),),
            ),
        ),
    )


@pytest.fixture
def relation_groups() -> StateGroupMap:
    """Three groups of two or three states each."""
    return StateGroupMap.from_pairs([
        ("Group1", ["State1", "State2", "State3"]),
        ("Group2", ["State4", "State5"]),
        ("Group3", ["State6", "State7"]),
    ])


@pytest.fixture
def small_groups() -> StateGroupMap:
    return StateGroupMap.from_pairs([
        ("G1", ["A", "B", "C"]),
        ("G2", ["D", "E"]),
    ])
