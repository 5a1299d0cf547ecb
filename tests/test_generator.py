"""Tests for StateGenerator and CompilationUnit.

Tests cover:
- End-to-end generation for the robot description
- Naming, ordering and determinism of the unit
- Failure before and during enumeration
- Parallel assembly matching sequential output
- Reference self-consistency across random descriptions
"""

from __future__ import annotations

import itertools

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from stategen import (
    Capability,
    CompilationUnit,
    ConditionSet,
    EntityDescription,
    ErrorCode,
    GeneratorConfig,
    InvalidStateRepresentation,
    Permutation,
    RelationKind,
    StateGenerator,
    StateGroup,
    TransitionRule,
    generate,
)

ROBOT_TYPE_NAMES = [
    "LeftOnState", "LeftOffState",
    "RightOnState", "RightOffState",
    "MiddleOnState", "MiddleOffState",
    "UpOnState", "UpOffState",
    "DownOnState", "DownOffState",
]


# ============================================================
# End-to-End Tests
# ============================================================


class TestGenerateRobot:
    """The robot description expands into ten wrappers."""

    def test_one_wrapper_per_permutation(self, robot):
        unit = generate(robot)
        assert len(unit) == 10
        assert unit.type_names == ROBOT_TYPE_NAMES

    def test_move_up_from_middle(self, robot):
        unit = generate(robot)
        member = unit.get("MiddleOnState").member("move_up")
        assert member.return_type == "UpOnState"
        assert unit.successor_of(member) is unit.get("UpOnState")

    def test_move_up_not_available_from_left(self, robot):
        unit = generate(robot)
        assert "move_up" not in unit.get("LeftOnState").member_names

    def test_round_trip_through_wrappers(self, robot):
        unit = generate(robot)
        wrapper = unit.get("LeftOnState")
        for name in ["move_right", "move_right", "move_left", "turn_off"]:
            wrapper = unit.successor_of(wrapper.member(name))
        assert wrapper.type_name == "MiddleOffState"

    def test_switched_off_wrappers_cannot_move(self, robot):
        unit = generate(robot)
        for wrapper in unit:
            if "Off" in wrapper.permutation:
                assert not any(n.startswith("move_") for n in wrapper.member_names)
                assert "calibrate" in wrapper.member_names

    def test_every_wrapper_has_unconditional_members(self, robot):
        for wrapper in generate(robot):
            assert "stay" in wrapper.member_names
            assert "position" in wrapper.member_names

    def test_namespace(self, robot):
        assert generate(robot).namespace == "robots.generated"

    def test_wrapper_for_permutation(self, robot):
        unit = generate(robot)
        assert unit.wrapper_for(Permutation(("Up", "Off"))).type_name == "UpOffState"

    def test_no_dangling_references(self, robot):
        assert generate(robot).unresolved_references() == []


# ============================================================
# CompilationUnit Tests
# ============================================================


class TestCompilationUnit:
    """Tests for CompilationUnit lookups and serialization."""

    def test_contains(self, robot):
        unit = generate(robot)
        assert "DownOnState" in unit
        assert "SidewaysOnState" not in unit

    def test_get_missing_raises(self, robot):
        with pytest.raises(KeyError, match="No wrapper named"):
            generate(robot).get("SidewaysOnState")

    def test_successor_of_value_member_raises(self, robot):
        unit = generate(robot)
        with pytest.raises(ValueError, match="returns a value"):
            unit.successor_of(unit.get("LeftOnState").member("position"))

    def test_unresolved_references_on_partial_unit(self, robot):
        unit = generate(robot)
        partial = CompilationUnit(robot, (unit.get("MiddleOnState"),))
        assert partial.unresolved_references() == [
            "UpOnState", "DownOnState", "LeftOnState", "RightOnState", "MiddleOffState",
        ]

    def test_to_dict(self, robot):
        data = generate(robot).to_dict()
        assert data["entity"] == "Robot"
        assert data["namespace"] == "robots.generated"
        assert data["type_parameters"] == []
        assert data["groups"] == {
            "Position": ["Left", "Right", "Middle", "Up", "Down"],
            "Movable": ["On", "Off"],
        }
        assert [w["type_name"] for w in data["wrappers"]] == ROBOT_TYPE_NAMES

    def test_repr(self, robot):
        assert repr(generate(robot)) == "CompilationUnit('Robot', wrappers=10)"


# ============================================================
# Edge Case Tests
# ============================================================


class TestGenerateEdgeCases:
    """Tests for unusual but valid descriptions."""

    def test_no_groups_gives_empty_unit(self):
        unit = generate(EntityDescription(name="Empty"))
        assert len(unit) == 0
        assert unit.to_dict()["wrappers"] == []

    def test_group_without_states_gives_empty_unit(self):
        entity = EntityDescription(
            name="Half",
            groups=(StateGroup("A", ("X", "Y")), StateGroup("B", ())),
        )
        assert len(generate(entity)) == 0

    def test_no_capabilities(self):
        entity = EntityDescription(name="Lamp", groups=(StateGroup("Power", ("On", "Off")),))
        unit = generate(entity)
        assert unit.type_names == ["OnState", "OffState"]
        assert all(w.members == () for w in unit)

    def test_custom_config(self, robot):
        config = GeneratorConfig(
            name_suffix="Robot",
            wrapped_field_name="inner",
            constructor_argument_name="robot",
        )
        unit = generate(robot, config=config)
        wrapper = unit.get("MiddleOnRobot")
        assert wrapper.member("move_up").return_type == "UpOnRobot"
        assert wrapper.wrapped_field.name == "inner"
        assert wrapper.constructor.parameter_name == "robot"
        assert unit.successor_of(wrapper.member("move_up")).type_name == "UpOnRobot"

    def test_generation_is_repeatable(self, robot):
        generator = StateGenerator()
        assert generator.generate(robot).to_dict() == generator.generate(robot).to_dict()


# ============================================================
# Failure Tests
# ============================================================


class TestGenerateFailures:
    """Inconsistent descriptions abort generation for the whole entity."""

    def test_duplicate_state_fails_before_enumeration(self, monkeypatch):
        import stategen.generation.generator as generator_module

        def fail(*args, **kwargs):
            raise AssertionError("enumeration must not start")

        monkeypatch.setattr(generator_module, "enumerate_permutations", fail)
        entity = EntityDescription(
            name="Door",
            groups=(StateGroup("Lock", ("Open", "Closed")), StateGroup("Hinge", ("Open", "Stuck"))),
        )
        with pytest.raises(InvalidStateRepresentation) as exc_info:
            generate(entity)
        assert exc_info.value.error_code == ErrorCode.DUPLICATE_STATE
        assert exc_info.value.context.entity_name == "Door"
        assert exc_info.value.context.states == ["Open"]

    def test_entity_name_attached_to_relation_errors(self):
        entity = EntityDescription(
            name="Lamp",
            groups=(StateGroup("Power", ("On", "Off")),),
            capabilities=(
                Capability(name="blink", availability=(ConditionSet.of("On", relation="sometimes"),)),
            ),
        )
        with pytest.raises(InvalidStateRepresentation) as exc_info:
            generate(entity)
        error = exc_info.value
        assert error.error_code == ErrorCode.INVALID_RELATION
        assert error.context.entity_name == "Lamp"
        assert error.context.capability_name == "blink"
        assert "entity=Lamp" in str(error)

    def test_first_failing_permutation_is_reported(self):
        entity = EntityDescription(
            name="Lamp",
            groups=(StateGroup("Power", ("On", "Off")), StateGroup("Color", ("Red", "Blue"))),
            capabilities=(
                Capability(
                    name="flicker",
                    available_for_all=True,
                    transitions=(
                        TransitionRule.when("On", "Blue"),
                        TransitionRule.when("Off", "Blue"),
                    ),
                ),
            ),
        )
        with pytest.raises(InvalidStateRepresentation) as exc_info:
            generate(entity)
        assert exc_info.value.error_code == ErrorCode.AMBIGUOUS_TRANSITION
        assert exc_info.value.context.permutation == ("On", "Blue")

    def test_conflicting_availability(self):
        entity = EntityDescription(
            name="Lamp",
            groups=(StateGroup("Power", ("On", "Off")),),
            capabilities=(
                Capability(name="x", available_for_all=True, availability=(ConditionSet.of("On"),)),
            ),
        )
        with pytest.raises(InvalidStateRepresentation) as exc_info:
            generate(entity)
        assert exc_info.value.error_code == ErrorCode.CONFLICTING_AVAILABILITY

    def test_invalid_rule_behind_matching_rule(self):
        entity = EntityDescription(
            name="Robot",
            groups=(StateGroup("Position", ("Left", "Right")), StateGroup("Movable", ("On", "Off"))),
            capabilities=(
                Capability(
                    name="teleport",
                    availability=(
                        ConditionSet.of("On", "Off"),
                        ConditionSet.of("Left", "Right", relation=RelationKind.AND),
                    ),
                ),
            ),
        )
        with pytest.raises(InvalidStateRepresentation) as exc_info:
            generate(entity)
        assert exc_info.value.error_code == ErrorCode.CONTRADICTORY_CONDITION
        assert exc_info.value.context.capability_name == "teleport"

    def test_wrapper_name_collision(self):
        entity = EntityDescription(
            name="Tag",
            groups=(StateGroup("G1", ("AB", "A")), StateGroup("G2", ("C", "BC"))),
        )
        with pytest.raises(InvalidStateRepresentation, match="ABCState") as exc_info:
            generate(entity)
        error = exc_info.value
        assert error.error_code == ErrorCode.NAME_COLLISION
        assert error.context.entity_name == "Tag"
        assert error.context.extra["permutations"] == {"ABCState": [["AB", "C"], ["A", "BC"]]}

    def test_name_collision_rejected_by_unit(self, robot):
        wrapper = generate(robot).get("MiddleOnState")
        with pytest.raises(InvalidStateRepresentation) as exc_info:
            CompilationUnit(robot, (wrapper, wrapper))
        assert exc_info.value.error_code == ErrorCode.NAME_COLLISION

    def test_parallel_reports_same_error(self):
        entity = EntityDescription(
            name="Lamp",
            groups=(StateGroup("Power", ("On", "Off")), StateGroup("Color", ("Red", "Blue"))),
            capabilities=(
                Capability(
                    name="paint",
                    available_for_all=True,
                    transitions=(TransitionRule.when("Green", "Red"),),
                ),
            ),
        )
        with pytest.raises(InvalidStateRepresentation) as exc_info:
            generate(entity, config=GeneratorConfig(max_workers=4))
        assert exc_info.value.error_code == ErrorCode.UNKNOWN_TARGET_STATE
        assert exc_info.value.context.permutation == ("On", "Red")


# ============================================================
# Parallel Assembly Tests
# ============================================================


class TestParallelGeneration:
    """Thread-pool assembly produces the same unit as a sequential run."""

    @pytest.mark.parametrize("workers", [2, 3, 8])
    def test_parallel_matches_sequential(self, robot, workers):
        sequential = generate(robot)
        parallel = generate(robot, config=GeneratorConfig(max_workers=workers))
        assert parallel.type_names == sequential.type_names
        assert parallel.to_dict() == sequential.to_dict()


# ============================================================
# Property Tests
# ============================================================


@st.composite
def entities(draw) -> EntityDescription:
    """Random well-formed entities whose transitions always resolve."""
    sizes = draw(st.lists(st.integers(min_value=1, max_value=3), min_size=1, max_size=3))
    groups = tuple(
        StateGroup(f"G{i}", tuple(f"S{i}x{j}" for j in range(size)))
        for i, size in enumerate(sizes)
    )
    all_states = [s for g in groups for s in g.states]

    capabilities = []
    for index in range(draw(st.integers(min_value=0, max_value=4))):
        group = draw(st.sampled_from(groups))
        target = draw(st.sampled_from(group.states))
        trigger = draw(st.sampled_from(all_states))
        available = draw(st.lists(st.sampled_from(all_states), min_size=1, max_size=3, unique=True))
        capabilities.append(
            Capability(
                name=f"op{index}",
                availability=(ConditionSet.of(*available, relation=RelationKind.OR),),
                transitions=(TransitionRule.when(target, trigger),),
            )
        )
    return EntityDescription(name="Random", groups=groups, capabilities=tuple(capabilities))


class TestGeneratorInvariants:
    """Properties that hold for every well-formed entity."""

    @given(entity=entities())
    @settings(max_examples=50, deadline=None)
    def test_references_resolve(self, entity):
        unit = generate(entity)
        assert unit.unresolved_references() == []
        for wrapper in unit:
            for member in wrapper.transitions():
                assert member.return_type in unit

    @given(entity=entities())
    @settings(max_examples=50, deadline=None)
    def test_one_wrapper_per_combination(self, entity):
        unit = generate(entity)
        expected = [tuple(p) for p in itertools.product(*(g.states for g in entity.groups))]
        assert [w.permutation.states for w in unit] == expected
        assert len(set(unit.type_names)) == len(unit)
