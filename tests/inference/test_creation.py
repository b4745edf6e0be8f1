"""
Tests for rule creation in the blocks world and the maze.

The core claims:
    - simplify_rule returns None for duplicates, contradictions and no-ops
    - Simplification reaches a fixed point: simplifying again changes nothing
    - specialise_rule adds one vocabulary condition (or its complement) at a time
    - Local specialisation binds '?' to unused module variables, never numbers
    - Conditions never contradict a type the body has already given a term
    - specialise_rule_minor swaps action variables for module variables
      and splits numeric ranges into halves
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from relrules.core.errors import SchemaError
from relrules.core.parser import parse_conditions, parse_predicate
from relrules.core.predicates import RelationalPredicate, RelationalRule
from relrules.core.terms import ANONYMOUS, Constant, Variable
from relrules.domains import make_blocks_schema, make_maze_schema
from relrules.inference.creation import RuleCreation, direct_contradiction


P = parse_predicate
R = RelationalRule.from_string


def conds(text):
    return set(parse_conditions(text))


def body(text):
    return sorted(parse_conditions(text))


def bodies(rules):
    return {frozenset(rule.conditions) for rule in rules}


@pytest.fixture(scope="module")
def blocks():
    return RuleCreation(make_blocks_schema())


@pytest.fixture(scope="module")
def maze():
    return RuleCreation(make_maze_schema())


# ── Generators ───────────────────────────────────────────────────────────────

block_terms = st.sampled_from([Variable("X"), Variable("Y"), Constant("a")])
place_terms = st.sampled_from([Variable("X"), Variable("Y"), Constant("a"), ANONYMOUS])


@st.composite
def block_conditions(draw):
    name = draw(st.sampled_from(["on", "above", "clear", "highest", "onFloor"]))
    if name in ("on", "above"):
        args = (draw(place_terms), draw(place_terms))
    else:
        args = (draw(block_terms),)
    return RelationalPredicate(name, args, draw(st.booleans()))


block_bodies = st.sets(block_conditions(), min_size=1, max_size=5)


# ── Unit tests ───────────────────────────────────────────────────────────────

class TestDirectContradiction:
    def test_found(self):
        assert direct_contradiction(conds("(clear a) (not (clear a))")) == P("(not (clear a))")

    def test_anonymous_is_not_a_wildcard(self):
        assert direct_contradiction(conds("(on a b) (not (on a ?))")) is None


class TestSimplifyRule:
    @pytest.mark.parametrize("start, added, expected", [
        ("(on ?X ?) (above ?X ?)", None, "(above ?X ?)"),
        ("(above ?X ?)", "(clear ?X)", "(above ?X ?) (clear ?X)"),
        ("(on ?X ?)", "(above ?X ?)", "(above ?X ?)"),
        ("(on ?X ?) (above ?X a)", None, "(above ?X a)"),
        ("(above ?X ?) (above ?X ?Y) (above ? ?Y)", None, "(above ?X ?Y)"),
        ("(not (on ?X ?)) (onFloor ?X)", None, "(onFloor ?X)"),
        ("(not (on ?X ?))", None, "(onFloor ?X)"),
        ("(not (onFloor ?X))", None, "(above ?X ?)"),
        ("(clear ?X) (highest ?X)", None, "(highest ?X)"),
        ("(not (clear ?X))", None, "(above ? ?X)"),
        ("(on ?X ?Y) (above ?X ?)", None, "(on ?X ?Y)"),
        ("(clear ?X) (highest ?Y)", "(highest ?X)", "(highest ?X) (highest ?Y)"),
    ])
    def test_simplifies(self, blocks, start, added, expected):
        added = P(added) if added else None
        assert blocks.simplify_rule(conds(start), added) == body(expected)

    @pytest.mark.parametrize("start, added", [
        ("(above ?X ?)", "(on ?X ?)"),
        ("(above ?X ?)", "(not (above ?X ?))"),
        ("(on ?X ?)", "(on ?X ?)"),
        ("(on ?X ?)", "(not (on ?X ?))"),
        ("(above ?X ?) (onFloor ?X)", None),
        ("(clear a)", None),
    ])
    def test_rejected(self, blocks, start, added):
        added = P(added) if added else None
        assert blocks.simplify_rule(conds(start), added) is None

    def test_illegal_mode_keeps_witness(self, blocks):
        result = blocks.simplify_rule(conds("(above ?X ?) (onFloor ?X)"), illegal_check_mode=True)
        assert result == body("(onFloor ?X)")

    def test_input_untouched(self, blocks):
        start = conds("(on ?X ?) (above ?X ?)")
        blocks.simplify_rule(start)
        assert start == conds("(on ?X ?) (above ?X ?)")


class TestSimplifyConditions:
    def test_direct_contradiction(self, blocks):
        assert blocks.simplify_conditions(conds("(clear ?X) (not (clear ?X))")) is None

    def test_direct_contradiction_in_illegal_mode(self, blocks):
        result = blocks.simplify_conditions(conds("(highest a) (not (highest a))"),
                                            illegal_check_mode=True)
        assert result == conds("(highest a)")

    def test_conditional_assertion_contradiction(self, blocks):
        assert blocks.simplify_conditions(
            conds("(on ?X ?Y) (above ?Y ?Z) (not (above ?X ?Z))")) is None

    def test_empty(self, blocks):
        assert blocks.simplify_conditions(set()) == set()


class TestModuleTerms:
    def test_all_free(self, blocks):
        assert blocks.module_terms() == [Variable("G_0"), Variable("G_1")]

    def test_used_excluded(self, blocks):
        assert blocks.module_terms(exclude={Variable("G_0")}) == [Variable("G_1")]


class TestSpecialiseRule:
    def test_move_floor(self, blocks):
        mutants = blocks.specialise_rule(R("(clear ?X) (above ?X ?) => (moveFloor ?X)"))
        assert bodies(mutants) == {
            frozenset(conds("(above ?X ?) (highest ?X)")),
            frozenset(conds("(above ?X ?) (clear ?X) (not (highest ?X))")),
            frozenset(conds("(clear ?X) (above ?X ?G_0)")),
            frozenset(conds("(clear ?X) (above ?X ?G_1)")),
            frozenset(conds("(clear ?X) (on ?X ?G_0)")),
            frozenset(conds("(clear ?X) (on ?X ?G_1)")),
        }
        assert all(rule.action == P("(moveFloor ?X)") for rule in mutants)

    def test_no_mutant_contains_on_floor(self, blocks):
        mutants = blocks.specialise_rule(R("(clear ?X) (above ?X ?) => (moveFloor ?X)"))
        assert not any(c.name == "onFloor" for rule in mutants for c in rule.conditions)

    def test_empty_rule_gets_every_template(self, blocks):
        mutants = blocks.specialise_rule(R("=> (moveFloor ?X)"))
        assert frozenset(conds("(above ?X ?)")) in bodies(mutants)
        assert frozenset(conds("(onFloor ?X)")) in bodies(mutants)
        assert frozenset(conds("(highest ?X)")) in bodies(mutants)

    def test_unknown_action(self, blocks):
        with pytest.raises(SchemaError):
            blocks.specialise_rule(R("(clear ?X) => (fly ?X)"))

    def test_numeric_slot_not_specialised(self, maze):
        mutants = maze.specialise_rule(R("(dot ?X) => (toDot ?X ?Y)"))
        assert bodies(mutants) == {
            frozenset(conds("(distanceDot ? ?X ?)")),
            frozenset(conds("(distanceDot ?G_0 ?X ?)")),
            frozenset(conds("(distanceDot ?G_1 ?X ?)")),
        }

    def test_complement_for_edible(self, maze):
        mutants = maze.specialise_rule(R("(ghost ?X) => (fromGhost ?X ?Y)"))
        assert frozenset(conds("(ghost ?X) (not (edible ?X))")) in bodies(mutants)
        assert frozenset(conds("(edible ?X)")) in bodies(mutants)


class TestTypeConflicts:
    def test_floor_rules_out_block_conditions(self, blocks):
        mutants = blocks.specialise_rule(R("(floor ?Y) => (move ?X ?Y)"))
        assert mutants
        for rule in mutants:
            about_y = [c for c in rule.conditions if Variable("Y") in c.args]
            assert about_y == [P("(floor ?Y)")], str(rule)
        assert frozenset(conds("(floor ?Y) (highest ?X)")) in bodies(mutants)

    def test_simplify_rejects_mistyped_condition(self, blocks):
        assert blocks.type_conflict(conds("(floor ?Y)"), P("(highest ?Y)"))
        assert blocks.simplify_rule(conds("(floor ?Y)"), P("(highest ?Y)")) is None

    def test_other_terms_unaffected(self, blocks):
        assert not blocks.type_conflict(conds("(floor ?Y)"), P("(highest ?X)"))

    def test_matching_type_allowed(self, maze):
        assert not maze.type_conflict(conds("(dot ?X)"), P("(distanceDot ? ?X ?)"))


class TestSpecialiseRuleMinor:
    def test_move_floor(self, blocks):
        mutants = blocks.specialise_rule_minor(R("(above ?X ?) (highest ?X) => (moveFloor ?X)"))
        assert {str(rule) for rule in mutants} == {
            "(above ?G_0 ?) (highest ?G_0) => (moveFloor ?G_0)",
            "(above ?G_1 ?) (highest ?G_1) => (moveFloor ?G_1)",
        }

    def test_move(self, blocks):
        mutants = blocks.specialise_rule_minor(R("(clear ?X) (clear ?Y) => (move ?X ?Y)"))
        assert len(mutants) == 4

    def test_module_variables_kept(self, blocks):
        mutants = blocks.specialise_rule_minor(R("(clear ?G_0) (clear ?Y) => (move ?G_0 ?Y)"))
        assert {str(rule) for rule in mutants} == {
            "(clear ?G_0) (clear ?G_1) => (move ?G_0 ?G_1)",
        }

    def test_ranges_split_into_halves(self, maze):
        rule = R("(distanceDot ? ?X ?__Num0&:(betweenRange ?__Num0 0.0 8.0)) => (toDot ?X ?Y)")
        mutants = maze.specialise_rule_minor(rule)
        narrowed = {mutant for mutant in mutants if mutant.action == rule.action}
        assert bodies(narrowed) == {
            frozenset(conds("(distanceDot ? ?X ?__Num0&:(betweenRange ?__Num0 0.0 4.0))")),
            frozenset(conds("(distanceDot ? ?X ?__Num0&:(betweenRange ?__Num0 4.0 8.0))")),
            frozenset(conds("(distanceDot ? ?X ?__Num0&:(betweenRange ?__Num0 2.0 6.0))")),
        }
        assert len(mutants) == 7

    def test_point_range_not_split(self, maze):
        rule = R("(distanceDot ? ?X ?__Num0&:(betweenRange ?__Num0 3.0 3.0)) => (toDot ?X ?Y)")
        assert maze.split_ranges(rule) == set()


# ── Property-based tests ─────────────────────────────────────────────────────

class TestCreationProperties:

    @settings(deadline=None)
    @given(block_bodies)
    def test_fixed_point(self, conditions):
        """A simplified body is already as simple as it gets."""
        creation = RuleCreation(make_blocks_schema())
        once = creation.simplify_conditions(conditions)
        if once is None:
            return
        assert creation.simplify_conditions(once) == once

    @settings(deadline=None)
    @given(block_bodies)
    def test_result_is_consistent(self, conditions):
        creation = RuleCreation(make_blocks_schema())
        result = creation.simplify_conditions(conditions)
        if result is None:
            return
        assert direct_contradiction(result) is None
        for axiom in creation.schema.background_knowledge():
            assert axiom.find_contradiction(result) is None

    @settings(deadline=None)
    @given(block_bodies)
    def test_mutants_differ_from_rule(self, conditions):
        creation = RuleCreation(make_blocks_schema())
        rule = RelationalRule(tuple(conditions), P("(move ?X ?Y)"))
        for mutant in creation.specialise_rule(rule):
            assert mutant != rule
            assert mutant.action == rule.action
