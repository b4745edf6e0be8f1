"""
Blocks world: stack blocks on each other or on the floor.

    move ?X ?Y       put block ?X on ?Y
    moveFloor ?X     put block ?X on the floor

The axiom order matters: earlier axioms get the first chance to flag a
contradiction, which decides what an illegal-mode simplification keeps.
"""

from ..core.parser import parse_predicate
from ..inference.background import BackgroundKnowledge
from ..schema import DomainSchema


BLOCKS_AXIOMS = (
    "(above ?X ?) <=> (on ?X ?)",
    "(above ? ?Y) <=> (on ? ?Y)",
    "(onFloor ?X) <=> (not (above ?X ?))",
    "(above ?X ?) <=> (not (onFloor ?X))",
    "(clear ?X) <=> (not (above ? ?X))",
    "(above ? ?Y) <=> (not (clear ?Y))",
    "(above ?X ?Y) => (above ?X ?)",
    "(above ?X ?Y) => (above ? ?Y)",
    "(on ?X ?Y) => (above ?X ?Y)",
    "(on ?X ?Y) => (above ?X ?)",
    "(highest ?X) => (clear ?X)",
    "(block ?Y) (not (on ? ?Y)) => (assert (clear ?Y))",
    "(on ?X ?Y) (above ?Y ?Z) => (assert (above ?X ?Z))",
)

MOVE_FLOOR_VOCABULARY = (
    "(on ?X ?)", "(above ?X ?)", "(highest ?X)", "(clear ?X)",
)

MOVE_VOCABULARY = (
    "(on ?X ?)", "(on ?Y ?)",
    "(above ?X ?)", "(above ?Y ?)",
    "(highest ?X)", "(highest ?Y)",
    "(clear ?X)", "(clear ?Y)",
    "(onFloor ?X)", "(onFloor ?Y)",
)


def make_blocks_schema() -> DomainSchema:
    return DomainSchema(
        name="blocks",
        types={"thing": None, "block": "thing", "floor": "thing"},
        predicates={
            "on": ("block", "thing"),
            "above": ("block", "thing"),
            "clear": ("thing",),
            "highest": ("block",),
            "onFloor": ("block",),
        },
        actions={
            "move": ("block", "thing"),
            "moveFloor": ("block",),
        },
        vocabulary={
            "moveFloor": tuple(parse_predicate(t) for t in MOVE_FLOOR_VOCABULARY),
            "move": tuple(parse_predicate(t) for t in MOVE_VOCABULARY),
        },
        background=tuple(BackgroundKnowledge.from_string(a) for a in BLOCKS_AXIOMS),
        complements={name: name for name in ("on", "above", "highest", "clear", "onFloor")},
        module_variables=2,
    )
