"""
Maze game: a player eating dots and running from ghosts.

Distances are numbers, so rules over them carry range variables.
"""

from ..core.parser import parse_predicate
from ..inference.background import BackgroundKnowledge
from ..schema import DomainSchema


MAZE_AXIOMS = (
    "(distanceDot ? ?X ?) => (dot ?X)",
    "(distanceGhost ? ?X ?) => (ghost ?X)",
    "(edible ?X) => (ghost ?X)",
)


def make_maze_schema() -> DomainSchema:
    return DomainSchema(
        name="maze",
        types={"thing": None, "number": None, "player": "thing",
               "dot": "thing", "ghost": "thing"},
        predicates={
            "distanceDot": ("player", "dot", "number"),
            "distanceGhost": ("player", "ghost", "number"),
            "edible": ("ghost",),
            "level": ("number",),
        },
        actions={
            "toDot": ("dot", "number"),
            "fromGhost": ("ghost", "number"),
        },
        vocabulary={
            "toDot": (parse_predicate("(dot ?X)"),
                      parse_predicate("(distanceDot ? ?X ?)")),
            "fromGhost": (parse_predicate("(ghost ?X)"),
                          parse_predicate("(edible ?X)"),
                          parse_predicate("(distanceGhost ? ?X ?)")),
        },
        background=tuple(BackgroundKnowledge.from_string(a) for a in MAZE_AXIOMS),
        complements={"edible": "edible"},
        module_variables=2,
    )
