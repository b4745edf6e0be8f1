"""
Domain registry.

Each domain is a dict:
    make_schema:   () -> DomainSchema
    description:   str
"""

from .blocks import make_blocks_schema
from .maze import make_maze_schema


DOMAINS = {
    "blocks": {
        "make_schema": make_blocks_schema,
        "description": "Blocks world: move blocks onto each other or the floor",
    },
    "maze": {
        "make_schema": make_maze_schema,
        "description": "Maze game: numeric distances to dots and ghosts",
    },
}

__all__ = ["DOMAINS", "make_blocks_schema", "make_maze_schema"]
