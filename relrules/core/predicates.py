"""
Relational predicates (atoms) and rules.

    RelationalPredicate("on", (Variable("X"), ANONYMOUS))         ->  (on ?X ?)
    RelationalPredicate("clear", (Constant("a"),), negated=True)  ->  (not (clear a))

A RelationalRule is a set of condition predicates and one action:

    (clear ?X) (above ?X ?) => (moveFloor ?X)

Conditions are deduplicated but keep their order for display. Two rules
with the same body compare equal no matter how they were built.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Optional

from .errors import RuleError
from .terms import (
    ANONYMOUS, Constant, RangeVariable, Variable,
    is_anonymous, is_module_variable,
)


@dataclass(frozen=True)
class RelationalPredicate:
    name: str
    args: tuple = ()
    negated: bool = False

    def __post_init__(self):
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    @property
    def arity(self) -> int:
        return len(self.args)

    @property
    def sort_key(self) -> tuple:
        return (self.name, self.negated, tuple(str(a) for a in self.args))

    def __lt__(self, other):
        if not isinstance(other, RelationalPredicate):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __le__(self, other):
        if not isinstance(other, RelationalPredicate):
            return NotImplemented
        return self.sort_key <= other.sort_key

    def negate(self) -> "RelationalPredicate":
        return RelationalPredicate(self.name, self.args, not self.negated)

    def positive(self) -> "RelationalPredicate":
        return RelationalPredicate(self.name, self.args, False)

    def same_signature(self, other: "RelationalPredicate") -> bool:
        """Same name, arity and sign: the precondition for any matching."""
        return (self.name == other.name
                and self.negated == other.negated
                and len(self.args) == len(other.args))

    def substitute(self, mapping: dict, unbound_anonymous: bool = False) -> "RelationalPredicate":
        """
        Replace variables using mapping {Variable: term}.

        With unbound_anonymous, variables missing from mapping become '?'.
        """
        args = []
        for arg in self.args:
            if isinstance(arg, Variable):
                if arg in mapping:
                    arg = mapping[arg]
                elif unbound_anonymous:
                    arg = ANONYMOUS
            args.append(arg)
        return RelationalPredicate(self.name, tuple(args), self.negated)

    def replace_terms(self, mapping: dict) -> "RelationalPredicate":
        """Replace any term (constants included) found in mapping."""
        return RelationalPredicate(
            self.name, tuple(mapping.get(a, a) for a in self.args), self.negated)

    @property
    def variables(self) -> tuple:
        return tuple(a for a in self.args if isinstance(a, Variable))

    @property
    def is_fully_anonymous(self) -> bool:
        return all(is_anonymous(a) for a in self.args)

    def __str__(self):
        inner = " ".join([self.name] + [str(a) for a in self.args])
        if self.negated:
            return f"(not ({inner}))"
        return f"({inner})"

    def __repr__(self):
        return f"RelationalPredicate({self})"


def canonical(conditions) -> tuple:
    """Deduplicated, sorted tuple of conditions."""
    return tuple(sorted(set(conditions)))


def unique(conditions) -> tuple:
    """Deduplicated tuple of conditions, first occurrence kept in place."""
    return tuple(dict.fromkeys(conditions))


@dataclass(frozen=True, eq=False)
class RelationalRule:
    """
    conditions => action.

    Conditions keep the order they were given in, for display, but two
    rules with the same condition set and action are equal. The action's
    arguments are always constants or variables. The rule is immutable:
    with_conditions() and replace_terms() build new rules.
    """
    conditions: tuple
    action: RelationalPredicate
    label: str = ""

    def __post_init__(self):
        object.__setattr__(self, "conditions", unique(self.conditions))
        if self.action.negated:
            raise RuleError(f"action cannot be negated: {self.action}")
        for arg in self.action.args:
            if not isinstance(arg, (Constant, Variable)):
                raise RuleError(
                    f"action terms must be constants or variables: {self.action}")

    def _key(self):
        return (frozenset(self.conditions), self.action)

    def __eq__(self, other):
        if not isinstance(other, RelationalRule):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    @property
    def action_terms(self) -> tuple:
        return self.action.args

    @property
    def terms(self) -> set:
        found = set(self.action.args)
        for cond in self.conditions:
            found.update(a for a in cond.args if not is_anonymous(a))
        return found

    @cached_property
    def constant_conditions(self) -> Optional[tuple]:
        """
        Positive conditions whose arguments are all constants or module
        variables: the parts of the rule that only hold for specific
        objects. None when the rule has no such condition.
        """
        found = tuple(
            cond for cond in canonical(self.conditions)
            if not cond.negated and cond.args
            and all(isinstance(a, Constant) or is_module_variable(a)
                    for a in cond.args)
        )
        return found or None

    @property
    def range_variables(self) -> tuple:
        return tuple(a for cond in self.conditions for a in cond.args
                     if isinstance(a, RangeVariable))

    def with_conditions(self, conditions) -> "RelationalRule":
        return RelationalRule(tuple(conditions), self.action, self.label)

    def replace_terms(self, mapping: dict) -> "RelationalRule":
        return RelationalRule(
            tuple(c.replace_terms(mapping) for c in self.conditions),
            self.action.replace_terms(mapping),
            self.label,
        )

    @classmethod
    def from_string(cls, text: str) -> "RelationalRule":
        from .parser import parse_rule
        return parse_rule(text)

    @property
    def condition_string(self) -> str:
        return " ".join(str(c) for c in self.conditions)

    def __str__(self):
        return f"{self.condition_string} => {self.action}"

    def __repr__(self):
        return f"RelationalRule({self})"
