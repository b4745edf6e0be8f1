"""
Terms: the arguments of a relational predicate.

    Constant("a")              ->  a
    Constant("2")              ->  2          (numeric constant)
    Variable("X")              ->  ?X
    ANONYMOUS                  ->  ?          (matches anything, binds nothing)
    RangeVariable("__Num0", 1.0, 2.0)
                               ->  ?__Num0&:(betweenRange ?__Num0 1.0 2.0)

Terms are immutable. Anything that "changes" a term returns a new one.

Action arguments are named positionally: argument 0 is ?X, argument 1 is
?Y, then ?Z, ?A, ?B, ... Module-scoped variables ?G_0, ?G_1, ... stand for
goal objects shared between rules.
"""

import re
import threading
from dataclasses import dataclass
from typing import Union


_NUMBER = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")

MODULE_PREFIX = "G_"
RANGE_PREFIX = "__Num"


@dataclass(frozen=True)
class Constant:
    name: str

    @property
    def is_numeric(self) -> bool:
        return bool(_NUMBER.match(self.name))

    @property
    def value(self) -> float:
        """The numeric value of a numeric constant."""
        return float(self.name)

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Variable:
    name: str

    @property
    def is_module(self) -> bool:
        return self.name.startswith(MODULE_PREFIX)

    def __str__(self):
        return f"?{self.name}"


@dataclass(frozen=True)
class AnonymousTerm:
    """The '?' placeholder. There is only ever one: ANONYMOUS."""

    def __str__(self):
        return "?"


ANONYMOUS = AnonymousTerm()


@dataclass(frozen=True)
class RangeVariable:
    """
    A variable constrained to the inclusive interval [lower, upper].

    An empty name marks a range that has been computed but not yet given
    an id by a RangeCounter.
    """
    name: str
    lower: float
    upper: float

    def __post_init__(self):
        object.__setattr__(self, "lower", float(self.lower))
        object.__setattr__(self, "upper", float(self.upper))
        if self.lower > self.upper:
            raise ValueError(
                f"range lower bound {self.lower} exceeds upper bound {self.upper}")

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper

    def widen(self, value) -> "RangeVariable":
        """Smallest range covering this one and value (number, Constant or range)."""
        if isinstance(value, RangeVariable):
            lower, upper = value.lower, value.upper
        elif isinstance(value, Constant):
            lower = upper = value.value
        else:
            lower = upper = float(value)
        return RangeVariable(self.name,
                             min(self.lower, lower),
                             max(self.upper, upper))

    def named(self, name: str) -> "RangeVariable":
        return RangeVariable(name, self.lower, self.upper)

    def split(self) -> list:
        """First half, last half and middle half of this range, same name."""
        diff = self.upper - self.lower
        return [
            RangeVariable(self.name, self.lower, self.lower + 0.5 * diff),
            RangeVariable(self.name, self.lower + 0.5 * diff, self.upper),
            RangeVariable(self.name, self.lower + 0.25 * diff, self.lower + 0.75 * diff),
        ]

    def __str__(self):
        return (f"?{self.name}&:(betweenRange ?{self.name} "
                f"{self.lower!r} {self.upper!r})")


Term = Union[Constant, Variable, AnonymousTerm, RangeVariable]


def is_variable(term) -> bool:
    return isinstance(term, Variable)


def is_anonymous(term) -> bool:
    return isinstance(term, AnonymousTerm)


def is_numeric(term) -> bool:
    """Numeric constants and range variables."""
    if isinstance(term, RangeVariable):
        return True
    return isinstance(term, Constant) and term.is_numeric


def is_module_variable(term) -> bool:
    return isinstance(term, Variable) and term.is_module


def action_variable(index: int) -> Variable:
    """Variable standing for action argument `index`: ?X, ?Y, ?Z, ?A, ..."""
    letter = chr(ord("A") + (ord("X") - ord("A") + index) % 26)
    return Variable(letter)


def module_variable(index: int) -> Variable:
    return Variable(f"{MODULE_PREFIX}{index}")


class RangeCounter:
    """
    Source of fresh range variable names: __Num0, __Num1, ...

    Ids only ever increase until reset(). Safe to share between threads.
    """

    def __init__(self, start: int = 0):
        self._next = start
        self._lock = threading.Lock()

    def next_name(self) -> str:
        with self._lock:
            name = f"{RANGE_PREFIX}{self._next}"
            self._next += 1
        return name

    @property
    def issued(self) -> int:
        return self._next

    def reset(self):
        with self._lock:
            self._next = 0
