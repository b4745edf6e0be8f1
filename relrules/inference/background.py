"""
Background knowledge: domain axioms that simplify and validate rule bodies.

Three kinds of axiom, written in the rule syntax:

    (above ?X ?) <=> (on ?X ?)                      equivalence
    (highest ?X) => (clear ?X)                      implication
    (on ?X ?Y) => (assert (above ?X ?Y))            conditional assertion

Applied to a set of rule conditions:

    - An equivalence rewrites its non-preferred side into its preferred
      side. The preferred side is the left one unless it has more atoms.
      When both sides are single positive atoms, the negated forms are
      rewritten as well.
    - An implication whose antecedent holds makes its consequent
      redundant, so a present consequent is removed.
    - Every axiom (in both directions for an equivalence) can expose a
      contradiction: an implied consequent whose negation is present.
      Conditional assertions are only ever used for that.

Matching: axiom variables bind consistently and never to '?'. In a
positive premise '?' matches any term; atoms that are removed or
rewritten, and negated premises, must match '?' with '?'.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..core.parser import AxiomKind, parse_axiom
from ..core.predicates import RelationalPredicate
from ..core.terms import Variable, is_anonymous


logger = logging.getLogger(__name__)


def match_args(pattern_args, args, binding: dict, loose: bool = False) -> Optional[dict]:
    """
    Extend binding so pattern_args matches args. None if impossible.

    loose lets '?' in the pattern stand for any term.
    """
    binding = dict(binding)
    for pattern, arg in zip(pattern_args, args):
        if is_anonymous(pattern):
            if loose or is_anonymous(arg):
                continue
            return None
        if isinstance(pattern, Variable):
            if is_anonymous(arg):
                return None
            bound = binding.get(pattern)
            if bound is None:
                binding[pattern] = arg
            elif bound != arg:
                return None
        elif pattern != arg:
            return None
    return binding


def match_conditions(patterns, conditions, loose: bool = False,
                     binding: Optional[dict] = None) -> Iterator:
    """
    Yield (binding, matched) for every way all patterns occur in conditions.

    conditions should be a sorted sequence so matches come out in a
    deterministic order. matched lists the condition used for each pattern.
    """
    binding = binding or {}
    if not patterns:
        yield binding, ()
        return
    first, rest = patterns[0], patterns[1:]
    for cond in conditions:
        if not first.same_signature(cond):
            continue
        extended = match_args(first.args, cond.args, binding,
                              loose and not first.negated)
        if extended is None:
            continue
        for final, matched in match_conditions(rest, conditions, loose, extended):
            yield final, (cond,) + matched


def find_negation(implied: RelationalPredicate, conditions) -> Optional[RelationalPredicate]:
    """
    The condition that contradicts `implied`, if any.

    A negated fact with '?' (nothing of that shape exists) is contradicted by
    any positive fact of that shape.
    """
    target = implied.negate()
    if not implied.negated:
        return target if target in conditions else None
    for cond in conditions:
        if target.same_signature(cond) and all(
                is_anonymous(t) or t == a for t, a in zip(target.args, cond.args)):
            return cond
    return None


@dataclass(frozen=True)
class BackgroundKnowledge:
    left: tuple
    right: tuple
    kind: AxiomKind
    text: str = field(default="", compare=False)

    @classmethod
    def from_string(cls, text: str) -> "BackgroundKnowledge":
        left, right, kind = parse_axiom(text)
        return cls(left, right, kind, text.strip())

    @property
    def is_equivalence(self) -> bool:
        return self.kind is AxiomKind.EQUIVALENCE

    @property
    def prefers_left(self) -> bool:
        return len(self.left) <= len(self.right)

    @property
    def preferred(self) -> tuple:
        """The side an equivalence collapses toward."""
        return self.left if self.prefers_left else self.right

    @property
    def rewritable(self) -> tuple:
        return self.right if self.prefers_left else self.left

    @property
    def relevant_predicates(self) -> set:
        names = {c.name for c in self.left}
        if self.is_equivalence:
            names.update(c.name for c in self.right)
        return names

    def _rewrites(self) -> list:
        rewrites = [(self.rewritable, self.preferred)]
        if len(self.left) == len(self.right) == 1:
            (source,), (target,) = self.rewritable, self.preferred
            if not source.negated and not target.negated:
                rewrites.append(((source.negate(),), (target.negate(),)))
        return rewrites

    def _directions(self) -> list:
        if self.is_equivalence:
            return [(self.left, self.right), (self.right, self.left)]
        return [(self.left, self.right)]

    def find_contradiction(self, conditions) -> Optional[RelationalPredicate]:
        """
        The condition whose negation this axiom implies, or None.

        Removing the returned condition leaves the part of the body that
        triggered the axiom: the illegal witness.
        """
        snapshot = sorted(conditions)
        for premises, consequents in self._directions():
            for binding, _ in match_conditions(premises, snapshot, loose=True):
                for consequent in consequents:
                    implied = consequent.substitute(binding, unbound_anonymous=True)
                    clash = find_negation(implied, snapshot)
                    if clash is not None:
                        return clash
        return None

    def _rewrite(self, conditions: set) -> bool:
        changed = False
        for source, target in self._rewrites():
            for binding, matched in list(match_conditions(source, sorted(conditions))):
                if not all(c in conditions for c in matched):
                    continue
                for cond in matched:
                    conditions.discard(cond)
                for cond in target:
                    conditions.add(cond.substitute(binding, unbound_anonymous=True))
                logger.debug("rewrote %s using %s",
                             " ".join(str(c) for c in matched), self)
                changed = True
        return changed

    def _remove_implied(self, conditions: set) -> bool:
        changed = False
        for binding, matched in list(match_conditions(self.left, sorted(conditions), loose=True)):
            if not all(c in conditions for c in matched):
                continue
            for consequent in self.right:
                implied = consequent.substitute(binding, unbound_anonymous=True)
                if implied in conditions and implied not in matched:
                    conditions.discard(implied)
                    logger.debug("removed %s, implied by %s", implied, self)
                    changed = True
        return changed

    def simplify(self, conditions: set, illegal_check_mode: bool = False) -> bool:
        """
        Apply this axiom to a mutable set of conditions.

        With illegal_check_mode, conditions contradicted by the axiom are
        removed so that only the illegal witness remains. Without it,
        contradictions are left for find_contradiction() to report.

        Returns whether conditions was modified.
        """
        changed = False
        if illegal_check_mode:
            clash = self.find_contradiction(conditions)
            while clash is not None:
                logger.debug("%s contradicts %s, removing it", clash, self)
                conditions.discard(clash)
                changed = True
                clash = self.find_contradiction(conditions)

        if self.kind is AxiomKind.EQUIVALENCE:
            changed = self._rewrite(conditions) or changed
        elif self.kind is AxiomKind.IMPLICATION:
            changed = self._remove_implied(conditions) or changed
        return changed

    def __str__(self):
        left = " ".join(str(c) for c in self.left)
        right = " ".join(str(c) for c in self.right)
        if self.kind is AxiomKind.EQUIVALENCE:
            return f"{left} <=> {right}"
        if self.kind is AxiomKind.CONDITIONAL_ASSERTION:
            return f"{left} => (assert {right})"
        return f"{left} => {right}"

    def __repr__(self):
        return f"BackgroundKnowledge({self})"
