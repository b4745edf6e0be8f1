"""
Anti-unification of relational states (least general generalisation).

Given an old generalised state and a new observed state, keep the most
specific facts that hold in both:

    old:  (clear a) (on a b)          terms: a
    new:  (clear c) (on c d)          terms: c
    ->    (clear ?X) (on ?X ?)        terms: ?X

Action terms that differ become the positional action variable (?X for
argument 0, ?Y for argument 1, ...). Other differing arguments become '?'.
Differing numbers become a range variable that covers both values:

    (distanceDot a b 1)  +  (distanceDot a b 2)
    ->  (distanceDot a b ?__Num0&:(betweenRange ?__Num0 1.0 2.0))

A fact that keeps no informative argument is dropped, as is any old fact
with no counterpart in the new state. Negated facts are never generalised.
A new fact matched exactly is used up: no later old fact can unify with it.

Without terms (flexible mode), variables of the new state are mapped onto
variables of the old state as they are met instead.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from ..core.errors import RangeMergeError
from ..core.predicates import RelationalPredicate
from ..core.terms import (
    ANONYMOUS, Constant, RangeCounter, RangeVariable, Variable,
    action_variable, is_anonymous, is_numeric,
)


logger = logging.getLogger(__name__)


class UnifyResult(IntEnum):
    NO_UNIFICATION = -1
    UNCHANGED = 0
    GENERALISED = 1


@dataclass
class FactUnification:
    """One way of generalising an old fact against a new one."""
    fact: RelationalPredicate
    generality: int
    replacements: dict = field(default_factory=dict)
    # argument index -> old term, for every range created or widened
    ranges: dict = field(default_factory=dict)
    # the new-state fact this was unified with
    source: Optional[RelationalPredicate] = None

    @property
    def sort_key(self):
        return (self.generality, self.fact.sort_key)

    @property
    def exact(self) -> bool:
        """The source fact, renamed, is exactly the unified fact."""
        return (self.source is not None
                and self.source.replace_terms(self.replacements) == self.fact)


def term_replacements(old_terms, new_terms):
    """
    Maps renaming differing action constants to positional variables.

    Returns (old_map, new_map), or None when two different variables share
    an action position and so cannot be unified.
    """
    if len(old_terms) != len(new_terms):
        raise ValueError(
            f"term lists differ in length: {len(old_terms)} vs {len(new_terms)}")
    old_map, new_map = {}, {}
    for i, (old, new) in enumerate(zip(old_terms, new_terms)):
        if old == new or is_numeric(old) or is_numeric(new):
            continue
        if isinstance(old, Variable) and isinstance(new, Variable):
            return None
        var = action_variable(i)
        if not isinstance(old, Variable):
            old_map[old] = var
        if not isinstance(new, Variable):
            new_map[new] = var
    return old_map, new_map


def _flexible_replacement(term, unity, mapping: dict):
    """Map a new-state variable onto the old-state variable in the same place."""
    if is_anonymous(unity):
        return unity
    if unity in mapping:
        return mapping[unity]
    if (isinstance(unity, Variable) and isinstance(term, Variable)
            and term not in mapping.values()):
        mapping[unity] = term
        return term
    return unity


def _numeric_mismatch(term, unity) -> bool:
    """One side is a number, the other a non-numeric constant."""
    for a, b in ((term, unity), (unity, term)):
        if is_numeric(a) and isinstance(b, Constant) and not b.is_numeric:
            return True
    return False


def _merge_numeric(term, unity) -> RangeVariable:
    if isinstance(term, RangeVariable):
        return term.widen(unity)
    base = RangeVariable("", term.value, term.value)
    return base.widen(unity)


def unify_fact(fact: RelationalPredicate, other: RelationalPredicate,
               replacements: dict, action_terms=frozenset(),
               flexible: bool = False) -> Optional[FactUnification]:
    """
    Generalise fact (old state) against other (new state).

    replacements renames terms of other; in flexible mode it is extended
    with new variable mappings (on a copy returned in the result).
    Returns None when nothing informative survives.
    """
    if not fact.same_signature(other):
        return None

    mapping = dict(replacements)
    args = []
    ranges = {}
    generality = 0
    valid = False
    for i, (term, unity) in enumerate(zip(fact.args, other.args)):
        if flexible:
            unity = _flexible_replacement(term, unity, mapping)
        else:
            unity = mapping.get(unity, unity)

        if term == unity:
            args.append(term)
            valid = valid or not is_anonymous(term)
            continue

        if is_numeric(term) and is_numeric(unity):
            merged = _merge_numeric(term, unity)
            if merged != term:
                if fact.negated:
                    return None
                generality += 1
                ranges[i] = term
            args.append(merged)
            valid = True
            continue

        if _numeric_mismatch(term, unity):
            raise RangeMergeError(
                f"cannot merge {term} with {unity} in {fact} / {other}")

        if fact.negated:
            return None
        if is_anonymous(term):
            args.append(ANONYMOUS)
            continue
        args.append(ANONYMOUS)
        generality += 1
        if term in action_terms:
            generality += 1

    if not valid:
        return None
    result = RelationalPredicate(fact.name, tuple(args), fact.negated)
    return FactUnification(result, generality, mapping, ranges, other)


class Unification:
    """
    A generalisation session.

    Owns the counter that names range variables, so independent runs
    (or tests) can reset() it without touching anyone else's ids.
    """

    def __init__(self, counter: Optional[RangeCounter] = None):
        self.counter = counter or RangeCounter()

    def reset(self):
        self.counter.reset()

    def _allocate(self, candidate: FactUnification, terms: list) -> RelationalPredicate:
        """Name fresh ranges and carry every range into the old terms."""
        args = list(candidate.fact.args)
        for i, source in candidate.ranges.items():
            merged = args[i]
            if not merged.name:
                merged = merged.named(self.counter.next_name())
                args[i] = merged
                logger.debug("new range %s from %s", merged, source)
            for j, term in enumerate(terms):
                if term == source:
                    terms[j] = merged
        return RelationalPredicate(candidate.fact.name, tuple(args),
                                   candidate.fact.negated)

    def unify_states(self, old_facts: list, new_facts, old_terms: Optional[list] = None,
                     new_terms=None, replacements: Optional[dict] = None) -> UnifyResult:
        """
        Generalise old_facts so that it also covers new_facts.

        Args:
            old_facts:     list of RelationalPredicate, updated in place.
            new_facts:     iterable of RelationalPredicate, left untouched.
            old_terms:     action terms of the old state, updated in place.
            new_terms:     action terms of the new state.
            replacements:  flexible mode only (no terms): starting map of
                           new variable -> old term, updated in place with
                           the mappings that were used.

        Returns UnifyResult.NO_UNIFICATION (old state left untouched) when
        nothing survives, UNCHANGED when the old state already covered the
        new one, GENERALISED otherwise.
        """
        flexible = old_terms is None
        if flexible:
            old_map, new_map = {}, dict(replacements or {})
            action_terms = frozenset()
        else:
            maps = term_replacements(old_terms, new_terms)
            if maps is None:
                return UnifyResult.NO_UNIFICATION
            old_map, new_map = maps
            action_terms = frozenset(old_map.get(t, t) for t in old_terms)

        new_facts = list(new_facts)
        terms = [old_map.get(t, t) for t in (old_terms or ())]
        chosen = []
        for fact in old_facts:
            mapped = fact.replace_terms(old_map)
            candidates = []
            for other in new_facts:
                candidate = unify_fact(mapped, other, new_map, action_terms, flexible)
                if candidate is not None:
                    candidates.append(candidate)
            if not candidates:
                logger.debug("dropped %s: no counterpart in new state", fact)
                continue
            best = min(candidates, key=lambda c: c.sort_key)
            chosen.append(best)
            if best.exact:
                new_facts.remove(best.source)
            if flexible:
                new_map = chosen[-1].replacements

        if not chosen:
            return UnifyResult.NO_UNIFICATION

        result = []
        for candidate in chosen:
            fact = self._allocate(candidate, terms)
            if fact not in result:
                result.append(fact)

        unchanged = (set(result) == set(old_facts)
                     and terms == list(old_terms or ()))
        old_facts[:] = result
        if old_terms is not None:
            old_terms[:] = terms
        if flexible and replacements is not None:
            replacements.clear()
            replacements.update(new_map)

        if unchanged:
            return UnifyResult.UNCHANGED
        return UnifyResult.GENERALISED
