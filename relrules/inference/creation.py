"""
Rule creation: legal mutations of a rule and fixed-point simplification.

specialise_rule() adds one condition at a time, drawn from the schema's
vocabulary for the rule's action:

    (clear ?X) (above ?X ?) => (moveFloor ?X)
        + (highest ?X)        ->  (above ?X ?) (highest ?X)
        + not (highest ?X)    ->  (clear ?X) (above ?X ?) (not (highest ?X))
        + (above ?X ?G_0)     ->  (clear ?X) (above ?X ?G_0)
        ...

Every candidate body goes through simplify_rule(), which applies the
background knowledge until nothing changes. Candidates that come back
None (duplicate, contradictory or no-op) are discarded.

specialise_rule_minor() only swaps one action variable for a module
variable (?G_0, ?G_1, ...).
"""

import logging
from typing import Optional

from ..core.predicates import RelationalPredicate, RelationalRule
from ..core.terms import (
    RangeVariable, Variable, action_variable, is_anonymous, module_variable,
)


logger = logging.getLogger(__name__)

MAX_SIMPLIFY_PASSES = 50


def _in_order(conditions, reference) -> list:
    """conditions, those also in reference first and in its order, the rest sorted."""
    kept = [c for c in reference if c in conditions]
    return kept + sorted(set(conditions) - set(kept))


def direct_contradiction(conditions) -> Optional[RelationalPredicate]:
    """A negated condition whose positive form is also present, if any."""
    for cond in sorted(conditions):
        if cond.negated and cond.positive() in conditions:
            return cond
    return None


class RuleCreation:
    """
    Mutates and simplifies rules for one domain.

    schema is a DomainSchema; it is only read, so one RuleCreation can be
    shared by every caller working in that domain.
    """

    def __init__(self, schema):
        self.schema = schema

    def simplify_conditions(self, conditions, illegal_check_mode: bool = False,
                            fixed_point: bool = True) -> Optional[set]:
        """
        Apply every background knowledge axiom, in schema order.

        Returns the simplified set, or None when the conditions contradict
        each other. With illegal_check_mode a contradiction is not fatal:
        the contradicted conditions are dropped instead, leaving the
        illegal witness. Without fixed_point only one pass is made.
        """
        working = set(conditions)
        for _ in range(MAX_SIMPLIFY_PASSES):
            changed = False
            clash = direct_contradiction(working)
            while clash is not None:
                if not illegal_check_mode:
                    logger.debug("%s contradicts %s", clash, clash.positive())
                    return None
                working.discard(clash)
                changed = True
                clash = direct_contradiction(working)

            for axiom in self.schema.background_knowledge():
                if not illegal_check_mode:
                    clash = axiom.find_contradiction(working)
                    if clash is not None:
                        logger.debug("%s is illegal under %s", clash, axiom)
                        return None
                if axiom.simplify(working, illegal_check_mode):
                    changed = True

            if not changed or not fixed_point:
                return working
        logger.warning("simplification did not settle after %d passes: %s",
                       MAX_SIMPLIFY_PASSES, " ".join(str(c) for c in sorted(working)))
        return working

    def simplify_rule(self, conditions, added_condition: Optional[RelationalPredicate] = None,
                      illegal_check_mode: bool = False,
                      fixed_point: bool = True) -> Optional[list]:
        """
        Simplify conditions, optionally after adding one condition.

        Returns the sorted simplified conditions, or None when the result
        is contradictory (unless illegal_check_mode), when the added
        condition is already present or negated in the body, when it puts
        a typed term where the schema expects an unrelated type, or when the
        result is the same as the conditions passed in.
        """
        original = set(conditions)
        working = set(original)
        if added_condition is not None:
            if added_condition in original or added_condition.negate() in original:
                return None
            if self.type_conflict(original, added_condition):
                logger.debug("%s clashes with the types in the body", added_condition)
                return None
            working.add(added_condition)

        result = self.simplify_conditions(working, illegal_check_mode, fixed_point)
        if result is None or result == original:
            return None
        return sorted(result)

    def type_conflict(self, conditions, condition: RelationalPredicate) -> bool:
        """
        Does condition use a term the body has typed as something else?

        (floor ?Y) in the body rules out (highest ?Y): highest takes a block,
        and floor is not a block or a parent of one.
        """
        signature = self.schema.signature_of(condition.name)
        for typed in conditions:
            if typed.negated or typed.arity != 1 or typed.name not in self.schema.types:
                continue
            for i, arg in enumerate(condition.args):
                if arg == typed.args[0] and not self.schema.is_subtype(signature[i], typed.name):
                    return True
        return False

    def module_terms(self, exclude=()) -> list:
        """The schema's module variables not already in exclude."""
        return [module_variable(i) for i in range(self.schema.module_variables)
                if module_variable(i) not in exclude]

    def _add_mutant(self, mutants: set, rule: RelationalRule,
                    condition: RelationalPredicate):
        conditions = self.simplify_rule(rule.conditions, condition)
        if conditions is None:
            return
        mutant = rule.with_conditions(conditions)
        if mutant != rule:
            logger.debug("mutant %s", mutant)
            mutants.add(mutant)

    def _local_specialisations(self, template: RelationalPredicate, goals) -> list:
        """Copies of template with one non-numeric '?' bound to a module variable."""
        signature = self.schema.signature_of(template.name)
        found = []
        for i, arg in enumerate(template.args):
            if not is_anonymous(arg) or self.schema.is_numeric_type(signature[i]):
                continue
            for goal in goals:
                args = list(template.args)
                args[i] = goal
                found.append(RelationalPredicate(template.name, tuple(args),
                                                 template.negated))
        return found

    def specialise_rule(self, rule: RelationalRule) -> set:
        """
        All legal one-step specialisations of rule.

        Each vocabulary template for the action is added with its variables
        bound to the action terms, along with its complement (negated) when
        the schema declares one. Each '?' in a template is also bound in
        turn to every unused module variable.
        """
        self.schema.validate_rule(rule)
        action = rule.action
        binding = {action_variable(i): term for i, term in enumerate(action.args)}
        vocabulary = self.schema.action_condition_vocabulary(action.name)
        goals = self.module_terms(exclude=rule.terms)

        mutants = set()
        for template in vocabulary:
            condition = template.substitute(binding)
            self._add_mutant(mutants, rule, condition)
            complement = self.schema.complements.get(condition.name)
            if complement is not None:
                self._add_mutant(mutants, rule, RelationalPredicate(
                    complement, condition.args, not condition.negated))

        for template in vocabulary:
            for local in self._local_specialisations(template, goals):
                self._add_mutant(mutants, rule, local.substitute(binding))
        return mutants

    def specialise_rule_minor(self, rule: RelationalRule) -> set:
        """
        Rules with one action variable swapped for an unused module variable.

        Conditions are simplified afterwards but never added or dropped on
        purpose; a swap that makes the rule contradictory is discarded.
        Every numeric range in the body is also split into its first,
        last and middle halves, one mutant each.
        """
        self.schema.validate_rule(rule)
        goals = self.module_terms(exclude=rule.terms)
        mutants = set()
        for term in rule.action.args:
            if not isinstance(term, Variable) or term.is_module:
                continue
            for goal in goals:
                swapped = rule.replace_terms({term: goal})
                conditions = self.simplify_conditions(swapped.conditions)
                if conditions is None:
                    logger.debug("swap %s -> %s is illegal in %s", term, goal, rule)
                    continue
                mutants.add(swapped.with_conditions(_in_order(conditions, swapped.conditions)))
        mutants.update(self.split_ranges(rule))
        return mutants

    def split_ranges(self, rule: RelationalRule) -> set:
        """Rules with one numeric range narrowed to a half of itself."""
        mutants = set()
        for cond in rule.conditions:
            signature = self.schema.signature_of(cond.name)
            for i, arg in enumerate(cond.args):
                if not isinstance(arg, RangeVariable) or not self.schema.is_numeric_type(signature[i]):
                    continue
                for narrowed in arg.split():
                    args = list(cond.args)
                    args[i] = narrowed
                    replaced = RelationalPredicate(cond.name, tuple(args), cond.negated)
                    mutant = rule.with_conditions(
                        replaced if c == cond else c for c in rule.conditions)
                    if mutant != rule:
                        mutants.add(mutant)
        return mutants
