"""
relrules: generalisation and simplification of relational rules.

Rules are condition sets over typed first-order atoms:

    (clear ?X) (above ?X ?) => (moveFloor ?X)

Three engines work on them:
    Unification          merges two observed states into one generalisation,
                         widening numbers into ranges
    BackgroundKnowledge  domain axioms that rewrite, prune and validate
                         rule bodies
    RuleCreation         legal one-step specialisations of a rule, each
                         simplified to a fixed point

Usage:
    python -m relrules --domain blocks --mode specialise \\
        --rule "(clear ?X) (above ?X ?) => (moveFloor ?X)"
    python -m relrules --mode unify --old "(clear a)" --new "(clear b)" \\
        --old-terms a --new-terms b
"""

from .core.errors import RelRulesError, ParseError, RuleError, SchemaError, RangeMergeError
from .core.terms import (
    Constant, Variable, ANONYMOUS, RangeVariable, RangeCounter,
    action_variable, module_variable,
)
from .core.predicates import RelationalPredicate, RelationalRule
from .core.parser import (
    AxiomKind, parse_term, parse_predicate, parse_conditions,
    parse_rule, parse_axiom,
)
from .inference.background import BackgroundKnowledge
from .inference.unification import Unification, UnifyResult
from .inference.creation import RuleCreation
from .schema import DomainSchema
from .domains import DOMAINS

__all__ = [
    "RelRulesError", "ParseError", "RuleError", "SchemaError", "RangeMergeError",
    "Constant", "Variable", "ANONYMOUS", "RangeVariable", "RangeCounter",
    "action_variable", "module_variable",
    "RelationalPredicate", "RelationalRule",
    "AxiomKind", "parse_term", "parse_predicate", "parse_conditions",
    "parse_rule", "parse_axiom",
    "BackgroundKnowledge", "Unification", "UnifyResult", "RuleCreation",
    "DomainSchema", "DOMAINS",
]
