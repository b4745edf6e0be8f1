from .errors import RelRulesError, ParseError, RuleError, SchemaError, RangeMergeError
from .terms import (
    Constant, Variable, AnonymousTerm, ANONYMOUS, RangeVariable, RangeCounter,
    is_variable, is_anonymous, is_numeric, is_module_variable,
    action_variable, module_variable,
)
from .predicates import RelationalPredicate, RelationalRule, canonical
from .parser import (
    AxiomKind, parse_term, parse_predicate, parse_conditions,
    parse_rule, parse_axiom,
)

__all__ = [
    "RelRulesError", "ParseError", "RuleError", "SchemaError", "RangeMergeError",
    "Constant", "Variable", "AnonymousTerm", "ANONYMOUS", "RangeVariable", "RangeCounter",
    "is_variable", "is_anonymous", "is_numeric", "is_module_variable",
    "action_variable", "module_variable",
    "RelationalPredicate", "RelationalRule", "canonical",
    "AxiomKind", "parse_term", "parse_predicate", "parse_conditions",
    "parse_rule", "parse_axiom",
]
