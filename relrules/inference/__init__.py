from .background import BackgroundKnowledge, match_conditions, find_negation
from .unification import Unification, UnifyResult, FactUnification, unify_fact
from .creation import RuleCreation, direct_contradiction, MAX_SIMPLIFY_PASSES

__all__ = [
    "BackgroundKnowledge", "match_conditions", "find_negation",
    "Unification", "UnifyResult", "FactUnification", "unify_fact",
    "RuleCreation", "direct_contradiction", "MAX_SIMPLIFY_PASSES",
]
