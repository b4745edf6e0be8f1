"""
Exception hierarchy.

Only malformed input and schema mismatches raise. A contradiction found
while simplifying a rule is an ordinary outcome and is reported as None.
"""


class RelRulesError(Exception):
    """Base class for every error raised by relrules."""


class ParseError(RelRulesError, ValueError):
    """Rule, condition or axiom text could not be parsed."""

    def __init__(self, message: str, text: str = ""):
        self.text = text
        if text:
            message = f"{message}: {text!r}"
        super().__init__(message)


class RuleError(RelRulesError, ValueError):
    """A rule violates a structural invariant (e.g. an anonymous action term)."""


class SchemaError(RelRulesError):
    """A predicate or action does not agree with the domain schema."""


class RangeMergeError(RelRulesError):
    """A numeric range was merged with a value that is not a number."""
