"""
Parser for the textual rule and axiom syntax.

    term       :=  name | ?Name | ? | ?R&:(betweenRange ?R lo hi)
    predicate  :=  (name term*) | (not predicate)
    conditions :=  predicate*
    rule       :=  conditions => predicate
    axiom      :=  conditions <=> conditions
                |  conditions => conditions
                |  conditions => (assert conditions)

Anything else raises ParseError. There are no function terms: a '(' in
argument position is an error.
"""

import re
from enum import Enum

from .errors import ParseError
from .predicates import RelationalPredicate, RelationalRule
from .terms import ANONYMOUS, Constant, RangeVariable, Variable


class AxiomKind(Enum):
    EQUIVALENCE = "<=>"
    IMPLICATION = "=>"
    CONDITIONAL_ASSERTION = "assert"


_RANGE = r"\?[\w-]*&:\(betweenRange\s+\?[\w-]*\s+\S+?\s+\S+?\)"
_TOKEN = re.compile(rf"{_RANGE}|\(|\)|[^\s()]+")
_RANGE_PARTS = re.compile(
    r"^\?([\w-]*)&:\(betweenRange\s+\?([\w-]*)\s+(\S+?)\s+(\S+?)\)$")


def tokenize(text: str) -> list:
    return _TOKEN.findall(text)


def parse_term(token: str):
    """Parse a single argument token."""
    if token == "?":
        return ANONYMOUS
    if "&:" in token:
        match = _RANGE_PARTS.match(token)
        if not match or match.group(1) != match.group(2):
            raise ParseError("malformed range term", token)
        try:
            return RangeVariable(match.group(1), float(match.group(3)),
                                 float(match.group(4)))
        except ValueError as e:
            raise ParseError(f"bad range bounds ({e})", token) from e
    if token.startswith("?"):
        return Variable(token[1:])
    if token in ("(", ")"):
        raise ParseError("expected a term", token)
    return Constant(token)


class _Reader:
    """Cursor over a token list."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    def peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def take(self):
        token = self.peek()
        if token is None:
            raise ParseError("unexpected end of input", self.text)
        self.pos += 1
        return token

    def expect(self, token: str):
        found = self.take()
        if found != token:
            raise ParseError(f"expected {token!r}, found {found!r}", self.text)

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def predicate(self) -> RelationalPredicate:
        self.expect("(")
        name = self.take()
        if name in ("(", ")"):
            raise ParseError("missing predicate name", self.text)
        if name == "not":
            inner = self.predicate()
            self.expect(")")
            if inner.negated:
                raise ParseError("double negation", self.text)
            return inner.negate()
        args = []
        while self.peek() != ")":
            token = self.take()
            if token == "(":
                raise ParseError("nested terms are not supported", self.text)
            args.append(parse_term(token))
        self.expect(")")
        return RelationalPredicate(name, tuple(args))

    def predicates(self) -> list:
        found = []
        while not self.at_end():
            found.append(self.predicate())
        return found


def parse_predicate(text: str) -> RelationalPredicate:
    reader = _Reader(text)
    pred = reader.predicate()
    if not reader.at_end():
        raise ParseError("trailing input after predicate", text)
    return pred


def parse_conditions(text: str) -> list:
    """Parse a whitespace separated sequence of predicates."""
    return _Reader(text).predicates()


def parse_rule(text: str) -> RelationalRule:
    if "<=>" in text or text.count("=>") != 1:
        raise ParseError("a rule needs exactly one '=>'", text)
    body, head = text.split("=>")
    action = parse_predicate(head.strip())
    return RelationalRule(tuple(parse_conditions(body)), action)


def parse_axiom(text: str):
    """
    Parse background knowledge.

    Returns (left, right, kind) where left and right are tuples of
    RelationalPredicate and kind is an AxiomKind.
    """
    if "<=>" in text:
        parts = text.split("<=>")
        kind = AxiomKind.EQUIVALENCE
    elif "=>" in text:
        parts = text.split("=>")
        kind = AxiomKind.IMPLICATION
    else:
        raise ParseError("axiom needs '<=>' or '=>'", text)
    if len(parts) != 2:
        raise ParseError("axiom has more than one arrow", text)

    left = parse_conditions(parts[0])
    right_text = parts[1].strip()
    reader = _Reader(right_text)
    if reader.tokens[:2] == ["(", "assert"]:
        if kind is AxiomKind.EQUIVALENCE:
            raise ParseError("assert is only allowed after '=>'", text)
        kind = AxiomKind.CONDITIONAL_ASSERTION
        reader.pos = 2
        right = []
        while reader.peek() != ")":
            right.append(reader.predicate())
        reader.expect(")")
        if not reader.at_end():
            raise ParseError("trailing input after assert", text)
    else:
        right = reader.predicates()

    if not left or not right:
        raise ParseError("axiom needs conditions on both sides", text)
    return tuple(left), tuple(right), kind
