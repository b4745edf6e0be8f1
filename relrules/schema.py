"""
DomainSchema: everything the engine knows about one environment.

    types              type -> parent type ("block" -> "thing", "thing" -> None)
    predicates         predicate -> argument types
    actions            action -> argument types
    vocabulary         action -> condition templates usable in its rules
    background         ordered background knowledge axioms
    complements        predicate -> predicate whose negation is its complement
    module_variables   how many ?G_i variables local specialisation may use

A schema is built once per domain and never changed afterwards. It can be
saved to and loaded from JSON, with templates and axioms stored in the
textual rule syntax.
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType

from .core.errors import SchemaError
from .core.parser import parse_predicate
from .core.predicates import RelationalPredicate, RelationalRule
from .core.terms import Constant, Variable
from .inference.background import BackgroundKnowledge


NUMBER_TYPE = "number"


def _frozen(d) -> MappingProxyType:
    return MappingProxyType(dict(d))


@dataclass(frozen=True, eq=False)
class DomainSchema:
    name: str
    types: dict = field(default_factory=dict)
    predicates: dict = field(default_factory=dict)
    actions: dict = field(default_factory=dict)
    vocabulary: dict = field(default_factory=dict)
    background: tuple = ()
    complements: dict = field(default_factory=dict)
    module_variables: int = 2

    def __post_init__(self):
        object.__setattr__(self, "types", _frozen(self.types))
        object.__setattr__(self, "predicates", _frozen(
            {k: tuple(v) for k, v in self.predicates.items()}))
        object.__setattr__(self, "actions", _frozen(
            {k: tuple(v) for k, v in self.actions.items()}))
        object.__setattr__(self, "vocabulary", _frozen(
            {k: tuple(v) for k, v in self.vocabulary.items()}))
        object.__setattr__(self, "background", tuple(self.background))
        object.__setattr__(self, "complements", _frozen(self.complements))
        self._check()

    def _check(self):
        for name, parent in self.types.items():
            if parent is not None and parent not in self.types:
                raise SchemaError(f"type {name!r} has unknown parent {parent!r}")
        for signature in list(self.predicates.values()) + list(self.actions.values()):
            for arg_type in signature:
                if arg_type not in self.types:
                    raise SchemaError(f"unknown argument type {arg_type!r}")
        for action, templates in self.vocabulary.items():
            if action not in self.actions:
                raise SchemaError(f"vocabulary given for unknown action {action!r}")
            for template in templates:
                self.validate_predicate(template)
        for axiom in self.background:
            for cond in axiom.left + axiom.right:
                self.validate_predicate(cond)
        for name, complement in self.complements.items():
            self.signature_of(name)
            self.signature_of(complement)

    # ── Lookups ─────────────────────────────────────────────────────────

    def signature_of(self, name: str) -> tuple:
        """Argument types of a predicate, type predicate or action."""
        if name in self.predicates:
            return self.predicates[name]
        if name in self.types:
            return (name,)
        if name in self.actions:
            return self.actions[name]
        raise SchemaError(f"unknown predicate {name!r} in domain {self.name!r}")

    def type_hierarchy(self) -> dict:
        return dict(self.types)

    def is_subtype(self, type_name: str, parent: str) -> bool:
        seen = set()
        while type_name is not None and type_name not in seen:
            if type_name == parent:
                return True
            seen.add(type_name)
            type_name = self.types.get(type_name)
        return False

    def is_numeric_type(self, type_name: str) -> bool:
        return self.is_subtype(type_name, NUMBER_TYPE)

    def background_knowledge(self) -> tuple:
        return self.background

    def action_condition_vocabulary(self, action: str) -> tuple:
        if action not in self.actions:
            raise SchemaError(f"unknown action {action!r} in domain {self.name!r}")
        return self.vocabulary.get(action, ())

    # ── Validation ──────────────────────────────────────────────────────

    def is_valid_action(self, action: RelationalPredicate) -> bool:
        signature = self.actions.get(action.name)
        return (signature is not None
                and not action.negated
                and len(signature) == action.arity
                and all(isinstance(a, (Constant, Variable)) for a in action.args))

    def validate_predicate(self, pred: RelationalPredicate):
        signature = self.signature_of(pred.name)
        if len(signature) != pred.arity:
            raise SchemaError(
                f"{pred} has {pred.arity} arguments, {pred.name} takes {len(signature)}")

    def validate_rule(self, rule: RelationalRule):
        if not self.is_valid_action(rule.action):
            raise SchemaError(f"invalid action {rule.action} in domain {self.name!r}")
        for cond in rule.conditions:
            self.validate_predicate(cond)

    # ── Persistence ─────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "types": dict(self.types),
            "predicates": {k: list(v) for k, v in self.predicates.items()},
            "actions": {k: list(v) for k, v in self.actions.items()},
            "vocabulary": {k: [str(t) for t in v] for k, v in self.vocabulary.items()},
            "background": [str(axiom) for axiom in self.background],
            "complements": dict(self.complements),
            "module_variables": self.module_variables,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DomainSchema":
        return cls(
            name=d["name"],
            types=d.get("types", {}),
            predicates=d.get("predicates", {}),
            actions=d.get("actions", {}),
            vocabulary={k: tuple(parse_predicate(t) for t in v)
                        for k, v in d.get("vocabulary", {}).items()},
            background=tuple(BackgroundKnowledge.from_string(text)
                             for text in d.get("background", [])),
            complements=d.get("complements", {}),
            module_variables=d.get("module_variables", 2),
        )

    def save(self, path: str):
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> "DomainSchema":
        with open(path) as f:
            return cls.from_dict(json.load(f))
