"""
CLI entry point. Run as: python -m relrules --domain <name> --mode <mode>
"""

import argparse
import logging
import sys

from .core.errors import RelRulesError
from .core.parser import parse_conditions, parse_rule, parse_term
from .domains import DOMAINS
from .inference.creation import RuleCreation
from .inference.unification import Unification
from .schema import DomainSchema


def _print_rules(rules):
    for rule in sorted(rules, key=str):
        print(f"  {rule}")
    print(f"{len(rules)} rule(s)")


def run_unify(args):
    old_facts = parse_conditions(args.old or "")
    new_facts = parse_conditions(args.new or "")
    old_terms = new_terms = None
    if args.old_terms is not None or args.new_terms is not None:
        old_terms = [parse_term(t) for t in (args.old_terms or "").split()]
        new_terms = [parse_term(t) for t in (args.new_terms or "").split()]
    result = Unification().unify_states(old_facts, new_facts, old_terms, new_terms)
    print(f"Result: {result.name} ({int(result)})")
    for fact in old_facts:
        print(f"  {fact}")
    if old_terms is not None:
        print("Terms: " + " ".join(str(t) for t in old_terms))


def run_rule_mode(args, schema):
    if not args.rule:
        raise RelRulesError(f"--rule is required for --mode {args.mode}")
    rule = parse_rule(args.rule)
    creation = RuleCreation(schema)
    print(f"Domain: {schema.name}")
    print(f"Rule:   {rule}")

    if args.mode == "simplify":
        schema.validate_rule(rule)
        conditions = creation.simplify_conditions(rule.conditions, args.illegal)
        if conditions is None:
            print("Illegal: the conditions contradict the background knowledge")
        else:
            print(f"Simplified: {rule.with_conditions(sorted(conditions))}")
    elif args.mode == "specialise":
        _print_rules(creation.specialise_rule(rule))
    else:
        _print_rules(creation.specialise_rule_minor(rule))


def main(argv=None):
    parser = argparse.ArgumentParser(description="Relational rule generalisation and simplification")
    parser.add_argument("--domain", choices=list(DOMAINS.keys()), default="blocks",
                        help="Built-in domain schema to use")
    parser.add_argument("--schema", type=str, default=None, help="Load the schema from a JSON file")
    parser.add_argument("--save-schema", type=str, default=None, help="Save the schema to a JSON file")
    parser.add_argument("--mode", choices=["simplify", "specialise", "minor", "unify"],
                        default="specialise")
    parser.add_argument("--rule", type=str, default=None,
                        help='Rule text, e.g. "(clear ?X) => (moveFloor ?X)"')
    parser.add_argument("--illegal", action="store_true",
                        help="Keep the illegal witness instead of rejecting contradictions")
    parser.add_argument("--old", type=str, default=None, help="Old state facts (unify mode)")
    parser.add_argument("--new", type=str, default=None, help="New state facts (unify mode)")
    parser.add_argument("--old-terms", type=str, default=None, help="Old action terms (unify mode)")
    parser.add_argument("--new-terms", type=str, default=None, help="New action terms (unify mode)")
    parser.add_argument("--verbose", action="store_true", help="Log every rewrite")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.schema:
            schema = DomainSchema.load(args.schema)
        else:
            schema = DOMAINS[args.domain]["make_schema"]()
        if args.save_schema:
            schema.save(args.save_schema)
            print(f"Schema saved to {args.save_schema}")

        if args.mode == "unify":
            run_unify(args)
        elif args.rule or not args.save_schema:
            run_rule_mode(args, schema)
    except RelRulesError as e:
        parser.error(str(e))
    return 0


if __name__ == "__main__":
    sys.exit(main())
