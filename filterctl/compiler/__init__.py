"""
Rule compiler for filterctl.

This package provides deterministic compilation of declarative rules into
native Gmail filters.

Key Components:
- ast: Criteria tree (logical nodes and function leaves)
- parser: Converts configuration filter nodes into criteria trees
- simplifier: Rewrites criteria trees into a minimal equivalent form
- generator: Renders criteria trees in the Gmail search syntax
- splitter: Splits criteria that are too big for Gmail
- compiler: Ties everything together
- importer: Converts native filters and labels back into a configuration
- canonicalizer: Ensures deterministic ordering and JSON output

Design Principles:
- Determinism: Same input produces identical filters, in the same order
- Immutability: Every pass builds new trees instead of mutating its input
- Explicitness: The size limit is a parameter, not a hidden constant
"""

from filterctl.compiler.canonicalizer import canonicalize_json, to_canonical_json_string
from filterctl.compiler.compiler import CompiledConfig, compile_config, compile_rule, compile_rules
from filterctl.compiler.generator import generate_criteria
from filterctl.compiler.importer import import_config
from filterctl.compiler.parser import ParsedRule, parse_criteria, parse_rules
from filterctl.compiler.simplifier import simplify_criteria

__all__ = [
    "CompiledConfig",
    "ParsedRule",
    "canonicalize_json",
    "compile_config",
    "compile_rule",
    "compile_rules",
    "generate_criteria",
    "import_config",
    "parse_criteria",
    "parse_rules",
    "simplify_criteria",
    "to_canonical_json_string",
]
