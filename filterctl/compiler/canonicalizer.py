"""
Canonicalization for deterministic output.

Ensures that two semantically equal criteria trees serialize to
byte-for-byte identical strings.

This is CRITICAL for:
- Stable generated filter order after simplification
- Reproducible diagnostics and test fixtures
"""

import json
from typing import Any

from filterctl.compiler.ast import CriteriaAST, Leaf, Node, tree_to_dict


def sort_tree(tree: CriteriaAST) -> CriteriaAST:
    """
    Return a copy of the tree with children in canonical order.

    The ordering is, recursively:
    - leaves first, in (grouping, function) order
    - then nodes, in operation order

    The sort is stable, so siblings comparing equal keep their relative
    order.
    """
    if isinstance(tree, Leaf):
        return tree
    children = sorted((sort_tree(c) for c in tree.children), key=_sort_key)
    return Node(tree.operation, tuple(children))


def _sort_key(tree: CriteriaAST) -> tuple[int, int, int]:
    if isinstance(tree, Leaf):
        return (0, int(tree.grouping), int(tree.function))
    return (1, int(tree.operation), 0)


def canonicalize_json(obj: Any) -> dict | list | Any:
    """
    Produce a deterministic, canonical representation of a JSON object.

    All dictionary keys are sorted alphabetically and nested structures are
    recursively canonicalized. Lists preserve their order.

    Example:
        >>> canonicalize_json({"z": 1, "a": {"c": 2, "b": 3}})
        {'a': {'b': 3, 'c': 2}, 'z': 1}
    """
    if isinstance(obj, dict):
        return {k: canonicalize_json(v) for k, v in sorted(obj.items())}

    elif isinstance(obj, (list, tuple)):
        return [canonicalize_json(item) for item in obj]

    else:
        return obj


def to_canonical_json_string(obj: Any) -> str:
    """
    Convert an object to a canonical JSON string.

    Criteria trees are sorted and converted to dictionaries first.

    Example:
        >>> to_canonical_json_string({"version": 7, "from": "a"})
        '{"from":"a","version":7}'
    """
    if isinstance(obj, (Node, Leaf)):
        obj = tree_to_dict(sort_tree(obj))
    canonical = canonicalize_json(obj)

    # separators=(',', ':') removes spaces after commas and colons
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

