"""
Boolean-algebra simplification of criteria trees.

The simplifier rewrites a tree into a smaller equivalent one by applying a
set of passes repeatedly, because one simplification can unlock another:

- logical grouping: and(a, and(b, c)) => and(a, b, c)
- function grouping: and(from:a, from:b) => from:(a b)
- redundancy removal: or(a) => a, not(not(a)) => a

Passes never mutate their input: every pass builds a new tree, so clones
taken by the splitter can never alias a tree being simplified.
"""

import logging

from filterctl.compiler.ast import CriteriaAST, Leaf, Node, leaf
from filterctl.compiler.canonicalizer import sort_tree
from filterctl.core.config import settings
from filterctl.domain.enums import Function, Operation

logger = logging.getLogger(__name__)


def simplify_criteria(tree: CriteriaAST, max_passes: int | None = None) -> CriteriaAST:
    """
    Apply all the simplifications to a criteria tree until a fixed point.

    Args:
        tree: Criteria tree to simplify
        max_passes: Upper bound on the number of rounds (defaults to
                    settings.simplify_max_passes)

    Returns:
        The simplified tree, in canonical order. If the bound is reached
        before converging, the partially simplified tree is returned.
    """
    if max_passes is None:
        max_passes = settings.simplify_max_passes

    for _ in range(max_passes):
        new_tree = _remove_redundancy(_group_functions(_group_logical(tree)))
        if new_tree == tree:
            break
        tree = new_tree
    else:
        logger.debug("Simplification stopped after %d passes without converging", max_passes)

    # Grouping goes through dictionaries, so sort to make the result
    # independent of the grouping order.
    return sort_tree(tree)


def _group_logical(tree: CriteriaAST) -> CriteriaAST:
    if isinstance(tree, Leaf):
        return tree

    children = [_group_logical(c) for c in tree.children]

    # The not operator does not apply.
    if tree.operation == Operation.NOT:
        return Node(tree.operation, tuple(children))

    # Squash child nodes with my same operation.
    new_children: list[CriteriaAST] = []
    for child in children:
        if isinstance(child, Node) and child.operation == tree.operation:
            new_children.extend(child.children)
        else:
            new_children.append(child)

    return Node(tree.operation, tuple(new_children))


def _group_functions(tree: CriteriaAST) -> CriteriaAST:
    if isinstance(tree, Leaf):
        return tree

    children = [_group_functions(c) for c in tree.children]

    if len(children) <= 1 or tree.operation not in (Operation.AND, Operation.OR):
        return Node(tree.operation, tuple(children))

    # Example: and(foo:x bar:y foo:z) => and(foo:(x z) bar:y)
    new_children: list[CriteriaAST] = []
    functions: dict[Function, list[str]] = {}
    raw_functions: set[Function] = set()
    for child in children:
        if not isinstance(child, Leaf) or (
            len(child.args) > 1 and child.grouping != tree.operation
        ):
            # Leaves grouped by a different operator have to stay as-is.
            new_children.append(child)
            continue
        functions.setdefault(child.function, []).extend(child.args)
        if child.is_raw:
            raw_functions.add(child.function)

    for function, args in functions.items():
        new_children.append(
            leaf(function, *args, grouping=tree.operation, is_raw=function in raw_functions)
        )

    return Node(tree.operation, tuple(new_children))


def _remove_redundancy(tree: CriteriaAST) -> CriteriaAST:
    if isinstance(tree, Leaf):
        return tree

    node = Node(tree.operation, tuple(_remove_redundancy(c) for c in tree.children))

    if node.operation == Operation.NOT:
        return _simplify_not(node)

    # Zero children means the tree is invalid, but at least we don't crash.
    if len(node.children) != 1:
        return node

    # or(a) => a
    return node.children[0]


def _simplify_not(node: Node) -> CriteriaAST:
    if len(node.children) != 1:
        return node

    child = node.children[0]
    if not isinstance(child, Node) or child.operation != Operation.NOT:
        return node
    if len(child.children) != 1:
        return node

    return child.children[0]
