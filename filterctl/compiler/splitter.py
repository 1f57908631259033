"""
Size-limited splitting of criteria trees.

Gmail silently ignores filters above an undocumented size. Trees are split in
smaller, independent trees sharing the same actions: this is always legal for
a disjunction, because all the matching filters are applied.
"""

from filterctl.compiler.ast import CriteriaAST, Leaf, Node, count_nodes, leaf
from filterctl.domain.enums import Operation


def split_criteria(tree: CriteriaAST, limit: int) -> list[CriteriaAST]:
    """
    Split a criteria tree in trees within the size limit, where possible.

    Trees that cannot be split are returned whole, even if over the limit.
    """
    res: list[CriteriaAST] = []
    for c in split_root_or(tree):
        res.extend(split_big_criteria(c, limit))
    return res


def split_root_or(tree: CriteriaAST) -> list[CriteriaAST]:
    """
    Split a root OR node in one tree per child.

    Example: or(from:a to:b) => [from:a, to:b]
    """
    if isinstance(tree, Node) and tree.operation == Operation.OR:
        return list(tree.children)
    return [tree]


def split_big_criteria(tree: CriteriaAST, limit: int) -> list[CriteriaAST]:
    if count_nodes(tree) < limit:
        return [tree]
    if tree.root_operation == Operation.OR:
        return _split_chunks(tree, limit)
    if tree.root_operation == Operation.AND:
        # ({a b c} d) => ({a b} d), (c d)
        return split_nested_and(tree, limit)
    return [tree]


def split_nested_and(root: CriteriaAST, limit: int) -> list[CriteriaAST]:
    """
    Split the biggest OR-rooted child of an AND node.

    Every chunk of the child is combined with a clone of its siblings.
    """
    if not isinstance(root, Node):
        # A single function grouped by AND, nothing to do.
        return [root]

    max_size = 0
    child_id = -1
    for i, child in enumerate(root.children):
        size = count_nodes(child)
        if size > max_size and child.root_operation == Operation.OR:
            child_id = i
            max_size = size
    if child_id < 0:
        return [root]

    # Respect the limit for each new filter if possible, otherwise split the
    # biggest child completely.
    new_limit = max(1, limit - (count_nodes(root) - max_size))
    chunks = _split_chunks(root.children[child_id], new_limit)

    siblings = [c for i, c in enumerate(root.children) if i != child_id]
    return [
        Node(Operation.AND, (chunk, *(s.clone() for s in siblings))) for chunk in chunks
    ]


def _split_chunks(tree: CriteriaAST, limit: int) -> list[CriteriaAST]:
    if isinstance(tree, Leaf):
        return [
            leaf(
                tree.function,
                *tree.args[i : i + limit],
                grouping=tree.grouping,
                is_raw=tree.is_raw,
            )
            for i in range(0, len(tree.args), limit)
        ]
    return [
        Node(tree.operation, tree.children[i : i + limit])
        for i in range(0, len(tree.children), limit)
    ]
