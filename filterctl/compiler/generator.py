"""
Generation of native filter criteria from simplified criteria trees.

A single from/to/subject leaf lands in the matching criteria field; every
other leaf and every logical combination is rendered in the free-text query
using the Gmail search syntax:

- OR groups render as {a b c}
- AND groups render as (a b c)
- NOT renders as -a
- function leaves render as function:value
"""

from filterctl.compiler.ast import CriteriaAST, Leaf, Node
from filterctl.core.errors import CompilationError
from filterctl.domain.enums import Function, Operation
from filterctl.filters.models import Criteria

# Leaves rendered as "function:value" in the query of a criteria.
_QUERY_PREFIXED = frozenset({Function.CC, Function.BCC, Function.REPLY_TO, Function.LIST})


def generate_criteria(tree: CriteriaAST) -> Criteria:
    """
    Translate a criteria tree into native filter criteria.

    Raises:
        CompilationError: If the tree is malformed or produces empty criteria
    """
    criteria = _generate(tree)
    if criteria.is_empty():
        raise CompilationError("criteria produced an empty filter")
    return criteria


def _generate(tree: CriteriaAST) -> Criteria:
    if isinstance(tree, Leaf):
        return _generate_leaf(tree)
    return _generate_node(tree)


def _generate_node(node: Node) -> Criteria:
    if not node.children:
        raise CompilationError(
            f"'{node.operation}' node without children",
            details={"operation": str(node.operation)},
        )

    if node.operation == Operation.OR:
        query = ""
        for child in node.children:
            query = join_queries(query, _generate_as_string(child))
        return Criteria(query=f"{{{query}}}")

    if node.operation == Operation.AND:
        res = Criteria()
        for child in node.children:
            res = join_criteria(res, _generate(child))
        return res

    if node.operation == Operation.NOT:
        if len(node.children) != 1:
            raise CompilationError(
                f"after 'not' got {len(node.children)} children, expected 1",
                details={"children": len(node.children)},
            )
        return Criteria(query=f"-{_generate_as_string(node.children[0])}")

    raise CompilationError(f"unknown node operation {node.operation!r}")


def _generate_leaf(leaf: Leaf) -> Criteria:
    query = _leaf_operand(leaf)

    if leaf.function == Function.FROM:
        return Criteria(from_=query)
    if leaf.function == Function.TO:
        return Criteria(to=query)
    if leaf.function == Function.SUBJECT:
        return Criteria(subject=query)
    if leaf.function in _QUERY_PREFIXED:
        return Criteria(query=f"{leaf.function}:{query}")
    if leaf.function in (Function.HAS, Function.QUERY):
        return Criteria(query=query)

    raise CompilationError(f"unknown function type {leaf.function!r}")


def _generate_as_string(tree: CriteriaAST) -> str:
    if isinstance(tree, Leaf):
        query = _leaf_operand(tree)
        if tree.function in (Function.HAS, Function.QUERY):
            return query
        return f"{tree.function}:{query}"

    if not tree.children:
        raise CompilationError(
            f"'{tree.operation}' node without children",
            details={"operation": str(tree.operation)},
        )
    query = ""
    for child in tree.children:
        query = join_queries(query, _generate_as_string(child))
    return group_with_operation(query, tree.operation)


def _leaf_operand(leaf: Leaf) -> str:
    need_escape = leaf.function != Function.QUERY and not leaf.is_raw
    if need_escape:
        query = " ".join(quote(a) for a in leaf.args)
    else:
        query = " ".join(leaf.args)

    if len(leaf.args) > 1:
        query = group_with_operation(query, leaf.grouping)
    return query


def group_with_operation(query: str, operation: Operation) -> str:
    if operation == Operation.OR:
        return f"{{{query}}}"
    if operation == Operation.AND:
        return f"({query})"
    if operation == Operation.NOT:
        return f"-{query}"
    raise CompilationError(f"unknown node operation {operation!r}")


def join_criteria(c1: Criteria, c2: Criteria) -> Criteria:
    return Criteria(
        from_=join_queries(c1.from_, c2.from_),
        to=join_queries(c1.to, c2.to),
        subject=join_queries(c1.subject, c2.subject),
        query=join_queries(c1.query, c2.query),
    )


def join_queries(q1: str, q2: str) -> str:
    # Queries are either logical operations or functions, already escaped.
    if not q1:
        return q2
    if not q2:
        return q1
    return f"{q1} {q2}"


def quote(operand: str) -> str:
    """
    Quote an operand for the Gmail search syntax, if needed.

    Example:
        >>> quote("with spaces")
        '"with spaces"'
        >>> quote("foo+bar@gmail.com")
        'foo+bar@gmail.com'
    """
    if any(c in operand for c in " \t{}()"):
        return f'"{operand}"'
    # "foo+bar" means "foo OR bar", but "foo+bar@gmail.com" is an address.
    if "+" in operand and "@" not in operand:
        return f'"{operand}"'
    return operand
