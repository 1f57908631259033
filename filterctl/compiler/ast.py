"""
Criteria abstract syntax tree.

A criteria tree has two kinds of nodes:

- ``Node``: a logical operation (AND, OR, NOT) over child trees
- ``Leaf``: a field matcher (from, to, subject, ...) over one or more
  arguments

If a leaf has multiple arguments they are grouped together with a logical
operator: ``from:{a b}`` has two arguments grouped with an OR and
``from:(a b)`` is grouped with an AND. A leaf with a single argument has no
grouping.

Trees are immutable. Every consumer (simplifier, generator, splitter,
evaluator) dispatches on the two node types with ``isinstance``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from filterctl.domain.enums import Function, Operation


@dataclass(frozen=True)
class Node:
    """AST node with children nodes. It can only be a logical operator."""

    operation: Operation
    children: tuple[CriteriaAST, ...] = ()

    @property
    def root_operation(self) -> Operation:
        return self.operation

    @property
    def root_function(self) -> Function:
        return Function.NONE

    @property
    def is_leaf(self) -> bool:
        return False

    def clone(self) -> Node:
        """Return a deep copy of the tree."""
        return Node(self.operation, tuple(c.clone() for c in self.children))


@dataclass(frozen=True)
class Leaf:
    """AST node with no children."""

    function: Function
    args: tuple[str, ...] = field(default_factory=tuple)
    grouping: Operation = Operation.NONE
    is_raw: bool = False

    @property
    def root_operation(self) -> Operation:
        """The grouping of the leaf."""
        return self.grouping

    @property
    def root_function(self) -> Function:
        return self.function

    @property
    def is_leaf(self) -> bool:
        return True

    def clone(self) -> Leaf:
        return Leaf(self.function, tuple(self.args), self.grouping, self.is_raw)


CriteriaAST = Node | Leaf


def and_(*children: CriteriaAST) -> Node:
    return Node(Operation.AND, tuple(children))


def or_(*children: CriteriaAST) -> Node:
    return Node(Operation.OR, tuple(children))


def not_(child: CriteriaAST) -> Node:
    return Node(Operation.NOT, (child,))


def leaf(
    function: Function,
    *args: str,
    grouping: Operation | None = None,
    is_raw: bool = False,
) -> Leaf:
    """
    Build a leaf, defaulting the grouping from the number of arguments.

    A single argument always gets ``Operation.NONE``; several arguments are
    grouped with OR unless a grouping is given.
    """
    if len(args) <= 1:
        grouping = Operation.NONE
    elif grouping is None or grouping == Operation.NONE:
        grouping = Operation.OR
    return Leaf(function, tuple(args), grouping, is_raw)


def count_nodes(tree: CriteriaAST) -> int:
    """
    Estimate the size of a tree.

    Each leaf argument and each logical node count as one unit. For raw
    leaves the number is imprecise, as a single argument may contain several
    operands.
    """
    if isinstance(tree, Leaf):
        return len(tree.args)
    return 1 + sum(count_nodes(c) for c in tree.children)


def tree_to_dict(tree: CriteriaAST) -> dict:
    """Return a JSON-friendly representation of a tree."""
    if isinstance(tree, Leaf):
        return {
            "function": str(tree.function),
            "grouping": str(tree.grouping),
            "args": list(tree.args),
            "isRaw": tree.is_raw,
        }
    return {
        "operation": str(tree.operation),
        "children": [tree_to_dict(c) for c in tree.children],
    }
