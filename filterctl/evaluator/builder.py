"""
Construction of evaluators from criteria trees.
"""

from filterctl.compiler.ast import CriteriaAST, Leaf
from filterctl.core.errors import UnsupportedCriteriaError
from filterctl.domain.enums import Function, MatchField, MatchType, Operation
from filterctl.evaluator.nodes import (
    AndNode,
    FuncNode,
    NotNode,
    OrNode,
    RuleEvaluator,
    normalize_field,
)

_EMAIL_FIELDS = {
    Function.FROM: MatchField.FROM,
    Function.CC: MatchField.CC,
    Function.BCC: MatchField.BCC,
    Function.REPLY_TO: MatchField.REPLY_TO,
    Function.LIST: MatchField.LISTS,
}


def new_evaluator(tree: CriteriaAST) -> RuleEvaluator:
    """
    Build an evaluator from a criteria tree.

    Raises:
        UnsupportedCriteriaError: If the tree contains raw or unconstrained
                                  queries, which cannot be interpreted
    """
    if isinstance(tree, Leaf):
        return _leaf_evaluator(tree)

    children = [new_evaluator(c) for c in tree.children]

    if tree.operation == Operation.AND:
        return AndNode(tuple(children))
    if tree.operation == Operation.OR:
        return OrNode(tuple(children))
    if tree.operation == Operation.NOT:
        if len(children) != 1:
            raise UnsupportedCriteriaError(
                f"unexpected children size for 'not' node: {len(children)}",
                details={"children": len(children)},
            )
        return NotNode(children[0])

    raise UnsupportedCriteriaError(f"unsupported operation {tree.operation}")


def _leaf_evaluator(leaf: Leaf) -> RuleEvaluator:
    if leaf.is_raw:
        raise UnsupportedCriteriaError(
            f"unsupported 'raw query': {leaf.function}:{' '.join(leaf.args)}",
            details={"function": str(leaf.function), "args": list(leaf.args)},
        )

    if leaf.function in _EMAIL_FIELDS:
        field = _EMAIL_FIELDS[leaf.function]
        rules = [email_field(field, a) for a in leaf.args]
    elif leaf.function == Function.TO:
        rules = [expand_to(a) for a in leaf.args]
    elif leaf.function == Function.SUBJECT:
        rules = [free_text_field(MatchField.SUBJECT, a) for a in leaf.args]
    elif leaf.function == Function.HAS:
        rules = [expand_has(a) for a in leaf.args]
    elif leaf.function == Function.QUERY:
        raise UnsupportedCriteriaError(
            f"unsupported unconstrained query: '{' '.join(leaf.args)}'",
            details={"args": list(leaf.args)},
        )
    else:
        raise UnsupportedCriteriaError(f"unsupported function: {leaf.function}")

    return group(leaf.grouping, rules)


def expand_to(arg: str) -> RuleEvaluator:
    """In Gmail, 'to' is a shortcut for (to OR cc OR bcc OR list)."""
    return OrNode(
        (
            email_field(MatchField.TO, arg),
            email_field(MatchField.CC, arg),
            email_field(MatchField.BCC, arg),
            email_field(MatchField.LISTS, arg),
        )
    )


def expand_has(arg: str) -> RuleEvaluator:
    """The 'has' operator matches the argument in any field."""
    return OrNode(
        (
            expand_to(arg),
            email_field(MatchField.FROM, arg),
            free_text_field(MatchField.SUBJECT, arg),
            free_text_field(MatchField.BODY, arg),
        )
    )


def email_field(field: MatchField, arg: str) -> FuncNode:
    expected = normalize_field(arg)
    # Asking for *@gmail.com or @gmail.com is the same and means match the
    # suffix.
    if expected.startswith("*"):
        return FuncNode(field, expected[1:], MatchType.SUFFIX)
    if expected.startswith("."):
        return FuncNode(field, expected, MatchType.SUFFIX)
    return FuncNode(field, expected, MatchType.EXACT)


def free_text_field(field: MatchField, arg: str) -> FuncNode:
    return FuncNode(field, normalize_field(arg), MatchType.CONTAINS)


def group(operation: Operation, rules: list[RuleEvaluator]) -> RuleEvaluator:
    """Group evaluators together with an operation."""
    if not rules:
        raise UnsupportedCriteriaError("empty children, cannot group")
    if operation != Operation.NOT and len(rules) == 1:
        return rules[0]

    if operation == Operation.AND:
        return AndNode(tuple(rules))
    if operation == Operation.OR:
        return OrNode(tuple(rules))
    if operation == Operation.NOT:
        if len(rules) != 1:
            raise UnsupportedCriteriaError(
                f"unexpected children size for 'not' node: {len(rules)}"
            )
        return NotNode(rules[0])

    raise UnsupportedCriteriaError(f"unsupported operation {operation}")
