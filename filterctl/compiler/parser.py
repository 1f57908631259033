"""
Parsing of declarative filter nodes into criteria trees.

Checks that every filter node is structurally valid:
- Exactly one operator, function or named filter reference per node
- 'isEscaped' only combined with the fields that support it
- Named filter references resolve to a filter declared before them

and converts it into a simplified criteria tree. Errors are reported with the
JSONPath of the offending node, and collected across rules so a single run
reports every broken rule.
"""

import logging
from dataclasses import dataclass

from filterctl.compiler.ast import CriteriaAST, Node, leaf
from filterctl.compiler.simplifier import simplify_criteria
from filterctl.core.errors import ConfigError, combine_errors
from filterctl.domain.enums import Function, Operation
from filterctl.schemas.config import Actions, Config, FilterNode, NamedFilter

logger = logging.getLogger(__name__)

FUNCTIONS_BY_KEY = {
    "from": Function.FROM,
    "to": Function.TO,
    "cc": Function.CC,
    "bcc": Function.BCC,
    "replyto": Function.REPLY_TO,
    "subject": Function.SUBJECT,
    "list": Function.LIST,
    "has": Function.HAS,
    "query": Function.QUERY,
}

OPERATIONS_BY_KEY = {
    "and": Operation.AND,
    "or": Operation.OR,
    "not": Operation.NOT,
}

# Fields where the user is allowed to disable escaping.
ESCAPABLE_KEYS = frozenset({"from", "to", "subject"})


@dataclass(frozen=True)
class ParsedRule:
    """A rule with its criteria parsed and simplified."""

    criteria: CriteriaAST
    actions: Actions


def parse_rules(config: Config) -> list[ParsedRule]:
    """
    Parse and simplify all the rules of a configuration.

    Named filters are resolved first, in declaration order.

    Raises:
        ConfigError: If a single node is invalid
        MultiError: If several rules or named filters are invalid
    """
    named, named_err = parse_named_filters(config.filters)

    res: list[ParsedRule] = []
    errors: list[Exception] = []
    for i, rule in enumerate(config.rules):
        try:
            criteria = parse_criteria(rule.filter, named, path=f"$.rules[{i}].filter")
        except ConfigError as e:
            errors.append(
                ConfigError(
                    f"error parsing criteria for rule #{i}: {e.message}",
                    details={"rule_index": i, **e.details},
                )
            )
            continue
        res.append(ParsedRule(criteria=simplify_criteria(criteria), actions=rule.actions))

    err = combine_errors(named_err, *errors)
    if err is not None:
        raise err

    logger.debug("Parsed %d rules and %d named filters", len(res), len(named))
    return res


def parse_named_filters(
    filters: list[NamedFilter],
) -> tuple[dict[str, CriteriaAST], Exception | None]:
    """
    Parse the named filters of a configuration.

    A named filter can reference the ones declared before it.

    Returns:
        Tuple of (parsed filters by name, combined error or None)
    """
    res: dict[str, CriteriaAST] = {}
    errors: list[Exception] = []

    for i, named in enumerate(filters):
        path = f"$.filters[{i}]"
        if not named.name:
            errors.append(
                ConfigError(f"named filter #{i} has an empty name", details={"path": path})
            )
            continue
        if named.name in res:
            errors.append(
                ConfigError(
                    f"named filter '{named.name}' declared more than once",
                    details={"path": path, "name": named.name},
                )
            )
            continue
        try:
            res[named.name] = parse_criteria(named.filter, res, path=f"{path}.filter")
        except ConfigError as e:
            errors.append(
                ConfigError(
                    f"error parsing named filter '{named.name}': {e.message}",
                    details={"name": named.name, **e.details},
                )
            )

    return res, combine_errors(*errors)


def parse_criteria(
    node: FilterNode, named: dict[str, CriteriaAST] | None = None, path: str = "$"
) -> CriteriaAST:
    """
    Convert a filter node into a criteria tree.

    Args:
        node: Filter node to convert
        named: Already parsed named filters, by name
        path: JSONPath to the node (for error reporting)

    Raises:
        ConfigError: If the node or one of its descendants is invalid
    """
    key = _check_syntax(node, path)

    if key == "name":
        if named is None or node.name not in named:
            raise ConfigError(
                f"unresolved filter reference '{node.name}' at {path}",
                details={"path": path, "name": node.name},
            )
        return named[node.name].clone()

    if key in ("and", "or"):
        children = tuple(
            parse_criteria(child, named, path=f"{path}.{key}[{i}]")
            for i, child in enumerate(node.value_of(key))
        )
        return Node(OPERATIONS_BY_KEY[key], children)

    if key == "not":
        child = parse_criteria(node.not_, named, path=f"{path}.not")
        return Node(Operation.NOT, (child,))

    return leaf(FUNCTIONS_BY_KEY[key], node.value_of(key), is_raw=node.is_escaped)


def _check_syntax(node: FilterNode, path: str) -> str:
    """
    Validate the shape of a single filter node.

    Returns:
        The configuration name of the only field specified in the node
    """
    fields = node.non_empty_fields()

    if not fields:
        raise ConfigError(f"empty filter node at {path}", details={"path": path})
    if len(fields) > 1:
        raise ConfigError(
            f"multiple fields specified in the same filter node at {path}: {', '.join(fields)}",
            details={"path": path, "fields": fields},
        )

    key = fields[0]
    if node.is_escaped and key not in ESCAPABLE_KEYS:
        raise ConfigError(
            f"'isEscaped' specified for operation '{key}' at {path}, "
            "only allowed with 'from', 'to' or 'subject'",
            details={"path": path, "field": key},
        )

    return key
