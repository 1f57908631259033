"""
Conversion of native filters and labels back into a declarative configuration.

This is the inverse of the compiler, best effort quality: every native filter
becomes one rule, and values that Gmail already escaped are marked with
``isEscaped`` so that compiling the result again does not escape them twice.
"""

import logging

from filterctl.core.errors import CompilationError, FilterCtlError, combine_errors
from filterctl.filters.models import Actions as FilterActions
from filterctl.filters.models import Criteria, Filter
from filterctl.labels.models import Label
from filterctl.schemas.config import (
    Actions,
    Author,
    Config,
    FilterNode,
    LabelColor,
    LabelConfig,
    Rule,
)

logger = logging.getLogger(__name__)

IMPORTED_AUTHOR = Author(name="YOUR NAME HERE (auto imported)", email="your-email@gmail.com")


def import_config(filters: list[Filter], labels: list[Label]) -> Config:
    """
    Convert native filters and labels into a configuration.

    Errors are collected across all the filters.

    Raises:
        CompilationError: If a single filter cannot be converted
        MultiError: If several filters cannot be converted
    """
    rules: list[Rule] = []
    errors: list[Exception] = []

    for i, f in enumerate(filters):
        try:
            rules.append(rule_from_filter(f))
        except FilterCtlError as e:
            errors.append(
                CompilationError(
                    f"importing filter #{i}: {e.message}",
                    details={"filter_index": i, "filter_id": f.id, **e.details},
                )
            )

    err = combine_errors(*errors)
    if err is not None:
        raise err

    logger.info("Imported %d filters and %d labels", len(rules), len(labels))

    return Config(
        author=IMPORTED_AUTHOR,
        labels=[label_from_native(label) for label in labels],
        rules=rules,
    )


def label_from_native(label: Label) -> LabelConfig:
    color = None
    if label.color is not None:
        color = LabelColor(background=label.color.background, text=label.color.text)
    return LabelConfig(name=label.name, color=color)


def rule_from_filter(f: Filter) -> Rule:
    return Rule(filter=filter_from_criteria(f.criteria), actions=actions_from_native(f.action))


def filter_from_criteria(criteria: Criteria) -> FilterNode:
    """
    Convert native criteria into a filter node.

    Raises:
        CompilationError: If the criteria are empty
    """
    nodes: list[FilterNode] = []
    if criteria.from_:
        nodes.append(FilterNode(from_=criteria.from_, is_escaped=needs_escape(criteria.from_)))
    if criteria.to:
        nodes.append(FilterNode(to=criteria.to, is_escaped=needs_escape(criteria.to)))
    if criteria.subject:
        nodes.append(
            FilterNode(subject=criteria.subject, is_escaped=needs_escape(criteria.subject))
        )
    # Queries are always taken verbatim.
    if criteria.query:
        nodes.append(FilterNode(query=criteria.query))

    if not nodes:
        raise CompilationError("empty criteria")
    if len(nodes) == 1:
        return nodes[0]
    return FilterNode(and_=nodes)


def needs_escape(value: str) -> bool:
    """
    Return True if a criteria value holds characters that the compiler would
    escape, i.e. the value was already escaped by Gmail and must be kept raw.
    """
    return any(c in value for c in " '\"")


def actions_from_native(actions: FilterActions) -> Actions:
    """
    Convert native filter actions into rule actions.

    Raises:
        CompilationError: If the filter both marks and never marks as important
    """
    if actions.mark_important and actions.mark_not_important:
        raise CompilationError(
            "in 'mark important': cannot be both true and false",
            details={"action": "markImportant"},
        )

    mark_important = None
    if actions.mark_important or actions.mark_not_important:
        mark_important = actions.mark_important

    return Actions(
        archive=actions.archive,
        delete=actions.delete,
        mark_read=actions.mark_read,
        star=actions.star,
        mark_spam=False if actions.mark_not_spam else None,
        mark_important=mark_important,
        category=actions.category,
        labels=[actions.add_label] if actions.add_label else [],
        forward=actions.forward,
    )
