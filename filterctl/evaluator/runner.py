"""
Execution of configuration tests.

A test is a set of sample messages with the actions the rules are expected
to apply to each of them. The actions of all the matching rules are merged,
as Gmail applies every matching filter.
"""

import logging
from dataclasses import dataclass, field

from filterctl.compiler.canonicalizer import to_canonical_json_string
from filterctl.compiler.parser import ParsedRule
from filterctl.core.config import settings
from filterctl.core.errors import (
    ActionConflictError,
    FilterCtlError,
    UnsupportedCriteriaError,
    combine_errors,
)
from filterctl.core.reporting import prettify, unified_diff
from filterctl.evaluator.builder import new_evaluator
from filterctl.evaluator.nodes import RuleEvaluator
from filterctl.schemas.config import Actions, Message, Test

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestRule:
    """A rule able to evaluate whether messages apply to it."""

    __test__ = False

    evaluator: RuleEvaluator
    actions: Actions


@dataclass
class FailedTest:
    """All the errors of a failed test."""

    __test__ = False

    id: int
    name: str
    errors: list[Exception]

    def __str__(self) -> str:
        name = self.name or f"#{self.id}"
        return f'\nFailed test "{name}":\n{combine_errors(*self.errors)}\n'


@dataclass
class TestResult:
    """Result of a series of tests."""

    __test__ = False

    ok: bool
    num_tests: int
    failed: list[FailedTest] = field(default_factory=list)

    def __str__(self) -> str:
        if self.ok:
            return f"Success: {self.num_tests}/{self.num_tests}"
        return f"Failed: {len(self.failed)}/{self.num_tests}\n" + "".join(
            str(t) for t in self.failed
        )


def new_test_rules(rules: list[ParsedRule]) -> tuple["TestRules", list[Exception]]:
    """
    Translate parsed rules into test rules.

    Best effort: rules that cannot be evaluated are skipped, and an error is
    returned in their place.

    Returns:
        Tuple of (the valid rules, one error per skipped rule)
    """
    res: list[TestRule] = []
    errors: list[Exception] = []

    for i, rule in enumerate(rules):
        try:
            evaluator = new_evaluator(rule.criteria)
        except UnsupportedCriteriaError as e:
            errors.append(
                UnsupportedCriteriaError(
                    f"cannot evaluate criteria #{i}: {e.message}",
                    details={
                        "rule_index": i,
                        "criteria": to_canonical_json_string(rule.criteria),
                        **e.details,
                    },
                )
            )
            continue
        res.append(TestRule(evaluator=evaluator, actions=rule.actions))

    if errors:
        logger.debug("Skipped %d rules that cannot be evaluated", len(errors))
    return TestRules(res), errors


class TestRules:
    """A set of rules that can be run against tests."""

    __test__ = False

    def __init__(self, rules: list[TestRule]):
        self.rules = list(rules)

    def __len__(self) -> int:
        return len(self.rules)

    def exec_tests(self, tests: list[Test]) -> TestResult:
        """Evaluate all the rules against the given tests."""
        failed = []
        for i, test in enumerate(tests):
            errors = self.exec_test(test)
            if errors:
                failed.append(FailedTest(id=i, name=test.name, errors=errors))

        logger.info("Executed %d tests, %d failed", len(tests), len(failed))
        return TestResult(ok=not failed, num_tests=len(tests), failed=failed)

    def exec_test(self, test: Test) -> list[Exception]:
        """
        Evaluate the rules on all the messages of a test.

        Returns:
            One error per message not getting the expected actions
        """
        errors: list[Exception] = []

        for i, message in enumerate(test.messages):
            details = {"message_index": i, "message": _message_dict(message)}
            try:
                got = self.matching_actions(message)
            except ActionConflictError as e:
                errors.append(
                    FilterCtlError(
                        f"message #{i}: error evaluating matching filters: {e.message}\n"
                        f"Message: {prettify(details['message'])}",
                        details=details,
                    )
                )
                continue

            if actions_equal(got, test.actions):
                continue

            diff = unified_diff(
                prettify(_actions_dict(test.actions)).splitlines(keepends=True),
                prettify(_actions_dict(got)).splitlines(keepends=True),
                fromfile="want",
                tofile="got",
                context=settings.test_diff_context_lines,
            )
            errors.append(
                FilterCtlError(
                    f"message #{i} is going to get unexpected actions: "
                    f"{prettify(_actions_dict(got)).strip()}\n"
                    f"Message: {prettify(details['message'])}"
                    f"Actions:\n{diff.rstrip()}",
                    details={**details, "actions_diff": diff},
                )
            )

        return errors

    def matching_actions(self, message: Message) -> Actions:
        """
        Return the actions the rules would apply to the given message.

        Gmail would apply a nondeterministic action in case of conflicts, but
        that is most likely a mistake in the configuration.

        Raises:
            ActionConflictError: If incompatible actions would be applied
        """
        res = Actions()
        for rule in self.rules:
            if rule.evaluator.match(message):
                try:
                    res = merge_actions(res, rule.actions)
                except ActionConflictError as e:
                    raise ActionConflictError(
                        f"conflicting filters detected: {e.message}", details=e.details
                    ) from e
        return res


def merge_actions(a1: Actions, a2: Actions) -> Actions:
    """
    Merge the actions of two rules matching the same message.

    Raises:
        ActionConflictError: If the two actions disagree
    """
    return Actions(
        archive=a1.archive or a2.archive,
        delete=a1.delete or a2.delete,
        mark_read=a1.mark_read or a2.mark_read,
        star=a1.star or a2.star,
        mark_spam=_merge_value("markSpam", a1.mark_spam, a2.mark_spam),
        mark_important=_merge_value("markImportant", a1.mark_important, a2.mark_important),
        category=_merge_value("category", a1.category, a2.category),
        labels=sorted({*a1.labels, *a2.labels}),
        forward=_merge_value("forward", a1.forward or None, a2.forward or None) or "",
    )


def actions_equal(a1: Actions, a2: Actions) -> bool:
    """Compare two actions, with labels compared as sets."""
    return a1.model_copy(update={"labels": sorted(set(a1.labels))}) == a2.model_copy(
        update={"labels": sorted(set(a2.labels))}
    )


def _merge_value(name: str, v1, v2):
    if v1 is None:
        return v2
    if v2 is None:
        return v1
    if v1 != v2:
        raise ActionConflictError(
            f"'{name}' is applied differently: got {_display(v1)} and {_display(v2)}",
            details={"action": name},
        )
    return v1


def _display(value) -> str:
    return getattr(value, "value", str(value))


def _actions_dict(actions: Actions) -> dict:
    return actions.model_dump(mode="json", by_alias=True, exclude_defaults=True)


def _message_dict(message: Message) -> dict:
    return message.model_dump(by_alias=True, exclude_defaults=True)
