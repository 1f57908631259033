"""
Interpreter of criteria trees, used to validate rules against sample messages.
"""

from filterctl.evaluator.builder import new_evaluator
from filterctl.evaluator.runner import (
    FailedTest,
    TestResult,
    TestRules,
    merge_actions,
    new_test_rules,
)

__all__ = [
    "FailedTest",
    "TestResult",
    "TestRules",
    "merge_actions",
    "new_evaluator",
    "new_test_rules",
]
