"""
Evaluators matching sample messages against criteria.

The matching emulates the Gmail search semantics closely enough to validate
filters with tests: the comparison is case insensitive and '@' is the same
as '.'.
"""

from dataclasses import dataclass
from typing import Protocol

from filterctl.domain.enums import MatchField, MatchType
from filterctl.schemas.config import Message


class RuleEvaluator(Protocol):
    """A criteria able to evaluate whether a message matches its definition."""

    def match(self, message: Message) -> bool: ...


@dataclass(frozen=True)
class AndNode:
    children: tuple[RuleEvaluator, ...]

    def match(self, message: Message) -> bool:
        return all(c.match(message) for c in self.children)


@dataclass(frozen=True)
class OrNode:
    children: tuple[RuleEvaluator, ...]

    def match(self, message: Message) -> bool:
        return any(c.match(message) for c in self.children)


@dataclass(frozen=True)
class NotNode:
    child: RuleEvaluator

    def match(self, message: Message) -> bool:
        return not self.child.match(message)


@dataclass(frozen=True)
class FuncNode:
    """Test of a single message field against a normalized operand."""

    field: MatchField
    expected: str
    match_type: MatchType

    def match(self, message: Message) -> bool:
        for value in field_values(message, self.field):
            normalized = normalize_field(value)
            if self.match_type == MatchType.EXACT and normalized == self.expected:
                return True
            if self.match_type == MatchType.SUFFIX and normalized.endswith(self.expected):
                return True
            if self.match_type == MatchType.CONTAINS and self.expected in normalized:
                return True
        return False


def field_values(message: Message, field: MatchField) -> list[str]:
    """Return the values of a message field, as a list."""
    if field == MatchField.FROM:
        return [message.from_]
    if field == MatchField.TO:
        return message.to
    if field == MatchField.CC:
        return message.cc
    if field == MatchField.BCC:
        return message.bcc
    if field == MatchField.REPLY_TO:
        return message.replyto
    if field == MatchField.LISTS:
        return message.lists
    if field == MatchField.SUBJECT:
        return [message.subject]
    return [message.body]


def normalize_field(value: str) -> str:
    """Emulate the Gmail normalization: '@' and '.' are the same, no case."""
    return value.replace("@", ".").lower()
