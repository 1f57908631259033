"""
Domain enums shared by the compiler, the test evaluator and the diff engine.

Operation and Function are integer enums because their numeric order defines
the canonical ordering of criteria trees.
"""

from enum import Enum, IntEnum


class Operation(IntEnum):
    """Logical operation of a criteria node, or the grouping of a leaf."""

    NONE = 0
    AND = 1
    OR = 2
    NOT = 3

    def __str__(self) -> str:
        return self.name.lower()


class Function(IntEnum):
    """
    Field matcher carried by a criteria leaf.

    The string form is the prefix used in the native search syntax
    (e.g. ``cc:foo``).
    """

    NONE = 0
    FROM = 1
    TO = 2
    CC = 3
    BCC = 4
    REPLY_TO = 5
    SUBJECT = 6
    LIST = 7
    HAS = 8
    QUERY = 9

    def __str__(self) -> str:
        return self.name.lower().replace("_", "")


class Category(str, Enum):
    """Smart categories supported by Gmail."""

    PERSONAL = "personal"
    SOCIAL = "social"
    UPDATES = "updates"
    FORUMS = "forums"
    PROMOTIONS = "promotions"


class MatchField(str, Enum):
    """Message field inspected by a test evaluator."""

    FROM = "from"
    TO = "to"
    CC = "cc"
    BCC = "bcc"
    REPLY_TO = "replyto"
    LISTS = "lists"
    SUBJECT = "subject"
    BODY = "body"


class MatchType(str, Enum):
    """How an evaluator compares a normalized field with its operand."""

    EXACT = "EXACT"  # Whole value
    SUFFIX = "SUFFIX"  # Domain-style suffix (*@x.com, .x.com)
    CONTAINS = "CONTAINS"  # Free text
