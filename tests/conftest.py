"""
Pytest configuration and shared fixtures for filterctl unit tests.

Provides:
- Config factories building declarative configurations from plain mappings
- Filter factories for the diff and merge tests
- Seeded random criteria trees and messages for property-style tests
"""

from __future__ import annotations

import os
import random
import sys
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]

# Add filterctl to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Tests never read env files; metrics stay on so their recording is exercised.
os.environ.setdefault("FILTERCTL_APP_ENV", "test")

import pytest  # noqa: E402 (import after path setup)

from filterctl.compiler.ast import CriteriaAST, Node, leaf  # noqa: E402
from filterctl.domain.enums import Function, Operation  # noqa: E402
from filterctl.filters.models import Actions, Criteria, Filter  # noqa: E402
from filterctl.schemas.config import Config, Message  # noqa: E402

# ============================================================================
# Config factories
# ============================================================================


def make_config(rules: list[dict[str, Any]], **kwargs: Any) -> Config:
    """Build a Config from plain rule mappings, as read from a config file."""
    return Config.model_validate({"version": "v1alpha3", "rules": rules, **kwargs})


@pytest.fixture
def config_factory():
    return make_config


# ============================================================================
# Filter factories
# ============================================================================


def make_filter(
    id: str = "",
    from_: str = "",
    to: str = "",
    subject: str = "",
    query: str = "",
    **actions: Any,
) -> Filter:
    return Filter(
        id=id,
        criteria=Criteria(from_=from_, to=to, subject=subject, query=query),
        action=Actions(**actions),
    )


@pytest.fixture
def filter_factory():
    return make_filter


# ============================================================================
# Random trees and messages
# ============================================================================

ADDRESSES = ["a@x.com", "b@x.com", "c@y.org", "d@y.org"]
WORDS = ["news", "invoice", "party", "report"]

_TREE_FUNCTIONS = [
    Function.FROM,
    Function.TO,
    Function.CC,
    Function.LIST,
    Function.SUBJECT,
    Function.HAS,
]


def random_tree(rng: random.Random, depth: int = 3) -> CriteriaAST:
    """Build a random criteria tree, evaluable by the test interpreter."""
    if depth == 0 or rng.random() < 0.3:
        function = rng.choice(_TREE_FUNCTIONS)
        pool = WORDS if function in (Function.SUBJECT, Function.HAS) else ADDRESSES
        args = rng.sample(pool, rng.randint(1, 3))
        grouping = rng.choice([Operation.AND, Operation.OR])
        return leaf(function, *args, grouping=grouping)

    operation = rng.choice([Operation.AND, Operation.OR, Operation.NOT])
    if operation == Operation.NOT:
        return Node(operation, (random_tree(rng, depth - 1),))
    children = tuple(random_tree(rng, depth - 1) for _ in range(rng.randint(1, 3)))
    return Node(operation, children)


def random_message(rng: random.Random) -> Message:
    return Message(
        from_=rng.choice(ADDRESSES),
        to=rng.sample(ADDRESSES, rng.randint(0, 2)),
        cc=rng.sample(ADDRESSES, rng.randint(0, 1)),
        lists=rng.sample(ADDRESSES, rng.randint(0, 1)),
        subject=" ".join(rng.sample(WORDS, rng.randint(0, 2))),
        body=" ".join(rng.sample(WORDS, rng.randint(0, 2))),
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)
