"""
Tests for the rule compiler.

These tests verify:
- Action expansion (one label per native filter)
- Criteria splitting combined with action expansion
- Error collection across rules
- End to end compilation of a configuration, with named filters
- Compiler metrics
"""

import pytest

from filterctl.compiler.ast import Node, and_, leaf, not_
from filterctl.compiler.actions import generate_actions
from filterctl.compiler.compiler import compile_config, compile_rule, compile_rules
from filterctl.compiler.parser import ParsedRule
from filterctl.core.errors import CompilationError, ConfigError, MultiError
from filterctl.core.observability import metrics
from filterctl.domain.enums import Category, Function, Operation
from filterctl.filters.models import Actions as FilterActions
from filterctl.filters.models import Criteria, Filter
from filterctl.schemas.config import Actions
from tests.conftest import make_config

# =============================================================================
# Actions
# =============================================================================


class TestGenerateActions:
    """Test translation of rule actions."""

    def test_all_effects(self):
        actions = Actions(
            archive=True,
            delete=True,
            mark_read=True,
            star=True,
            mark_spam=False,
            mark_important=True,
            category=Category.PERSONAL,
            forward="foo@bar.com",
        )

        got = generate_actions(actions)

        assert got == [
            FilterActions(
                archive=True,
                delete=True,
                mark_read=True,
                star=True,
                mark_not_spam=True,
                mark_important=True,
                category=Category.PERSONAL,
                forward="foo@bar.com",
            )
        ]

    def test_mark_not_important(self):
        got = generate_actions(Actions(mark_important=False))
        assert got == [FilterActions(mark_not_important=True)]

    def test_unset_tristate_does_nothing(self):
        assert generate_actions(Actions()) == [FilterActions()]

    def test_labels_are_split(self):
        """The first filter carries every effect, the others only their label."""
        actions = Actions(archive=True, mark_read=True, labels=["label1", "label2", "label3"])

        got = generate_actions(actions)

        assert got == [
            FilterActions(archive=True, mark_read=True, add_label="label1"),
            FilterActions(add_label="label2"),
            FilterActions(add_label="label3"),
        ]

    def test_mark_spam_is_rejected(self):
        with pytest.raises(CompilationError, match="spam"):
            generate_actions(Actions(mark_spam=True))

    def test_aliases_are_accepted(self):
        actions = Actions.model_validate({"markRead": True, "markImportant": False})
        assert generate_actions(actions) == [
            FilterActions(mark_read=True, mark_not_important=True)
        ]


# =============================================================================
# Single rule
# =============================================================================


class TestCompileRule:
    """Test compilation of a single parsed rule."""

    def test_split_leaf(self):
        rule = ParsedRule(
            criteria=leaf(Function.FROM, "a", "b", "c", grouping=Operation.OR),
            actions=Actions(archive=True),
        )

        got = compile_rule(rule, size_limit=2)

        assert got == [
            Filter(criteria=Criteria(from_="{a b}"), action=FilterActions(archive=True)),
            Filter(criteria=Criteria(from_="c"), action=FilterActions(archive=True)),
        ]

    def test_or_without_children_is_an_error(self):
        rule = ParsedRule(criteria=Node(Operation.OR, ()), actions=Actions(archive=True))

        with pytest.raises(CompilationError, match="empty filter") as exc_info:
            compile_rule(rule, size_limit=20)

        assert exc_info.value.details == {"operation": "or"}

    def test_unsplittable_rule_is_kept_whole(self):
        rule = ParsedRule(
            criteria=and_(
                leaf(Function.FROM, "d", "e", grouping=Operation.AND),
                leaf(Function.LIST, "a", "b", grouping=Operation.AND),
                not_(leaf(Function.TO, "e")),
            ),
            actions=Actions(archive=True),
        )

        got = compile_rule(rule, size_limit=3)

        assert got == [
            Filter(
                criteria=Criteria(from_="(d e)", query="list:(a b) -to:e"),
                action=FilterActions(archive=True),
            )
        ]

    def test_split_nested_and(self):
        rule = ParsedRule(
            criteria=and_(
                leaf(Function.FROM, "d", "e", grouping=Operation.OR),
                leaf(Function.LIST, "a", "b", "c", grouping=Operation.OR),
                not_(leaf(Function.TO, "e")),
            ),
            actions=Actions(archive=True),
        )

        got = compile_rule(rule, size_limit=7)

        assert got == [
            Filter(
                criteria=Criteria(from_="{d e}", query="list:{a b} -to:e"),
                action=FilterActions(archive=True),
            ),
            Filter(
                criteria=Criteria(from_="{d e}", query="list:c -to:e"),
                action=FilterActions(archive=True),
            ),
        ]

    def test_split_criteria_and_labels(self):
        """Criteria-major product of split criteria and split actions."""
        rule = ParsedRule(
            criteria=leaf(Function.FROM, "a", "b", "c", grouping=Operation.OR),
            actions=Actions(labels=["x", "y"]),
        )

        got = compile_rule(rule, size_limit=2)

        assert [(f.criteria.from_, f.action.add_label) for f in got] == [
            ("{a b}", "x"),
            ("{a b}", "y"),
            ("c", "x"),
            ("c", "y"),
        ]

    def test_default_size_limit_keeps_small_rules(self):
        rule = ParsedRule(
            criteria=leaf(Function.FROM, "a", "b", "c", grouping=Operation.OR),
            actions=Actions(star=True),
        )
        assert len(compile_rule(rule)) == 1

    def test_every_filter_has_at_most_one_label(self):
        rule = ParsedRule(
            criteria=leaf(Function.SUBJECT, "x"),
            actions=Actions(labels=["a", "b", "c", "d"]),
        )
        got = compile_rule(rule)
        assert [f.action.add_label for f in got] == ["a", "b", "c", "d"]


# =============================================================================
# Rule lists
# =============================================================================


class TestCompileRules:
    """Test error collection across rules."""

    def test_rules_are_compiled_in_order(self):
        rules = [
            ParsedRule(criteria=leaf(Function.FROM, "a"), actions=Actions(archive=True)),
            ParsedRule(criteria=leaf(Function.TO, "b"), actions=Actions(star=True)),
        ]

        got = compile_rules(rules)

        assert [f.criteria for f in got] == [Criteria(from_="a"), Criteria(to="b")]

    def test_single_error_is_annotated(self):
        rules = [
            ParsedRule(criteria=leaf(Function.FROM, "a"), actions=Actions(archive=True)),
            ParsedRule(criteria=leaf(Function.TO, "b"), actions=Actions(mark_spam=True)),
        ]

        with pytest.raises(CompilationError) as exc_info:
            compile_rules(rules)

        assert "error generating rule #1" in exc_info.value.message
        assert exc_info.value.details["rule_index"] == 1

    def test_all_errors_are_reported(self):
        rules = [
            ParsedRule(criteria=leaf(Function.FROM, "a"), actions=Actions(mark_spam=True)),
            ParsedRule(criteria=leaf(Function.FROM, "b"), actions=Actions(archive=True)),
            ParsedRule(criteria=leaf(Function.QUERY, ""), actions=Actions(archive=True)),
        ]

        with pytest.raises(MultiError) as exc_info:
            compile_rules(rules)

        messages = [e.message for e in exc_info.value.errors]
        assert len(messages) == 2
        assert messages[0].startswith("error generating rule #0")
        assert messages[1].startswith("error generating rule #2")


# =============================================================================
# Whole configuration
# =============================================================================


class TestCompileConfig:
    """End to end compilation of a configuration."""

    def test_named_filters_are_resolved(self):
        config = make_config(
            rules=[
                {
                    "filter": {"and": [{"name": "me"}, {"from": "boss@x.com"}]},
                    "actions": {"markImportant": True, "labels": ["work"]},
                }
            ],
            filters=[
                {"name": "me", "filter": {"or": [{"to": "me@x.com"}, {"cc": "me@x.com"}]}}
            ],
            labels=[{"name": "work"}],
        )

        got = compile_config(config)

        assert got.filters == [
            Filter(
                criteria=Criteria(from_="boss@x.com", query="{to:me@x.com cc:me@x.com}"),
                action=FilterActions(mark_important=True, add_label="work"),
            )
        ]
        assert [label.name for label in got.labels] == ["work"]
        assert len(got.rules) == 1

    def test_rules_are_simplified(self):
        config = make_config(
            rules=[
                {
                    "filter": {"or": [{"from": "a"}, {"from": "b"}]},
                    "actions": {"archive": True},
                }
            ]
        )

        got = compile_config(config)

        assert got.filters[0].criteria == Criteria(from_="{a b}")

    def test_escaped_subject(self):
        config = make_config(
            rules=[
                {
                    "filter": {"subject": '"exact phrase"', "isEscaped": True},
                    "actions": {"archive": True},
                }
            ]
        )

        got = compile_config(config)

        assert got.filters[0].criteria == Criteria(subject='"exact phrase"')

    def test_deterministic(self):
        rules = [
            {
                "filter": {
                    "and": [
                        {"list": "l@x.com"},
                        {"or": [{"from": "a"}, {"not": {"to": "b"}}, {"from": "c"}]},
                    ]
                },
                "actions": {"labels": ["one", "two"]},
            }
        ]

        first = compile_config(make_config(rules=rules)).filters
        second = compile_config(make_config(rules=rules)).filters

        assert first == second
        assert [f.content_hash() for f in first] == [f.content_hash() for f in second]

    def test_invalid_labels_fail_compilation(self):
        config = make_config(
            rules=[{"filter": {"from": "a"}, "actions": {"archive": True}}],
            labels=[{"name": "/bad"}],
        )

        with pytest.raises(ConfigError):
            compile_config(config)

    def test_parse_errors_fail_compilation(self):
        config = make_config(rules=[{"filter": {}, "actions": {"archive": True}}])

        with pytest.raises(ConfigError, match="rule #0"):
            compile_config(config)

    def test_metrics_are_recorded(self):
        def sample(status):
            value = metrics.registry.get_sample_value(
                "filterctl_compilations_total", {"status": status}
            )
            return value or 0.0

        success_before = sample("success")
        error_before = sample("error")

        compile_config(make_config(rules=[{"filter": {"from": "a"}, "actions": {"star": True}}]))
        with pytest.raises(CompilationError):
            compile_config(
                make_config(rules=[{"filter": {"from": "a"}, "actions": {"markSpam": True}}])
            )

        assert sample("success") == success_before + 1
        assert sample("error") == error_before + 1
