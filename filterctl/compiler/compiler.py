"""
Main Compiler for filterctl.

Compiles declarative rules into native Gmail filters:
- Parses and simplifies every rule criteria
- Splits criteria that are too big for Gmail
- Expands actions so that every filter applies at most one label

Compilation is deterministic: the same configuration always produces the
same filters, in the same order.
"""

import logging
import time
from dataclasses import dataclass

from filterctl.compiler.actions import generate_actions
from filterctl.compiler.generator import generate_criteria
from filterctl.compiler.parser import ParsedRule, parse_rules
from filterctl.compiler.splitter import split_criteria
from filterctl.core.config import settings
from filterctl.core.errors import CompilationError, FilterCtlError, combine_errors
from filterctl.core.observability import metrics
from filterctl.filters.models import Filter
from filterctl.labels.models import Label, labels_from_config, validate_labels
from filterctl.schemas.config import Config

logger = logging.getLogger(__name__)


@dataclass
class CompiledConfig:
    """Result of the compilation of a whole configuration."""

    rules: list[ParsedRule]
    filters: list[Filter]
    labels: list[Label]


def compile_config(config: Config, size_limit: int | None = None) -> CompiledConfig:
    """
    Compile a full configuration.

    Steps:
    1. Validate the declared labels
    2. Parse and simplify all the rules (resolving named filters)
    3. Compile every rule into native filters

    Args:
        config: Parsed declarative configuration
        size_limit: Size above which criteria are split (defaults to
                    settings.filter_size_limit)

    Raises:
        ConfigError: If the configuration is malformed
        CompilationError: If a rule cannot be translated
        MultiError: If several independent errors were found
    """
    start_time = time.time()
    logger.info("Starting compilation of %d rules", len(config.rules))

    try:
        labels = labels_from_config(config.labels)
        validate_labels(labels)
        rules = parse_rules(config)
        filters = compile_rules(rules, size_limit=size_limit)

        duration = time.time() - start_time
        logger.info(
            "Successfully compiled %d rules into %d filters, duration=%.3fs",
            len(rules),
            len(filters),
            duration,
        )
        _record_compiler_metrics("success", duration, len(filters))

        return CompiledConfig(rules=rules, filters=filters, labels=labels)

    except Exception:
        _record_compiler_metrics("error", time.time() - start_time, 0)
        raise


def compile_rules(rules: list[ParsedRule], size_limit: int | None = None) -> list[Filter]:
    """
    Compile a list of rules into native filters.

    Errors are collected across all the rules.

    Raises:
        CompilationError: If a single rule cannot be compiled
        MultiError: If several rules cannot be compiled
    """
    res: list[Filter] = []
    errors: list[Exception] = []

    for i, rule in enumerate(rules):
        try:
            res.extend(compile_rule(rule, size_limit=size_limit))
        except FilterCtlError as e:
            errors.append(
                CompilationError(
                    f"error generating rule #{i}: {e.message}",
                    details={"rule_index": i, **e.details},
                )
            )

    err = combine_errors(*errors)
    if err is not None:
        raise err
    return res


def compile_rule(rule: ParsedRule, size_limit: int | None = None) -> list[Filter]:
    """
    Compile a single rule into native filters.

    The result is the Cartesian product of the (possibly split) criteria and
    the expanded actions, criteria-major.

    Example:
        rule: from:{a b c} => labels [x, y], size_limit=2

        filters:
            from:{a b} => x
            from:{a b} => y
            from:c => x
            from:c => y
    """
    if size_limit is None:
        size_limit = settings.filter_size_limit

    trees = split_criteria(rule.criteria, size_limit)
    if not trees:
        raise CompilationError(
            "criteria produced an empty filter",
            details={"operation": str(rule.criteria.root_operation)},
        )

    criteria = [generate_criteria(c) for c in trees]
    actions = generate_actions(rule.actions)

    if len(criteria) > 1:
        logger.debug("Rule criteria split in %d filters", len(criteria))

    return [Filter(criteria=c, action=a) for c in criteria for a in actions]


def _record_compiler_metrics(status: str, duration: float, filter_count: int) -> None:
    """
    Record compiler metrics to Prometheus.

    Args:
        status: "success" or "error"
        duration: Compilation duration in seconds
        filter_count: Number of filters produced
    """
    if not settings.metrics_enabled:
        return

    metrics.compiler_compilations_total.labels(status=status).inc()
    metrics.compiler_duration_seconds.observe(duration)
    if status == "success":
        metrics.compiler_filters_count.observe(filter_count)
