"""
Diff between two collections of native filters.

Filters are compared by content only: ids are ignored and duplicates
collapse. The added and removed filters are then reordered so that similar
ones sit next to each other, which makes the textual diff show field-level
edits instead of whole filter replacements.
"""

import difflib
import logging
import time
from dataclasses import dataclass, field

import numpy as np

from filterctl.core.config import settings
from filterctl.core.observability import metrics
from filterctl.core.reporting import unified_diff
from filterctl.filters.assignment import hungarian
from filterctl.filters.models import Filter, render_filters

logger = logging.getLogger(__name__)


@dataclass
class FiltersDiff:
    """Filters to add and remove to go from the observed to the desired set."""

    added: list[Filter] = field(default_factory=list)
    removed: list[Filter] = field(default_factory=list)
    debug_info: bool = False
    context_lines: int | None = None

    @property
    def empty(self) -> bool:
        return not self.added and not self.removed

    def __str__(self) -> str:
        context = self.context_lines
        if context is None:
            context = settings.diff_context_lines

        removed = render_filters(self.removed, debug=self.debug_info)
        added = render_filters(self.added, debug=self.debug_info)
        return unified_diff(
            removed.splitlines(keepends=True), added.splitlines(keepends=True), context=context
        )


def diff_filters(
    observed: list[Filter],
    desired: list[Filter],
    debug_info: bool = False,
    context_lines: int | None = None,
) -> FiltersDiff:
    """
    Compute the diff between the observed and the desired filters.

    Args:
        observed: Filters currently present upstream
        desired: Filters that should be present
        debug_info: Include the search query and URL in the text rendering
        context_lines: Context lines of the unified diff (defaults to
                       settings.diff_context_lines)
    """
    start_time = time.time()

    added, removed = changed_filters(observed, desired)
    if added and removed:
        added, removed = reorder_with_hungarian(added, removed)

    duration = time.time() - start_time
    logger.debug(
        "Computed filters diff: %d added, %d removed, duration=%.3fs",
        len(added),
        len(removed),
        duration,
    )
    if settings.metrics_enabled:
        metrics.diff_duration_seconds.observe(duration)
        metrics.diff_assignment_cells.observe(len(added) * len(removed))

    return FiltersDiff(
        added=added, removed=removed, debug_info=debug_info, context_lines=context_lines
    )


def changed_filters(
    observed: list[Filter], desired: list[Filter]
) -> tuple[list[Filter], list[Filter]]:
    """
    Compute the set difference by content hash.

    Returns:
        Tuple of (added, removed): filters only in desired and filters only
        in observed, in hash order
    """
    upstream = _hashed_filters(observed)
    local = _hashed_filters(desired)

    added: list[Filter] = []
    removed: list[Filter] = []
    i, j = 0, 0
    while i < len(upstream) and j < len(local):
        ups_hash, ups = upstream[i]
        loc_hash, loc = local[j]
        if ups_hash < loc_hash:
            # Local is missing one filter
            removed.append(ups)
            i += 1
        elif ups_hash > loc_hash:
            # Upstream is missing one filter
            added.append(loc)
            j += 1
        else:
            i += 1
            j += 1

    removed.extend(f for _, f in upstream[i:])
    added.extend(f for _, f in local[j:])
    return added, removed


def _hashed_filters(filters: list[Filter]) -> list[tuple[str, Filter]]:
    # Gmail doesn't support duplicates: keep the first occurrence only.
    unique: dict[str, Filter] = {}
    for f in filters:
        unique.setdefault(f.content_hash(), f)
    return sorted(unique.items(), key=lambda item: item[0])


def reorder_with_hungarian(
    f1: list[Filter], f2: list[Filter]
) -> tuple[list[Filter], list[Filter]]:
    """Reorder two lists of filters so that similar filters share an index."""
    mapping = hungarian(cost_matrix(f1, f2))
    return reorder_with_mapping(f1, f2, mapping)


def cost_matrix(fs1: list[Filter], fs2: list[Filter]) -> np.ndarray:
    """
    Compute the dissimilarity of every pair of filters.

    The cost is 1 minus the similarity ratio of the rendered lines, with the
    filters of ``fs1`` as the first sequence of the matcher.
    """
    lines1 = [f.render().splitlines(keepends=True) for f in fs1]
    lines2 = [f.render().splitlines(keepends=True) for f in fs2]

    res = np.zeros((len(fs1), len(fs2)))
    matcher = difflib.SequenceMatcher(None, autojunk=False)
    for j, l2 in enumerate(lines2):
        # SequenceMatcher caches information about the second sequence.
        matcher.set_seq2(l2)
        for i, l1 in enumerate(lines1):
            matcher.set_seq1(l1)
            res[i, j] = 1.0 - matcher.ratio()
    return res


def reorder_with_mapping(
    f1: list[Filter], f2: list[Filter], mapping: list[int]
) -> tuple[list[Filter], list[Filter]]:
    """
    Put the matched pairs first, in row order, followed by the unmatched
    filters of each side in their original order.
    """
    res1: list[Filter] = []
    res2: list[Filter] = []
    matched2: set[int] = set()

    for i, j in enumerate(mapping):
        if j < 0:
            continue
        res1.append(f1[i])
        res2.append(f2[j])
        matched2.add(j)

    res1.extend(f for i, f in enumerate(f1) if i >= len(mapping) or mapping[i] < 0)
    res2.extend(f for j, f in enumerate(f2) if j not in matched2)
    return res1, res2
