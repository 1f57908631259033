"""
Categorization of local and remote filters for a merge.

Filters are first matched by full content (criteria and actions, ignoring
ids). Among the rest, filters with the same criteria on both sides are
conflicts: the same filter with different actions.
"""

from dataclasses import dataclass, field

from filterctl.filters.models import Filter


@dataclass(frozen=True)
class FilterConflict:
    """Same criteria on both sides, different actions."""

    local: Filter
    remote: Filter


@dataclass
class MergeCategories:
    # Identical on both sides
    matched: list[Filter] = field(default_factory=list)
    local_only: list[Filter] = field(default_factory=list)
    remote_only: list[Filter] = field(default_factory=list)
    conflicts: list[FilterConflict] = field(default_factory=list)


def categorize_merge(local: list[Filter], remote: list[Filter]) -> MergeCategories:
    """
    Categorize filters for a merge.

    Duplicates by content collapse on each side. Filters sharing the same
    criteria are paired in their original order; the ones left without a
    counterpart are reported as local or remote only. Every list follows the
    order of its input.
    """
    local_by_content = _unique_by_content(local)
    remote_by_content = _unique_by_content(remote)

    res = MergeCategories()
    res.matched = [f for h, f in local_by_content.items() if h in remote_by_content]

    local_rest = [f for h, f in local_by_content.items() if h not in remote_by_content]
    remote_rest = [f for h, f in remote_by_content.items() if h not in local_by_content]

    remote_by_criteria: dict[str, list[Filter]] = {}
    for f in remote_rest:
        remote_by_criteria.setdefault(f.criteria_hash(), []).append(f)

    paired: set[int] = set()
    for f in local_rest:
        candidates = remote_by_criteria.get(f.criteria_hash())
        if candidates:
            counterpart = candidates.pop(0)
            paired.add(id(counterpart))
            res.conflicts.append(FilterConflict(local=f, remote=counterpart))
        else:
            res.local_only.append(f)

    res.remote_only = [f for f in remote_rest if id(f) not in paired]
    return res


def _unique_by_content(filters: list[Filter]) -> dict[str, Filter]:
    res: dict[str, Filter] = {}
    for f in filters:
        res.setdefault(f.content_hash(), f)
    return res
